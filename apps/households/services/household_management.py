"""
Household management service.

Creation, listing, switching and editing of households, plus the owner's
direct provisioning of new member accounts.
"""

import logging
from typing import Optional

from django.db import IntegrityError, transaction

from apps.accounts.models import User
from apps.accounts.services.credentials import CredentialStore, normalize_email, normalize_phone
from apps.accounts.services.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidPhoneError,
    MissingIdentifierError,
    PhoneAlreadyRegisteredError,
)
from apps.households.models import Household, HouseholdMember, HouseholdRole
from config.runtime import AppConfig

from .exceptions import HouseholdNotFoundError
from .membership import MembershipLedger

logger = logging.getLogger(__name__)


@transaction.atomic
def create_household(
    *,
    user_id,
    name: Optional[str] = None,
    currency: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> Household:
    """
    Create a household owned by ``user_id``.

    Name and currency fall back to the configured defaults. The new
    household only becomes primary when the user had none.
    """
    config = config or AppConfig.from_settings()
    ledger = MembershipLedger(config)

    household = Household.objects.create(
        name=(name or '').strip() or config.default_household_name,
        currency=((currency or '').strip() or config.default_household_currency).upper(),
    )
    ledger.add_member(household_id=household.id, user_id=user_id, role=HouseholdRole.OWNER)
    ledger.set_primary_household(user_id=user_id, household_id=household.id, only_if_empty=True)

    logger.info("Household %s created by %s", household.id, user_id)
    return household


def list_my_households(*, user_id):
    """Every household the user belongs to, oldest membership first."""
    primary_id = (
        User.objects.filter(id=user_id).values_list('primary_household_id', flat=True).first()
    )
    memberships = (
        HouseholdMember.objects
        .select_related('household')
        .filter(user_id=user_id)
        .order_by('created_at')
    )
    return [
        {
            'id': m.household.id,
            'name': m.household.name,
            'currency': m.household.currency,
            'role': m.role,
            'is_primary': m.household_id == primary_id,
        }
        for m in memberships
    ]


def switch_primary_household(*, user_id, household_id, config: Optional[AppConfig] = None) -> Household:
    ledger = MembershipLedger(config or AppConfig.from_settings())
    ledger.assert_member(household_id=household_id, user_id=user_id)
    ledger.set_primary_household(user_id=user_id, household_id=household_id)
    return ledger.get_household(household_id)


def update_household(
    *,
    owner_id,
    household_id,
    name: Optional[str] = None,
    currency: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> Household:
    ledger = MembershipLedger(config or AppConfig.from_settings())
    household = ledger.get_household(household_id)
    ledger.assert_owner(household_id=household.id, user_id=owner_id)

    update_fields = ['updated_at']
    if name is not None:
        household.name = name.strip()
        update_fields.append('name')
    if currency is not None:
        household.currency = currency.strip().upper()
        update_fields.append('currency')
    household.save(update_fields=update_fields)
    return household


def rename_my_household(*, user_id, name: str, config: Optional[AppConfig] = None) -> Household:
    """Rename the caller's resolved household."""
    ledger = MembershipLedger(config or AppConfig.from_settings())
    household = ledger.require_household_for_user(user_id)
    household.name = name.strip()
    household.save(update_fields=['name', 'updated_at'])
    return household


def _member_rows(household_id):
    memberships = (
        HouseholdMember.objects
        .select_related('user')
        .filter(household_id=household_id)
        .order_by('user__display_name')
    )
    return [
        {
            'user_id': m.user.id,
            'email': m.user.email or '',
            'display_name': m.user.display_name,
            'role': m.role,
        }
        for m in memberships
    ]


def list_members(*, household_id, user_id, config: Optional[AppConfig] = None):
    ledger = MembershipLedger(config or AppConfig.from_settings())
    ledger.get_household(household_id)
    ledger.assert_member(household_id=household_id, user_id=user_id)
    return _member_rows(household_id)


def list_my_members(*, user_id, config: Optional[AppConfig] = None):
    ledger = MembershipLedger(config or AppConfig.from_settings())
    household = ledger.require_household_for_user(user_id)
    return _member_rows(household.id)


def search_user_for_invite(
    *,
    user_id,
    identifier: str,
    household_id=None,
    config: Optional[AppConfig] = None,
) -> dict:
    """
    Report whether ``identifier`` (email or phone) belongs to an account
    and whether that account is already in the household.
    """
    config = config or AppConfig.from_settings()
    ledger = MembershipLedger(config)
    credentials = CredentialStore(config)

    if household_id:
        household = ledger.get_household(household_id)
        ledger.assert_member(household_id=household.id, user_id=user_id)
    else:
        household = ledger.require_household_for_user(user_id)

    identifier = str(identifier or '')
    if '@' in identifier:
        method = 'email'
        user = credentials.find_by_email(identifier)
    else:
        method = 'phone'
        user = credentials.find_by_phone(identifier) if normalize_phone(identifier) else None

    if user is None:
        return {
            'exists': False,
            'is_already_member': False,
            'can_invite': True,
            'display_name': None,
            'method': method,
        }

    already = ledger.is_member(household_id=household.id, user_id=user.id)
    return {
        'exists': True,
        'is_already_member': already,
        'can_invite': not already,
        'display_name': user.display_name,
        'method': method,
    }


def register_member(
    *,
    owner_id,
    password: str,
    display_name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    config: Optional[AppConfig] = None,
):
    """
    Create an account directly inside the owner's resolved household.

    The new user joins as a member with that household as primary.

    Returns:
        (household, user) tuple

    Raises:
        HouseholdNotFoundError: Owner has no household
        NotHouseholdOwnerError: Caller is not an owner
        MissingIdentifierError / InvalidPhoneError: Bad identifiers
        EmailAlreadyRegisteredError / PhoneAlreadyRegisteredError: Taken
    """
    config = config or AppConfig.from_settings()
    ledger = MembershipLedger(config)
    credentials = CredentialStore(config)

    household = ledger.resolve_household_for_user(owner_id)
    if household is None:
        raise HouseholdNotFoundError()
    ledger.assert_owner(household_id=household.id, user_id=owner_id)

    email = normalize_email(email)
    raw_phone = str(phone or '').strip()
    if not email and not raw_phone:
        raise MissingIdentifierError()
    if raw_phone and not normalize_phone(raw_phone):
        raise InvalidPhoneError()

    try:
        with transaction.atomic():
            if email and credentials.email_taken(email):
                raise EmailAlreadyRegisteredError()
            if raw_phone and credentials.phone_taken(raw_phone):
                raise PhoneAlreadyRegisteredError()

            user = credentials.create_user(
                email=email or None,
                phone=raw_phone or None,
                display_name=display_name,
                password=password,
            )
            ledger.add_member(household_id=household.id, user_id=user.id, role=HouseholdRole.MEMBER)
            ledger.set_primary_household(user_id=user.id, household_id=household.id)
            user.primary_household_id = household.id
    except IntegrityError:
        raise EmailAlreadyRegisteredError('Account already registered')

    logger.info("Owner %s registered member %s into household %s", owner_id, user.id, household.id)
    return household, user

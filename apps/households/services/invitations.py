"""
Invitation resolver.

Creates household invitations by email or phone and moves them through
pending -> accepted | revoked | expired. Only one pending invitation may
exist per household and identifier; the database enforces that with partial
unique constraints and this module reports the violation as a conflict.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services.credentials import CredentialStore, normalize_email, normalize_phone
from apps.accounts.services.exceptions import InvalidPhoneError, UnknownUserError
from apps.accounts.services.sessions import hash_token
from apps.households.models import (
    Household,
    HouseholdInvitation,
    HouseholdRole,
    InvitationStatus,
)
from config.runtime import AppConfig

from .exceptions import (
    AlreadyMemberError,
    DuplicatePendingInvitationError,
    InvitationAlreadyUsedError,
    InvitationExpiredError,
    InvitationNotFoundError,
    InvitationNotPendingError,
    InvitationTargetRequiredError,
)
from .membership import MembershipLedger

logger = logging.getLogger(__name__)


def mask_phone(phone: str) -> str:
    """Keep the last four digits only: ``+5355512345`` becomes ``***2345``."""
    return '***' + phone[-4:]


@dataclass(frozen=True)
class IssuedInvitation:
    """A freshly created invitation and its one-time plaintext token."""
    invitation: HouseholdInvitation
    token: str
    email: Optional[str]
    phone: Optional[str]

    @property
    def method(self) -> str:
        return 'email' if self.email else 'phone'


class InvitationResolver:
    def __init__(
        self,
        config: AppConfig,
        *,
        ledger: Optional[MembershipLedger] = None,
        credentials: Optional[CredentialStore] = None,
    ):
        self.config = config
        self.ledger = ledger or MembershipLedger(config)
        self.credentials = credentials or CredentialStore(config)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _normalize_target(self, email, phone):
        normalized_email = normalize_email(email) if email else ''
        normalized_phone = ''
        if phone:
            normalized_phone = normalize_phone(phone)
            if not normalized_phone:
                raise InvalidPhoneError()
        if not normalized_email and not normalized_phone:
            raise InvitationTargetRequiredError()
        return normalized_email or None, normalized_phone or None

    @staticmethod
    def _pending_unexpired():
        return HouseholdInvitation.objects.filter(status=InvitationStatus.PENDING).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now())
        )

    @staticmethod
    def _expire(invitation: HouseholdInvitation) -> None:
        HouseholdInvitation.objects.filter(
            id=invitation.id, status=InvitationStatus.PENDING
        ).update(status=InvitationStatus.EXPIRED)
        invitation.status = InvitationStatus.EXPIRED

    def _create(self, *, household: Household, inviter_id, email, phone) -> IssuedInvitation:
        token = secrets.token_urlsafe(32)
        phone_hash = self.credentials.phone_lookup_hash(phone) if phone else None
        expires_at = None
        if self.config.invitation_ttl is not None:
            expires_at = timezone.now() + self.config.invitation_ttl

        try:
            with transaction.atomic():
                invitation = HouseholdInvitation.objects.create(
                    household=household,
                    email=email,
                    phone_lookup_hash=phone_hash,
                    invited_identifier=email or mask_phone(phone),
                    token_hash=hash_token(token),
                    status=InvitationStatus.PENDING,
                    invited_by_id=inviter_id,
                    expires_at=expires_at,
                )
        except IntegrityError:
            raise DuplicatePendingInvitationError()

        logger.info("Invitation %s created for household %s", invitation.id, household.id)
        return IssuedInvitation(invitation=invitation, token=token, email=email, phone=phone)

    def _accept(self, invitation: HouseholdInvitation, user: User) -> Optional[Household]:
        """
        Mark a pending invitation accepted, add the membership and make the
        household primary. Returns None if another request consumed the
        invitation first.
        """
        with transaction.atomic():
            claimed = HouseholdInvitation.objects.filter(
                id=invitation.id, status=InvitationStatus.PENDING
            ).update(
                status=InvitationStatus.ACCEPTED,
                accepted_at=timezone.now(),
                accepted_by_id=user.id,
            )
            if not claimed:
                return None

            self.ledger.add_member(
                household_id=invitation.household_id,
                user_id=user.id,
                role=HouseholdRole.MEMBER,
            )
            self.ledger.set_primary_household(user_id=user.id, household_id=invitation.household_id)

        user.primary_household_id = invitation.household_id
        logger.info("Invitation %s accepted by %s", invitation.id, user.id)
        return Household.objects.get(id=invitation.household_id)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def invite(self, *, inviter_id, email=None, phone=None) -> IssuedInvitation:
        """Invite into the inviter's resolved household. Any member may invite."""
        email, phone = self._normalize_target(email, phone)
        household = self.ledger.require_household_for_user(inviter_id)
        return self._create(household=household, inviter_id=inviter_id, email=email, phone=phone)

    def invite_to_household(self, *, owner_id, household_id, email=None, phone=None) -> IssuedInvitation:
        """
        Owner-only invite into a specific household.

        Raises:
            AlreadyMemberError: The identified user already belongs to it
            DuplicatePendingInvitationError: A pending invite exists for the target
        """
        email, phone = self._normalize_target(email, phone)
        household = self.ledger.get_household(household_id)
        self.ledger.assert_owner(household_id=household.id, user_id=owner_id)

        for existing in (
            self.credentials.find_by_email(email) if email else None,
            self.credentials.find_by_phone(phone) if phone else None,
        ):
            if existing is not None and self.ledger.is_member(
                household_id=household.id, user_id=existing.id
            ):
                raise AlreadyMemberError()

        return self._create(household=household, inviter_id=owner_id, email=email, phone=phone)

    # -------------------------------------------------------------------------
    # Acceptance
    # -------------------------------------------------------------------------

    def accept_by_token(self, *, user_id, token) -> Household:
        """
        Accept an invitation using its plaintext token.

        Accepting an invitation that is no longer pending succeeds when the
        user already belongs to its household (for example after it was
        auto-accepted at registration); the household becomes primary again.

        Raises:
            InvitationNotFoundError: No invitation for the token
            InvitationAlreadyUsedError: Consumed, revoked or expired for someone else
            InvitationExpiredError: Was pending but past its expiry
        """
        if not token:
            raise InvitationNotFoundError()

        invitation = (
            HouseholdInvitation.objects
            .select_related('household')
            .filter(token_hash=hash_token(str(token)))
            .first()
        )
        if invitation is None:
            raise InvitationNotFoundError()

        user = User.objects.filter(id=user_id).first()
        if user is None:
            raise UnknownUserError("User not found")

        if invitation.status == InvitationStatus.PENDING and invitation.is_expired():
            self._expire(invitation)
            raise InvitationExpiredError()

        if invitation.status == InvitationStatus.PENDING:
            household = self._accept(invitation, user)
            if household is not None:
                return household

        if self.ledger.is_member(household_id=invitation.household_id, user_id=user.id):
            self.ledger.set_primary_household(user_id=user.id, household_id=invitation.household_id)
            return invitation.household

        raise InvitationAlreadyUsedError()

    def _auto_accept(self, invitations, user: User) -> Optional[Household]:
        matches: List[HouseholdInvitation] = list(invitations.order_by('-created_at')[:2])
        if len(matches) != 1:
            return None
        return self._accept(matches[0], user)

    def auto_accept_by_email(self, *, user: User, email) -> Optional[Household]:
        """
        Accept the single pending invitation addressed to ``email``.

        Zero or several matches leave everything untouched; the user then has
        to accept explicitly by token.
        """
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self._auto_accept(self._pending_unexpired().filter(email=normalized), user)

    def auto_accept_by_phone(self, *, user: User, phone) -> Optional[Household]:
        normalized = normalize_phone(phone)
        if not normalized:
            return None
        lookup_hash = self.credentials.phone_lookup_hash(normalized)
        return self._auto_accept(
            self._pending_unexpired().filter(phone_lookup_hash=lookup_hash), user
        )

    # -------------------------------------------------------------------------
    # Owner views
    # -------------------------------------------------------------------------

    def revoke(self, *, owner_id, household_id, invitation_id) -> HouseholdInvitation:
        """
        Revoke a pending invitation.

        An invitation found to be past its expiry is marked expired instead,
        and the revoke fails.
        """
        invitation = HouseholdInvitation.objects.filter(
            id=invitation_id, household_id=household_id
        ).first()
        if invitation is None:
            raise InvitationNotFoundError()

        self.ledger.assert_owner(household_id=household_id, user_id=owner_id)

        if invitation.status != InvitationStatus.PENDING:
            raise InvitationNotPendingError()

        if invitation.is_expired():
            self._expire(invitation)
            raise InvitationExpiredError()

        revoked = HouseholdInvitation.objects.filter(
            id=invitation.id, status=InvitationStatus.PENDING
        ).update(status=InvitationStatus.REVOKED)
        if not revoked:
            raise InvitationNotPendingError()

        invitation.status = InvitationStatus.REVOKED
        logger.info("Invitation %s revoked by %s", invitation.id, owner_id)
        return invitation

    def list_for_owner(self, *, owner_id, household_id):
        """All invitations of a household, newest first. Expires stale ones first."""
        self.ledger.get_household(household_id)
        self.ledger.assert_owner(household_id=household_id, user_id=owner_id)

        HouseholdInvitation.objects.filter(
            household_id=household_id,
            status=InvitationStatus.PENDING,
            expires_at__isnull=False,
            expires_at__lte=timezone.now(),
        ).update(status=InvitationStatus.EXPIRED)

        return list(
            HouseholdInvitation.objects
            .filter(household_id=household_id)
            .order_by('-created_at')
        )

"""
Household membership ledger.

Tracks who belongs to which household, in what role, and which household
is primary for each user. Owner checks and last-owner protection live here.
"""

import logging
from typing import Optional

from django.db import transaction

from apps.accounts.models import User
from apps.households.models import Household, HouseholdMember, HouseholdRole
from config.runtime import AppConfig

from .exceptions import (
    CannotRemoveSelfError,
    HouseholdNotFoundError,
    InvalidRoleError,
    LastOwnerError,
    MemberNotFoundError,
    NotHouseholdMemberError,
    NotHouseholdOwnerError,
    NoHouseholdError,
)

logger = logging.getLogger(__name__)


class MembershipLedger:
    def __init__(self, config: AppConfig):
        self.config = config

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_household(self, household_id, *, for_update: bool = False) -> Household:
        qs = Household.objects.all()
        if for_update:
            qs = qs.select_for_update()
        household = qs.filter(id=household_id).first()
        if household is None:
            raise HouseholdNotFoundError()
        return household

    def is_member(self, *, household_id, user_id) -> bool:
        return HouseholdMember.objects.filter(household_id=household_id, user_id=user_id).exists()

    def earliest_household_id(self, user_id):
        """Household of the user's oldest remaining membership, or None."""
        return (
            HouseholdMember.objects
            .filter(user_id=user_id)
            .order_by('created_at')
            .values_list('household_id', flat=True)
            .first()
        )

    def resolve_household_for_user(self, user_id) -> Optional[Household]:
        """
        The user's primary household if they still belong to it, else the
        household of their earliest membership, else None.
        """
        primary_id = (
            User.objects
            .filter(id=user_id)
            .values_list('primary_household_id', flat=True)
            .first()
        )
        if primary_id:
            membership = (
                HouseholdMember.objects
                .select_related('household')
                .filter(user_id=user_id, household_id=primary_id)
                .first()
            )
            if membership is not None:
                return membership.household

        membership = (
            HouseholdMember.objects
            .select_related('household')
            .filter(user_id=user_id)
            .order_by('created_at')
            .first()
        )
        return membership.household if membership else None

    def require_household_for_user(self, user_id) -> Household:
        household = self.resolve_household_for_user(user_id)
        if household is None:
            raise HouseholdNotFoundError()
        return household

    def require_household_access(self, user_id) -> Household:
        """Like ``require_household_for_user`` but a missing household is Forbidden."""
        household = self.resolve_household_for_user(user_id)
        if household is None:
            raise NoHouseholdError()
        return household

    def assert_member(self, *, household_id, user_id) -> HouseholdMember:
        membership = HouseholdMember.objects.filter(
            household_id=household_id, user_id=user_id
        ).first()
        if membership is None:
            raise NotHouseholdMemberError()
        return membership

    def assert_owner(self, *, household_id, user_id) -> HouseholdMember:
        """
        Require ``user_id`` to be an owner of the household.

        Households left with no owner at all promote their earliest member
        the first time that member attempts an owner-only action.

        Raises:
            NotHouseholdMemberError: User is not in the household
            NotHouseholdOwnerError: User is a plain member
        """
        members = HouseholdMember.objects.filter(household_id=household_id)

        if not members.filter(role=HouseholdRole.OWNER).exists():
            first = members.order_by('created_at').first()
            if first is not None and str(first.user_id) == str(user_id):
                HouseholdMember.objects.filter(id=first.id).update(role=HouseholdRole.OWNER)
                logger.info(
                    "Promoted earliest member %s to owner of ownerless household %s",
                    user_id, household_id,
                )

        membership = members.filter(user_id=user_id).first()
        if membership is None:
            raise NotHouseholdMemberError()
        if membership.role != HouseholdRole.OWNER:
            raise NotHouseholdOwnerError()
        return membership

    # -------------------------------------------------------------------------
    # Primitives used by other services
    # -------------------------------------------------------------------------

    def add_member(self, *, household_id, user_id, role=HouseholdRole.MEMBER) -> HouseholdMember:
        """Ensure a membership row exists; an existing row keeps its role."""
        membership, _ = HouseholdMember.objects.get_or_create(
            household_id=household_id,
            user_id=user_id,
            defaults={'role': role},
        )
        return membership

    def set_primary_household(self, *, user_id, household_id, only_if_empty: bool = False) -> None:
        qs = User.objects.filter(id=user_id)
        if only_if_empty:
            qs = qs.filter(primary_household__isnull=True)
        qs.update(primary_household_id=household_id)

    # -------------------------------------------------------------------------
    # Owner operations
    # -------------------------------------------------------------------------

    def _owner_count(self, household_id) -> int:
        # Lock owner rows so concurrent downgrades are serialised.
        return len(
            HouseholdMember.objects
            .select_for_update()
            .filter(household_id=household_id, role=HouseholdRole.OWNER)
        )

    @transaction.atomic
    def set_member_role(self, *, owner_id, household_id, member_user_id, role) -> HouseholdMember:
        """
        Change a member's role.

        No-op when the role is unchanged. Downgrading the last owner is
        rejected.

        Raises:
            InvalidRoleError: Role is neither owner nor member
            HouseholdNotFoundError: Household does not exist
            NotHouseholdMemberError / NotHouseholdOwnerError: Caller not an owner
            MemberNotFoundError: Target is not in the household
            LastOwnerError: Target is the only owner and would become a member
        """
        if role not in HouseholdRole.values:
            raise InvalidRoleError()

        self.get_household(household_id, for_update=True)
        self.assert_owner(household_id=household_id, user_id=owner_id)

        member = (
            HouseholdMember.objects
            .select_for_update()
            .filter(household_id=household_id, user_id=member_user_id)
            .first()
        )
        if member is None:
            raise MemberNotFoundError()

        if member.role == role:
            return member

        if member.role == HouseholdRole.OWNER and role == HouseholdRole.MEMBER:
            if self._owner_count(household_id) <= 1:
                raise LastOwnerError()

        member.role = role
        member.save(update_fields=['role'])
        return member

    @transaction.atomic
    def remove_member(self, *, owner_id, household_id, member_user_id) -> None:
        """
        Remove a member from the household.

        If the household was the removed user's primary, their primary moves
        to their earliest remaining membership, or to none.
        """
        if str(member_user_id) == str(owner_id):
            raise CannotRemoveSelfError()

        self.get_household(household_id, for_update=True)
        self.assert_owner(household_id=household_id, user_id=owner_id)

        member = (
            HouseholdMember.objects
            .select_for_update()
            .filter(household_id=household_id, user_id=member_user_id)
            .first()
        )
        if member is None:
            raise MemberNotFoundError()

        if member.role == HouseholdRole.OWNER and self._owner_count(household_id) <= 1:
            raise LastOwnerError('Cannot remove the last owner')

        member.delete()

        removed = User.objects.select_for_update().filter(id=member_user_id).first()
        if removed is not None and str(removed.primary_household_id) == str(household_id):
            removed.primary_household_id = self.earliest_household_id(removed.id)
            removed.save(update_fields=['primary_household', 'updated_at'])

    @transaction.atomic
    def delete_household(self, *, owner_id, household_id) -> None:
        """
        Delete a household and everything scoped to it.

        Memberships, invitations, lists and expenses go with it. Users whose
        primary household was this one get their earliest remaining
        membership as primary.
        """
        household = self.get_household(household_id, for_update=True)
        self.assert_owner(household_id=household_id, user_id=owner_id)

        affected_user_ids = list(
            HouseholdMember.objects
            .filter(household_id=household_id)
            .values_list('user_id', flat=True)
            .distinct()
        )

        household.delete()

        for user in User.objects.select_for_update().filter(
            id__in=affected_user_ids, primary_household__isnull=True
        ):
            user.primary_household_id = self.earliest_household_id(user.id)
            user.save(update_fields=['primary_household', 'updated_at'])

        logger.info("Household %s deleted by %s", household_id, owner_id)

"""Services for households business logic."""

from .exceptions import (
    HouseholdsServiceError,
    HouseholdNotFoundError,
    MemberNotFoundError,
    InvitationNotFoundError,
    NotHouseholdMemberError,
    NotHouseholdOwnerError,
    LastOwnerError,
    CannotRemoveSelfError,
    AlreadyMemberError,
    DuplicatePendingInvitationError,
    InvitationAlreadyUsedError,
    InvitationNotPendingError,
    InvitationExpiredError,
    InvitationTargetRequiredError,
    InvalidRoleError,
    NoHouseholdError,
)
from .membership import MembershipLedger
from .invitations import InvitationResolver, IssuedInvitation
from .household_management import (
    create_household,
    list_my_households,
    switch_primary_household,
    update_household,
    rename_my_household,
    list_members,
    list_my_members,
    search_user_for_invite,
    register_member,
)

__all__ = [
    # Exceptions
    'HouseholdsServiceError',
    'HouseholdNotFoundError',
    'MemberNotFoundError',
    'InvitationNotFoundError',
    'NotHouseholdMemberError',
    'NotHouseholdOwnerError',
    'LastOwnerError',
    'CannotRemoveSelfError',
    'AlreadyMemberError',
    'DuplicatePendingInvitationError',
    'InvitationAlreadyUsedError',
    'InvitationNotPendingError',
    'InvitationExpiredError',
    'InvitationTargetRequiredError',
    'InvalidRoleError',
    'NoHouseholdError',
    # Components
    'MembershipLedger',
    'InvitationResolver',
    'IssuedInvitation',
    # Services
    'create_household',
    'list_my_households',
    'switch_primary_household',
    'update_household',
    'rename_my_household',
    'list_members',
    'list_my_members',
    'search_user_for_invite',
    'register_member',
]

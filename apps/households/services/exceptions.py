"""
Domain-specific exceptions for households app.

These exceptions represent business rule violations. They propagate out of
the views and are rendered by the project's exception handler.
"""

from config.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)


class HouseholdsServiceError(DomainError):
    """Base exception for all households service errors."""
    pass


class HouseholdNotFoundError(HouseholdsServiceError, NotFoundError):
    """Raised when a household does not exist or the user has none."""
    default_message = 'Household not found'


class MemberNotFoundError(HouseholdsServiceError, NotFoundError):
    default_message = 'Member not found'


class InvitationNotFoundError(HouseholdsServiceError, NotFoundError):
    default_message = 'Invitation not found'


class NotHouseholdMemberError(HouseholdsServiceError, ForbiddenError):
    """Raised when a user acts on a household they do not belong to."""
    default_message = 'You are not a member of this household'


class NotHouseholdOwnerError(HouseholdsServiceError, ForbiddenError):
    default_message = 'Only a household owner can perform this action'


class LastOwnerError(HouseholdsServiceError, ForbiddenError):
    """Raised when a change would leave the household without an owner."""
    default_message = 'Household must retain an owner'


class CannotRemoveSelfError(HouseholdsServiceError, ConflictError):
    default_message = 'You cannot remove yourself from the household'


class AlreadyMemberError(HouseholdsServiceError, ConflictError):
    default_message = 'User is already a member of this household'


class DuplicatePendingInvitationError(HouseholdsServiceError, ConflictError):
    """Raised when a pending invitation already exists for the same target."""
    default_message = 'A pending invitation already exists'


class InvitationAlreadyUsedError(HouseholdsServiceError, ConflictError):
    default_message = 'Invitation already used'


class InvitationNotPendingError(HouseholdsServiceError, ConflictError):
    default_message = 'Only pending invitations can be revoked'


class InvitationExpiredError(HouseholdsServiceError, ConflictError):
    default_message = 'Invitation has expired'


class InvitationTargetRequiredError(HouseholdsServiceError, BadRequestError):
    default_message = 'Email or phone is required'


class InvalidRoleError(HouseholdsServiceError, BadRequestError):
    default_message = 'Role must be owner or member'


class NoHouseholdError(HouseholdsServiceError, ForbiddenError):
    """Raised when household-scoped data is requested by a user with no household."""
    default_message = 'User is not associated with a household'

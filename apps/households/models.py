# ==========================================
# apps/households/models.py
# ==========================================

from django.db import models
from django.db.models import Q
from django.utils import timezone
import uuid


class HouseholdRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    MEMBER = 'member', 'Member'


class InvitationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    REVOKED = 'revoked', 'Revoked'
    EXPIRED = 'expired', 'Expired'


class Household(models.Model):
    """A named group of users sharing lists and expenses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    currency = models.CharField(max_length=3)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'households'
        ordering = ['created_at']

    def __str__(self):
        return self.name


class HouseholdMember(models.Model):
    """User membership in a household with role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    household = models.ForeignKey(Household, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='household_memberships')
    role = models.CharField(max_length=20, choices=HouseholdRole.choices, default=HouseholdRole.MEMBER)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'household_members'
        constraints = [
            models.UniqueConstraint(
                fields=['household', 'user'],
                name='uq_household_member_household_user',
            ),
        ]
        indexes = [
            models.Index(fields=['household', 'role']),
            models.Index(fields=['user', 'created_at']),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.household.name} ({self.role})"


class HouseholdInvitation(models.Model):
    """
    Invitation to join a household, addressed to an email or to a phone
    lookup hash. Only a hash of the invitation token is stored.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    household = models.ForeignKey(Household, on_delete=models.CASCADE, related_name='invitations')
    email = models.CharField(max_length=320, null=True, blank=True, db_index=True)
    phone_lookup_hash = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    # Email, or a masked phone, shown to owners.
    invited_identifier = models.CharField(max_length=320, null=True, blank=True)
    token_hash = models.CharField(max_length=64, unique=True)
    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING,
    )
    invited_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_household_invitations',
    )
    accepted_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='accepted_household_invitations',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'household_invitations'
        constraints = [
            models.UniqueConstraint(
                fields=['household', 'email'],
                condition=Q(status='pending', email__isnull=False),
                name='uq_household_invitation_household_email_pending',
            ),
            models.UniqueConstraint(
                fields=['household', 'phone_lookup_hash'],
                condition=Q(status='pending', phone_lookup_hash__isnull=False),
                name='uq_household_invitation_household_phone_pending',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Invitation to {self.household.name} ({self.status})"

    @property
    def is_pending(self):
        return self.status == InvitationStatus.PENDING

    def is_expired(self, now=None):
        return self.expires_at is not None and self.expires_at <= (now or timezone.now())

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.db.models import Q
from django.utils import timezone
import uuid


class UserManager(BaseUserManager):
    """User manager for accounts identified by email and/or phone."""

    def create_user(self, email=None, password=None, **extra_fields):
        email = str(email or '').strip().lower() or None
        if not email and not extra_fields.get('phone_lookup_hash'):
            raise ValueError('Email or phone is required')

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Account identified by an email, a phone number, or both.

    The phone is never stored in clear text: ``phone_encrypted`` holds the
    AES-GCM ciphertext and ``phone_lookup_hash`` a keyed HMAC used for
    equality lookups.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=320, null=True, blank=True)
    phone_encrypted = models.CharField(max_length=512, null=True, blank=True)
    phone_lookup_hash = models.CharField(max_length=64, unique=True, null=True, blank=True)
    display_name = models.CharField(max_length=120)

    # Household shown by default; membership is tracked separately.
    primary_household = models.ForeignKey(
        'households.Household',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['display_name']

    class Meta:
        db_table = 'users'
        constraints = [
            models.CheckConstraint(
                condition=Q(email__isnull=False) | Q(phone_lookup_hash__isnull=False),
                name='users_email_or_phone_present',
            ),
        ]

    def __str__(self):
        return self.email or self.display_name

    def get_display_name(self):
        return self.display_name or (self.email or '').split('@')[0]


class AuthSession(models.Model):
    """
    A refresh-token session.

    Only SHA-256 hashes of refresh tokens are stored. The previous hash is
    kept after rotation so a replayed token can be recognised.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='auth_sessions')
    refresh_token_hash = models.CharField(max_length=64, unique=True)
    previous_refresh_token_hash = models.CharField(
        max_length=64, null=True, blank=True, db_index=True
    )
    expires_at = models.DateTimeField()
    rotated_at = models.DateTimeField(null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'auth_sessions'
        ordering = ['-created_at']

    def __str__(self):
        return f"Session {self.id} for {self.user_id}"

    @property
    def is_revoked(self):
        return self.revoked_at is not None

    def is_expired(self, now=None):
        return self.expires_at <= (now or timezone.now())

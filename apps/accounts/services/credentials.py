"""
Credential store.

Normalises identifiers, encrypts phone numbers and finds users by email
or phone. Password hashing goes through Django's configured hashers.
"""

import base64
import binascii
import hashlib
import hmac
import os
import re
from typing import Optional
from uuid import UUID

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from django.db import transaction

from apps.accounts.models import User
from config.runtime import AppConfig

from .exceptions import (
    EmailAlreadyRegisteredError,
    IdentifierRequiredError,
    InvalidDisplayNameError,
    InvalidEmailError,
    InvalidPhoneError,
    MissingIdentifierError,
    PhoneAlreadyRegisteredError,
    PhoneAuthUnavailableError,
    UnknownUserError,
)


E164_PHONE_RE = re.compile(r'\+[1-9]\d{7,14}')
LOCAL_PHONE_RE = re.compile(r'\d{6,15}')

PHONE_CIPHER_VERSION = 'v1'
GCM_IV_BYTES = 12
GCM_TAG_BYTES = 16

# Marks an omitted profile field, as opposed to an explicit None.
UNSET = object()


def normalize_email(value) -> str:
    return str(value or '').strip().lower()


def normalize_phone(value) -> str:
    """
    Normalise a phone number to E.164 (``+`` and 8-15 digits) or to bare
    local digits (6-15 digits). Spaces, dashes and parentheses are dropped.

    Returns an empty string when the input is not a usable phone number.
    """
    raw = str(value or '').strip()
    if not raw:
        return ''

    has_plus = raw.startswith('+')
    digits = re.sub(r'[^0-9]', '', raw)
    if not digits:
        return ''

    if has_plus:
        normalized = f'+{digits}'
        return normalized if E164_PHONE_RE.fullmatch(normalized) else ''
    return digits if LOCAL_PHONE_RE.fullmatch(digits) else ''


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def _b64url_decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + '=' * (-len(data) % 4))


class CredentialStore:
    """Lookup and persistence of user credentials."""

    def __init__(self, config: AppConfig):
        self.config = config

    # -------------------------------------------------------------------------
    # Phone encryption
    # -------------------------------------------------------------------------

    def _phone_key(self) -> bytes:
        key = self.config.phone_encryption_key
        if key is None:
            raise PhoneAuthUnavailableError()
        return key

    def phone_lookup_hash(self, normalized_phone: str) -> str:
        """Deterministic HMAC-SHA256 of a normalised phone, hex encoded."""
        key = self._phone_key()
        return hmac.new(key, normalized_phone.encode('utf-8'), hashlib.sha256).hexdigest()

    def encrypt_phone(self, normalized_phone: str) -> str:
        """Encrypt as ``v1:<iv>:<tag>:<ciphertext>`` (unpadded base64url parts)."""
        key = self._phone_key()
        iv = os.urandom(GCM_IV_BYTES)
        sealed = AESGCM(key).encrypt(iv, normalized_phone.encode('utf-8'), None)
        ciphertext, tag = sealed[:-GCM_TAG_BYTES], sealed[-GCM_TAG_BYTES:]
        return ':'.join([
            PHONE_CIPHER_VERSION,
            _b64url_encode(iv),
            _b64url_encode(tag),
            _b64url_encode(ciphertext),
        ])

    def decrypt_phone(self, blob: Optional[str]) -> Optional[str]:
        """Inverse of ``encrypt_phone``; ``None`` on any failure."""
        key = self.config.phone_encryption_key
        if key is None:
            return None

        raw = str(blob or '').strip()
        if not raw:
            return None

        parts = raw.split(':')
        if len(parts) != 4 or parts[0] != PHONE_CIPHER_VERSION:
            return None

        try:
            iv = _b64url_decode(parts[1])
            tag = _b64url_decode(parts[2])
            ciphertext = _b64url_decode(parts[3])
            plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None).decode('utf-8')
        except (InvalidTag, ValueError, binascii.Error, UnicodeDecodeError):
            return None

        return normalize_phone(plaintext) or None

    def decrypted_phone(self, user: User) -> Optional[str]:
        if not user.phone_encrypted:
            return None
        return self.decrypt_phone(user.phone_encrypted)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_id(self, user_id) -> Optional[User]:
        return User.objects.filter(id=user_id).first()

    def find_by_email(self, email) -> Optional[User]:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return User.objects.filter(email=normalized).first()

    def find_by_phone(self, phone) -> Optional[User]:
        normalized = normalize_phone(phone)
        if not normalized:
            return None
        return User.objects.filter(phone_lookup_hash=self.phone_lookup_hash(normalized)).first()

    def email_taken(self, email, *, exclude_user_id: Optional[UUID] = None) -> bool:
        normalized = normalize_email(email)
        if not normalized:
            return False
        qs = User.objects.filter(email=normalized)
        if exclude_user_id is not None:
            qs = qs.exclude(id=exclude_user_id)
        return qs.exists()

    def phone_taken(self, phone, *, exclude_user_id: Optional[UUID] = None) -> bool:
        normalized = normalize_phone(phone)
        if not normalized:
            return False
        qs = User.objects.filter(phone_lookup_hash=self.phone_lookup_hash(normalized))
        if exclude_user_id is not None:
            qs = qs.exclude(id=exclude_user_id)
        return qs.exists()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_user(
        self,
        *,
        email: Optional[str],
        phone: Optional[str],
        display_name: str,
        password: str,
    ) -> User:
        """
        Create a user from already validated identifiers.

        Raises:
            MissingIdentifierError: Neither email nor phone given
            InvalidPhoneError: Phone given but not normalisable
            PhoneAuthUnavailableError: Phone given but no encryption key
        """
        normalized_email = normalize_email(email) or None
        extra = {}
        if phone:
            normalized_phone = normalize_phone(phone)
            if not normalized_phone:
                raise InvalidPhoneError()
            extra['phone_encrypted'] = self.encrypt_phone(normalized_phone)
            extra['phone_lookup_hash'] = self.phone_lookup_hash(normalized_phone)
        if not normalized_email and not extra:
            raise MissingIdentifierError()

        return User.objects.create_user(
            email=normalized_email,
            password=password,
            display_name=display_name.strip(),
            **extra,
        )

    @transaction.atomic
    def update_profile(
        self,
        *,
        user_id,
        display_name=UNSET,
        email=UNSET,
        phone=UNSET,
    ) -> User:
        """
        Update display name and identifiers.

        ``None`` clears an identifier; omitted fields are left alone. At
        least one of email and phone must remain.
        """
        user = User.objects.select_for_update().filter(id=user_id).first()
        if user is None:
            raise UnknownUserError("User not found")

        update_fields = []

        if display_name is not UNSET:
            name = str(display_name or '').strip()
            if len(name) < 2:
                raise InvalidDisplayNameError()
            user.display_name = name
            update_fields.append('display_name')

        if email is not UNSET:
            if email is None:
                user.email = None
            else:
                normalized = normalize_email(email)
                if not normalized:
                    raise InvalidEmailError()
                if self.email_taken(normalized, exclude_user_id=user.id):
                    raise EmailAlreadyRegisteredError()
                user.email = normalized
            update_fields.append('email')

        if phone is not UNSET:
            if phone is None:
                user.phone_encrypted = None
                user.phone_lookup_hash = None
            else:
                normalized = normalize_phone(phone)
                if not normalized:
                    raise InvalidPhoneError()
                lookup_hash = self.phone_lookup_hash(normalized)
                if User.objects.filter(phone_lookup_hash=lookup_hash).exclude(id=user.id).exists():
                    raise PhoneAlreadyRegisteredError()
                user.phone_encrypted = self.encrypt_phone(normalized)
                user.phone_lookup_hash = lookup_hash
            update_fields.extend(['phone_encrypted', 'phone_lookup_hash'])

        if not user.email and not user.phone_lookup_hash:
            raise IdentifierRequiredError()

        if update_fields:
            user.save(update_fields=update_fields + ['updated_at'])
        return user

"""
Runtime configuration consumed by the service layer.

Settings are read from the environment once (see ``config.settings``).
Services never touch ``django.conf.settings`` themselves: they receive an
``AppConfig`` instance through their constructors.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


DEFAULT_ACCESS_TOKEN_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TOKEN_TTL = timedelta(minutes=30)

_DURATION_RE = re.compile(r'^([0-9]+)\s*(ms|s|m|h|d)$', re.IGNORECASE)

_UNIT_SECONDS = {
    'ms': 0.001,
    's': 1,
    'm': 60,
    'h': 60 * 60,
    'd': 24 * 60 * 60,
}


def parse_duration(raw, fallback: Optional[timedelta]) -> Optional[timedelta]:
    """
    Parse a duration string such as ``15m``, ``2h`` or ``500ms``.

    Returns ``fallback`` when the value is empty or malformed.
    """
    match = _DURATION_RE.match(str(raw or '').strip())
    if not match:
        return fallback
    value = int(match.group(1))
    unit = match.group(2).lower()
    return timedelta(seconds=value * _UNIT_SECONDS[unit])


def decode_phone_key(raw) -> Optional[bytes]:
    """Decode a base64 AES-256 key; ``None`` if absent or not 32 bytes."""
    value = str(raw or '').strip()
    if not value:
        return None
    try:
        key = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(key) != 32:
        return None
    return key


@dataclass(frozen=True)
class AppConfig:
    """Immutable options read by the service layer."""

    access_token_ttl: timedelta = DEFAULT_ACCESS_TOKEN_TTL
    refresh_token_ttl: timedelta = DEFAULT_REFRESH_TOKEN_TTL
    phone_encryption_key: Optional[bytes] = None
    default_household_name: str = 'Hogar'
    default_household_currency: str = 'CUP'
    invitation_ttl: Optional[timedelta] = None

    @property
    def phone_auth_enabled(self) -> bool:
        return self.phone_encryption_key is not None

    @classmethod
    def from_settings(cls, settings=None) -> 'AppConfig':
        if settings is None:
            from django.conf import settings

        return cls(
            access_token_ttl=parse_duration(
                getattr(settings, 'JWT_EXPIRES_IN', ''),
                DEFAULT_ACCESS_TOKEN_TTL,
            ),
            refresh_token_ttl=parse_duration(
                getattr(settings, 'JWT_REFRESH_EXPIRES_IN', ''),
                DEFAULT_REFRESH_TOKEN_TTL,
            ),
            phone_encryption_key=decode_phone_key(
                getattr(settings, 'PHONE_ENCRYPTION_KEY', '')
            ),
            default_household_name=getattr(settings, 'HOUSEHOLD_NAME', 'Hogar') or 'Hogar',
            default_household_currency=(
                getattr(settings, 'HOUSEHOLD_CURRENCY', 'CUP') or 'CUP'
            ).upper(),
            invitation_ttl=parse_duration(
                getattr(settings, 'HOUSEHOLD_INVITATION_EXPIRES_IN', ''),
                None,
            ),
        )

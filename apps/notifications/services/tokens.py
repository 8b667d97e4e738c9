"""
Push token registration.

Handles:
- Provider inference from the token shape
- Moving an already-known token to the registering user
- Token removal
"""

import logging
import re
from typing import Optional

from django.db import transaction

from apps.accounts.models import User
from apps.accounts.services.exceptions import UnknownUserError
from apps.notifications.models import PushToken, TokenType

from .exceptions import InvalidPushTokenError

logger = logging.getLogger(__name__)

EXPO_TOKEN_PATTERN = re.compile(
    r'^(?:(?:ExponentPushToken|ExpoPushToken)\[.+\]'
    r'|[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12})$',
    re.IGNORECASE,
)
MIN_FCM_TOKEN_LENGTH = 20


def is_expo_push_token(token: str) -> bool:
    return bool(EXPO_TOKEN_PATTERN.match(token or ''))


@transaction.atomic
def register_push_token(
    *,
    user_id,
    token: str,
    device_type: str,
    token_type: Optional[str] = None,
    device_name: Optional[str] = None,
) -> PushToken:
    """
    Register a device token for ``user_id``.

    The provider is inferred from the token when ``token_type`` is not
    given. A token already registered by anyone is updated in place and
    reassigned to the caller.

    Raises:
        InvalidPushTokenError: Malformed expo token or too-short fcm token
        UnknownUserError: User does not exist
    """
    token = str(token or '').strip()
    token_type = token_type or (TokenType.EXPO if is_expo_push_token(token) else TokenType.FCM)

    if token_type == TokenType.EXPO and not is_expo_push_token(token):
        raise InvalidPushTokenError('Invalid Expo push token')
    if token_type == TokenType.FCM and len(token) < MIN_FCM_TOKEN_LENGTH:
        raise InvalidPushTokenError('Invalid FCM device token')

    if not User.objects.filter(id=user_id).exists():
        raise UnknownUserError('User not found')

    push_token, created = PushToken.objects.select_for_update().update_or_create(
        token=token,
        defaults={
            'user_id': user_id,
            'token_type': token_type,
            'device_type': device_type,
            'device_name': device_name or None,
        },
    )
    if created:
        logger.info("Registered %s push token for %s", token_type, user_id)
    return push_token


def remove_push_token(*, user_id, token: str) -> None:
    """Delete the caller's token. Unknown tokens and other users' tokens are ignored."""
    PushToken.objects.filter(user_id=user_id, token=token).delete()

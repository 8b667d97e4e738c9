"""Services for notifications business logic."""

from .exceptions import (
    NotificationsServiceError,
    InvalidPushTokenError,
)
from .tokens import register_push_token, remove_push_token, is_expo_push_token
from .gateways import ExpoPushGateway, FcmPushGateway, GatewayReport, load_service_account
from .dispatcher import (
    DeliveryResult,
    HouseholdListEvent,
    NotificationDispatcher,
    build_message,
)

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'InvalidPushTokenError',
    # Tokens
    'register_push_token',
    'remove_push_token',
    'is_expo_push_token',
    # Gateways
    'ExpoPushGateway',
    'FcmPushGateway',
    'GatewayReport',
    'load_service_account',
    # Dispatch
    'DeliveryResult',
    'HouseholdListEvent',
    'NotificationDispatcher',
    'build_message',
]

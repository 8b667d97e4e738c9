"""
Household notification dispatch.

List operations call ``NotificationDispatcher.notify_household_list_event``
inside their transaction. Delivery is scheduled for after the commit and
runs on a background thread, so the request never waits on the providers.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import close_old_connections, transaction

from apps.households.models import HouseholdMember
from apps.notifications.models import ListAction, PushToken, TokenType

from .gateways import ExpoPushGateway, FcmPushGateway, GatewayReport
from .tokens import is_expo_push_token

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Actividad en lista compartida'


@dataclass(frozen=True)
class HouseholdListEvent:
    action: str
    household_id: object
    list_id: object
    user_id: object
    user_name: str = ''
    item_name: Optional[str] = None
    # Defaults to ``user_id``.
    exclude_user_id: Optional[object] = None

    @property
    def excluded(self):
        return self.exclude_user_id if self.exclude_user_id is not None else self.user_id


@dataclass
class DeliveryResult:
    exclude_user_id: str
    member_count: int = 0
    tokens_found_count: int = 0
    expo_tokens_count: int = 0
    fcm_tokens_count: int = 0
    firebase_configured: bool = False
    invalid_tokens_removed: int = 0
    expo: Optional[dict] = None
    fcm: Optional[dict] = None
    short_circuit_reason: str = 'sent'


def build_message(event: HouseholdListEvent):
    """Title, body and data payload describing a list event."""
    who = event.user_name or 'Alguien'
    item = f'"{event.item_name}"' if event.item_name else 'un ítem'

    bodies = {
        ListAction.ITEM_ADDED: f'{who} añadió {item}',
        ListAction.ITEM_COMPLETED: f'{who} marcó {item} como comprado',
        ListAction.ITEM_DELETED: f'{who} eliminó {item}',
    }
    body = bodies.get(event.action, f'{who} hizo un cambio en la lista')

    data = {
        'action_type': str(event.action),
        'household_id': str(event.household_id),
        'list_id': str(event.list_id) if event.list_id else '',
        'user_id': str(event.user_id),
        'user_name': event.user_name,
        'item_name': event.item_name,
    }
    return DEFAULT_TITLE, body, data


def _report_dict(report: GatewayReport):
    return {
        'success_count': report.success_count,
        'failure_count': report.failure_count,
        'invalid_tokens_count': len(report.invalid_tokens),
        'error_code_counts': report.error_code_counts,
    }


class NotificationDispatcher:
    """Fans household list activity out to members' devices."""

    def __init__(
        self,
        *,
        expo: Optional[ExpoPushGateway] = None,
        fcm: Optional[FcmPushGateway] = None,
        run_async: Optional[bool] = None,
    ):
        self.expo = expo or ExpoPushGateway.from_settings()
        self.fcm = fcm or FcmPushGateway.from_settings()
        self.run_async = settings.PUSH_DELIVERY_ASYNC if run_async is None else run_async

    def notify_household_list_event(self, event: HouseholdListEvent) -> None:
        """Schedule delivery of ``event`` once the current transaction commits."""
        transaction.on_commit(lambda: self._schedule(event))

    def _schedule(self, event):
        if self.run_async:
            threading.Thread(target=self._deliver_in_thread, args=(event,), daemon=True).start()
        else:
            self._deliver_logged(event)

    def _deliver_in_thread(self, event):
        try:
            self._deliver_logged(event)
        finally:
            close_old_connections()

    def _deliver_logged(self, event):
        try:
            self.deliver(event)
        except Exception:
            logger.error("Push delivery for household %s failed", event.household_id, exc_info=True)

    def deliver(self, event: HouseholdListEvent, *, title=None, body=None) -> DeliveryResult:
        """
        Send ``event`` to every member of its household except the excluded
        user, and prune tokens the providers reject permanently.

        ``title`` and ``body`` override the generated message.
        """
        result = DeliveryResult(
            exclude_user_id=str(event.excluded),
            firebase_configured=self.fcm.is_configured(),
        )

        user_ids = list(
            HouseholdMember.objects
            .filter(household_id=event.household_id)
            .exclude(user_id=event.excluded)
            .values_list('user_id', flat=True)
        )
        result.member_count = len(user_ids)
        if not user_ids:
            result.short_circuit_reason = 'no_members'
            return result

        tokens = list(
            PushToken.objects.filter(user_id__in=user_ids).values_list('token', 'token_type')
        )
        result.tokens_found_count = len(tokens)
        expo_tokens = [t for t, kind in tokens if kind == TokenType.EXPO and is_expo_push_token(t)]
        fcm_tokens = [t for t, kind in tokens if kind == TokenType.FCM and t]
        result.expo_tokens_count = len(expo_tokens)
        result.fcm_tokens_count = len(fcm_tokens)

        if not expo_tokens and not fcm_tokens:
            result.short_circuit_reason = 'no_tokens'
            return result

        default_title, default_body, data = build_message(event)
        title = title or default_title
        body = body or default_body
        invalid = []

        if expo_tokens:
            report = self.expo.send(expo_tokens, title=title, body=body, data=data)
            invalid.extend(report.invalid_tokens)
            result.expo = _report_dict(report)

        if fcm_tokens:
            if not result.firebase_configured:
                logger.warning(
                    "%d FCM tokens registered but Firebase Admin is not configured",
                    len(fcm_tokens),
                )
                result.short_circuit_reason = 'firebase_not_configured'
            else:
                report = self.fcm.send(fcm_tokens, title=title, body=body, data=data)
                invalid.extend(report.invalid_tokens)
                result.fcm = _report_dict(report)

        if invalid:
            logger.warning("Removing %d invalid push tokens", len(invalid))
            result.invalid_tokens_removed, _ = PushToken.objects.filter(token__in=invalid).delete()

        return result

"""
Push delivery gateways.

Both gateways take a list of device tokens plus a title/body/data triple
and report which tokens the provider rejected permanently. Delivery
errors are logged and counted, never raised.
"""

import base64
import json
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import firebase_admin
import httpx
from firebase_admin import credentials, exceptions as firebase_exceptions, messaging

logger = logging.getLogger(__name__)

EXPO_CHUNK_SIZE = 100
FCM_CHUNK_SIZE = 500
FCM_APP_NAME = 'hogar-push'

_fcm_app_lock = threading.Lock()


def chunked(items, size):
    for start in range(0, len(items), size):
        yield items[start:start + size]


@dataclass
class GatewayReport:
    success_count: int = 0
    failure_count: int = 0
    invalid_tokens: List[str] = field(default_factory=list)
    error_code_counts: Dict[str, int] = field(default_factory=dict)

    def record_failure(self, code: str, count: int = 1):
        self.failure_count += count
        self.error_code_counts[code] = self.error_code_counts.get(code, 0) + count


# =============================================================================
# Expo
# =============================================================================

class ExpoPushGateway:
    """Sends to Expo push tokens through the Expo push HTTP API."""

    def __init__(self, url: str, access_token: str = '', client: Optional[httpx.Client] = None):
        self.url = url
        self.access_token = access_token
        self.client = client

    @classmethod
    def from_settings(cls, settings=None) -> 'ExpoPushGateway':
        if settings is None:
            from django.conf import settings
        return cls(
            url=settings.EXPO_PUSH_URL,
            access_token=getattr(settings, 'EXPO_ACCESS_TOKEN', ''),
        )

    def _headers(self):
        headers = {'Accept': 'application/json', 'Content-Type': 'application/json'}
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        return headers

    def send(self, tokens: List[str], *, title: str, body: str, data: dict) -> GatewayReport:
        report = GatewayReport()
        if not tokens:
            return report

        client = self.client or httpx.Client(timeout=10.0)
        try:
            for group in chunked(tokens, EXPO_CHUNK_SIZE):
                messages = [
                    {'to': token, 'sound': 'default', 'title': title, 'body': body, 'data': data}
                    for token in group
                ]
                try:
                    response = client.post(self.url, json=messages, headers=self._headers())
                    response.raise_for_status()
                    tickets = response.json().get('data', [])
                except httpx.HTTPError:
                    logger.error("Error sending Expo push notifications", exc_info=True)
                    report.record_failure('exception', len(group))
                    continue

                self._read_tickets(group, tickets, report)
        finally:
            if self.client is None:
                client.close()

        return report

    @staticmethod
    def _read_tickets(group, tickets, report):
        errors = []
        for token, ticket in zip(group, tickets):
            if ticket.get('status') == 'ok':
                report.success_count += 1
                continue
            code = (ticket.get('details') or {}).get('error') or 'unknown'
            errors.append(code)
            report.record_failure(code)
            if code == 'DeviceNotRegistered':
                report.invalid_tokens.append(token)

        if errors:
            logger.warning("Expo push ticket errors: %s", dict(Counter(errors)))


# =============================================================================
# Firebase Cloud Messaging
# =============================================================================

def load_service_account(raw_json: str = '', raw_base64: str = '') -> Optional[dict]:
    """
    Parse service account credentials from JSON or base64-encoded JSON.

    Returns None when nothing is configured or the payload is unusable.
    Escaped ``\\n`` sequences in the private key are unescaped.
    """
    raw = raw_json
    if raw_base64:
        try:
            raw = base64.b64decode(raw_base64).decode('utf-8')
        except (ValueError, UnicodeDecodeError):
            logger.error("Firebase service account base64 could not be decoded")
            return None

    raw = (raw or '').strip()
    if not raw:
        return None

    try:
        account = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Firebase service account is not valid JSON")
        return None

    private_key = account.get('private_key') or account.get('privateKey') or ''
    account = {
        **account,
        'type': account.get('type', 'service_account'),
        'project_id': account.get('project_id') or account.get('projectId') or '',
        'client_email': account.get('client_email') or account.get('clientEmail') or '',
        'private_key': private_key.replace('\\n', '\n'),
        'token_uri': account.get('token_uri', 'https://oauth2.googleapis.com/token'),
    }
    if not (account['project_id'] and account['client_email'] and account['private_key']):
        logger.error("Firebase service account is missing project_id, client_email or private_key")
        return None
    return account


class FcmPushGateway:
    """
    Sends to native FCM device tokens with firebase-admin multicast.

    The Firebase app is initialised lazily on first use; without usable
    credentials the gateway reports itself as not configured.
    """

    INVALID_TOKEN_ERRORS = (messaging.UnregisteredError, firebase_exceptions.InvalidArgumentError)

    def __init__(self, service_account: Optional[dict]):
        self.service_account = service_account
        self._app = None

    @classmethod
    def from_settings(cls, settings=None) -> 'FcmPushGateway':
        if settings is None:
            from django.conf import settings
        return cls(load_service_account(
            getattr(settings, 'FIREBASE_SERVICE_ACCOUNT_JSON', ''),
            getattr(settings, 'FIREBASE_SERVICE_ACCOUNT_BASE64', ''),
        ))

    def is_configured(self) -> bool:
        return self.service_account is not None

    def _get_app(self):
        if self._app is None:
            with _fcm_app_lock:
                try:
                    self._app = firebase_admin.get_app(FCM_APP_NAME)
                except ValueError:
                    self._app = firebase_admin.initialize_app(
                        credentials.Certificate(self.service_account), name=FCM_APP_NAME
                    )
                    logger.info("Firebase Admin initialised")
        return self._app

    def send(self, tokens: List[str], *, title: str, body: str, data: dict) -> GatewayReport:
        report = GatewayReport()
        tokens = [str(t).strip() for t in tokens if str(t).strip()]
        if not tokens:
            return report
        if not self.is_configured():
            report.record_failure('not_configured', len(tokens))
            return report

        string_data = {key: str(value) for key, value in data.items() if value is not None}

        for group in chunked(tokens, FCM_CHUNK_SIZE):
            message = messaging.MulticastMessage(
                tokens=group,
                notification=messaging.Notification(title=title, body=body),
                data=string_data,
                android=messaging.AndroidConfig(
                    priority='high',
                    notification=messaging.AndroidNotification(channel_id='default', sound='default'),
                ),
            )
            try:
                batch = messaging.send_each_for_multicast(message, app=self._get_app())
            except (firebase_exceptions.FirebaseError, ValueError):
                logger.error("Error sending FCM multicast", exc_info=True)
                report.record_failure('exception', len(group))
                continue

            report.success_count += batch.success_count
            for token, response in zip(group, batch.responses):
                if response.success:
                    continue
                error = response.exception
                report.record_failure(getattr(error, 'code', None) or 'unknown')
                if isinstance(error, self.INVALID_TOKEN_ERRORS):
                    report.invalid_tokens.append(token)

        if report.error_code_counts.get('UNAUTHENTICATED') or report.error_code_counts.get('PERMISSION_DENIED'):
            logger.error(
                "FCM rejected the service account credentials; check "
                "FIREBASE_SERVICE_ACCOUNT_* and connectivity to oauth2.googleapis.com"
            )
        return report

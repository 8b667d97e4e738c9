import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from apps.households.models import HouseholdRole
from apps.households.services import MembershipLedger, create_household
from apps.notifications.models import DeviceType, PushToken, TokenType
from apps.notifications.services import GatewayReport
from config.runtime import AppConfig

EXPO_TOKEN = 'ExponentPushToken[member-device-1]'
FCM_TOKEN = 'fcm-device-token-0123456789abcdef'


def make_user(email, display_name):
    return CredentialStore(AppConfig.from_settings()).create_user(
        email=email,
        phone=None,
        display_name=display_name,
        password='TestPass123',
    )


class FakeGateway:
    """In-memory gateway recording what it was asked to send."""

    def __init__(self, invalid=(), configured=True):
        self.invalid = set(invalid)
        self.configured = configured
        self.calls = []

    def is_configured(self):
        return self.configured

    def send(self, tokens, *, title, body, data):
        self.calls.append({'tokens': list(tokens), 'title': title, 'body': body, 'data': data})
        bad = [t for t in tokens if t in self.invalid]
        return GatewayReport(
            success_count=len(tokens) - len(bad),
            failure_count=len(bad),
            invalid_tokens=bad,
        )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def actor(db):
    return make_user('actor@example.com', 'Ana')


@pytest.fixture
def member_user(db):
    return make_user('member@example.com', 'Beto')


@pytest.fixture
def outsider(db):
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(actor, member_user):
    household = create_household(user_id=actor.id, name='Casa')
    MembershipLedger(AppConfig.from_settings()).add_member(
        household_id=household.id, user_id=member_user.id, role=HouseholdRole.MEMBER
    )
    return household


@pytest.fixture
def member_tokens(member_user, actor):
    PushToken.objects.create(
        user=member_user, token=EXPO_TOKEN, token_type=TokenType.EXPO, device_type=DeviceType.IOS
    )
    PushToken.objects.create(
        user=member_user, token=FCM_TOKEN, token_type=TokenType.FCM, device_type=DeviceType.ANDROID
    )
    # The actor's own device must never be notified.
    PushToken.objects.create(
        user=actor,
        token='ExponentPushToken[actor-device]',
        token_type=TokenType.EXPO,
        device_type=DeviceType.IOS,
    )


@pytest.fixture
def expo_gateway():
    return FakeGateway()


@pytest.fixture
def fcm_gateway():
    return FakeGateway()


def bearer_client(user):
    tokens = SessionManager(AppConfig.from_settings()).create_session(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.access_token}')
    return client


@pytest.fixture
def actor_client(actor):
    return bearer_client(actor)


@pytest.fixture
def outsider_client(outsider):
    return bearer_client(outsider)

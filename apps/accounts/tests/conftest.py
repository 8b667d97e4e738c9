import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from config.runtime import AppConfig


def bearer_client(user, config=None):
    """API client carrying an access token for a fresh session of ``user``."""
    tokens = SessionManager(config or AppConfig.from_settings()).create_session(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.access_token}')
    client.tokens = tokens
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def app_config():
    return AppConfig.from_settings()


@pytest.fixture
def credentials(app_config):
    return CredentialStore(app_config)


@pytest.fixture
def sessions(app_config):
    return SessionManager(app_config)


@pytest.fixture
def user(db, credentials):
    """Create and return a test user with an email."""
    return credentials.create_user(
        email='testuser@example.com',
        phone=None,
        display_name='Test User',
        password='TestPass123',
    )


@pytest.fixture
def phone_user(db, credentials):
    """Create and return a user registered by phone only."""
    return credentials.create_user(
        email=None,
        phone='+5355512345',
        display_name='Phone User',
        password='TestPass123',
    )


@pytest.fixture
def other_user(db, credentials):
    """Create and return another test user."""
    return credentials.create_user(
        email='otheruser@example.com',
        phone=None,
        display_name='Other User',
        password='OtherPass123',
    )


@pytest.fixture
def authenticated_client(user):
    """Return an API client authenticated as ``user``."""
    return bearer_client(user)

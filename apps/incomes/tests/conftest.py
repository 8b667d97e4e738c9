import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from apps.households.services import create_household
from config.runtime import AppConfig


def make_user(email, display_name):
    return CredentialStore(AppConfig.from_settings()).create_user(
        email=email,
        phone=None,
        display_name=display_name,
        password='TestPass123',
    )


def bearer_client(user):
    tokens = SessionManager(AppConfig.from_settings()).create_session(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def earner(db):
    """User whose household keeps its books in EUR."""
    user = make_user('earner@example.com', 'Earner')
    create_household(user_id=user.id, name='Piso', currency='EUR')
    return user


@pytest.fixture
def loner(db):
    """Create and return a user not in any household."""
    return make_user('loner@example.com', 'Loner')


@pytest.fixture
def earner_client(earner):
    return bearer_client(earner)


@pytest.fixture
def loner_client(loner):
    return bearer_client(loner)

import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from apps.households.models import HouseholdRole
from apps.households.services import InvitationResolver, MembershipLedger, create_household
from config.runtime import AppConfig


def bearer_client(user):
    """API client carrying an access token for a fresh session of ``user``."""
    tokens = SessionManager(AppConfig.from_settings()).create_session(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.access_token}')
    return client


def make_user(email, display_name, phone=None):
    return CredentialStore(AppConfig.from_settings()).create_user(
        email=email,
        phone=phone,
        display_name=display_name,
        password='TestPass123',
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def app_config():
    return AppConfig.from_settings()


@pytest.fixture
def ledger(app_config):
    return MembershipLedger(app_config)


@pytest.fixture
def resolver(app_config):
    return InvitationResolver(app_config)


@pytest.fixture
def owner(db):
    """Create and return the household owner."""
    return make_user('owner@example.com', 'Household Owner')


@pytest.fixture
def member_user(db):
    """Create and return a user who joins as a plain member."""
    return make_user('member@example.com', 'Household Member')


@pytest.fixture
def outsider(db):
    """Create and return a user not in any household."""
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(owner):
    """Household owned by ``owner``."""
    return create_household(user_id=owner.id, name='Casa', currency='USD')


@pytest.fixture
def household_with_member(household, member_user, ledger):
    """Household with an owner and one plain member."""
    ledger.add_member(household_id=household.id, user_id=member_user.id, role=HouseholdRole.MEMBER)
    ledger.set_primary_household(user_id=member_user.id, household_id=household.id)
    return household


@pytest.fixture
def owner_client(owner):
    return bearer_client(owner)


@pytest.fixture
def member_client(member_user):
    return bearer_client(member_user)


@pytest.fixture
def outsider_client(outsider):
    return bearer_client(outsider)

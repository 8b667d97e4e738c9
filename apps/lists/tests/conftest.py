from decimal import Decimal
from unittest import mock

import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from apps.households.models import HouseholdRole
from apps.households.services import MembershipLedger, create_household
from apps.lists.models import ShoppingItem, ShoppingList
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
def shopper(db):
    """Household owner who does most of the shopping."""
    return make_user('ana@example.com', 'Ana')


@pytest.fixture
def partner(db):
    return make_user('beto@example.com', 'Beto')


@pytest.fixture
def outsider(db):
    """Create and return a user not in any household."""
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(shopper, partner):
    """Household of ``shopper`` (owner) and ``partner`` (member), in EUR."""
    household = create_household(user_id=shopper.id, name='Piso', currency='EUR')
    ledger = MembershipLedger(AppConfig.from_settings())
    ledger.add_member(household_id=household.id, user_id=partner.id, role=HouseholdRole.MEMBER)
    ledger.set_primary_household(user_id=partner.id, household_id=household.id)
    return household


@pytest.fixture
def shared_list(household, shopper):
    return ShoppingList.objects.create(household=household, name='Supermercado', created_by=shopper)


@pytest.fixture
def personal_list(household, shopper):
    return ShoppingList.objects.create(
        household=household, name='Regalos', created_by=shopper, owner=shopper,
    )


@pytest.fixture
def milk(shared_list):
    return ShoppingItem.objects.create(
        list=shared_list, name='Leche', amount=Decimal('2'), price=Decimal('1.25'), category='lacteos',
    )


@pytest.fixture
def dispatched():
    """Recorded calls of ``notify_household_list_event`` made by list services."""
    with mock.patch('apps.lists.services.shopping.NotificationDispatcher') as dispatcher_cls:
        yield dispatcher_cls.return_value.notify_household_list_event


@pytest.fixture
def shopper_client(shopper):
    return bearer_client(shopper)


@pytest.fixture
def partner_client(partner):
    return bearer_client(partner)


@pytest.fixture
def outsider_client(outsider):
    return bearer_client(outsider)

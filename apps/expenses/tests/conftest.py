from decimal import Decimal
from unittest import mock

import pytest
from rest_framework.test import APIClient

from apps.accounts.services import CredentialStore, SessionManager
from apps.households.models import HouseholdRole
from apps.households.services import MembershipLedger, create_household
from apps.lists.models import ShoppingItem, ShoppingList
from apps.lists.services import set_purchased
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


def buy(shopping_list, user, name, amount, price, category=None):
    """Add an item to ``shopping_list`` and mark it purchased by ``user``."""
    item = ShoppingItem.objects.create(
        list=shopping_list,
        name=name,
        amount=Decimal(amount),
        price=Decimal(price),
        category=category,
    )
    set_purchased(
        user_id=user.id,
        list_id=shopping_list.id,
        item_id=item.id,
        purchased=True,
        dispatcher=mock.Mock(),
    )
    return item


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def ana(db):
    return make_user('ana@example.com', 'Ana')


@pytest.fixture
def beto(db):
    return make_user('beto@example.com', 'Beto')


@pytest.fixture
def outsider(db):
    """Create and return a user not in any household."""
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(ana, beto):
    household = create_household(user_id=ana.id, name='Piso', currency='EUR')
    ledger = MembershipLedger(AppConfig.from_settings())
    ledger.add_member(household_id=household.id, user_id=beto.id, role=HouseholdRole.MEMBER)
    ledger.set_primary_household(user_id=beto.id, household_id=household.id)
    return household


@pytest.fixture
def shared_list(household, ana):
    return ShoppingList.objects.create(household=household, name='Supermercado', created_by=ana)


@pytest.fixture
def ana_personal_list(household, ana):
    return ShoppingList.objects.create(household=household, name='Ana', created_by=ana, owner=ana)


@pytest.fixture
def purchases(shared_list, ana_personal_list, ana, beto):
    """
    Shared list: Ana 5.00 (food) + 2.00 (no category), Beto 9.00 (cleaning).
    Ana's personal list: 4.00 (food).
    """
    return {
        'rice': buy(shared_list, ana, 'Arroz', '2', '2.50', 'food'),
        'salt': buy(shared_list, ana, 'Sal', '1', '2.00'),
        'soap': buy(shared_list, beto, 'Jabon', '3', '3.00', 'cleaning'),
        'book': buy(ana_personal_list, ana, 'Cuaderno', '1', '4.00', 'food'),
    }


@pytest.fixture
def ana_client(ana):
    return bearer_client(ana)


@pytest.fixture
def beto_client(beto):
    return bearer_client(beto)


@pytest.fixture
def outsider_client(outsider):
    return bearer_client(outsider)

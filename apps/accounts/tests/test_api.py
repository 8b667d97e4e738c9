import os
import subprocess
import sys

import pytest
from django.conf import settings
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import AuthSession, User
from apps.households.services import InvitationResolver, create_household

from .conftest import bearer_client


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('accounts:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['access_token']
        assert response.data['refresh_token']
        assert response.data['user']['email'] == 'newuser@example.com'
        assert response.data['user']['display_name'] == 'New User'
        assert response.data['household'] is None
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_with_phone(self, api_client):
        url = reverse('accounts:register')
        data = {
            'phone': '+5355512345',
            'password': 'SecurePass123',
            'display_name': 'Phone User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['email'] == ''

    def test_register_duplicate_email(self, api_client, user):
        """Second registration with the same email is a conflict."""
        url = reverse('accounts:register')
        data = {
            'email': user.email,
            'password': 'SecurePass123',
            'display_name': 'Again',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['status'] == 409
        assert response.data['error']

    def test_register_without_identifier(self, api_client):
        url = reverse('accounts:register')
        data = {'password': 'SecurePass123', 'display_name': 'Nobody'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize('password', [
        'short1A',
        'alllowercase1',
        'ALLUPPERCASE1',
        'NoDigitsHere',
        'Has Space1',
    ])
    def test_register_weak_password(self, api_client, password):
        url = reverse('accounts:register')
        data = {
            'email': 'weak@example.com',
            'password': password,
            'display_name': 'Weak',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data

    def test_register_invalid_phone(self, api_client):
        url = reverse('accounts:register')
        data = {
            'phone': '12-ab',
            'password': 'SecurePass123',
            'display_name': 'Bad Phone',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_short_display_name(self, api_client):
        url = reverse('accounts:register')
        data = {
            'email': 'short@example.com',
            'password': 'SecurePass123',
            'display_name': 'A',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_accepts_pending_invitation(self, api_client, user, app_config):
        household = create_household(user_id=user.id, name='Casa')
        InvitationResolver(app_config).invite(inviter_id=user.id, email='invited@example.com')

        response = api_client.post(reverse('accounts:register'), {
            'email': 'invited@example.com',
            'password': 'SecurePass123',
            'display_name': 'Invited',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['household']['id'] == str(household.id)
        assert response.data['household']['name'] == 'Casa'


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        url = reverse('accounts:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['access_token']
        assert response.data['refresh_token']
        assert response.data['user']['id'] == str(user.id)

    def test_login_with_phone(self, api_client, phone_user):
        url = reverse('accounts:login')
        response = api_client.post(url, {'phone': '+5355512345', 'password': 'TestPass123'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['id'] == str(phone_user.id)

    def test_login_ignores_invalid_bearer(self, api_client, user):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not.a.jwt')

        response = api_client.post(
            reverse('accounts:login'), {'email': user.email, 'password': 'TestPass123'}
        )

        assert response.status_code == status.HTTP_200_OK

    def test_login_errors_are_generic(self, api_client, user):
        """Wrong password and unknown account produce the same response."""
        url = reverse('accounts:login')
        wrong_password = api_client.post(url, {'email': user.email, 'password': 'WrongPass1'})
        unknown_user = api_client.post(url, {'email': 'ghost@example.com', 'password': 'WrongPass1'})

        assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
        assert unknown_user.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong_password.data == unknown_user.data

    def test_login_missing_identifier(self, api_client):
        url = reverse('accounts:login')
        response = api_client.post(url, {'password': 'TestPass123'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Refresh & Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestRefresh:
    """Tests for POST /api/auth/refresh/"""

    def test_stale_refresh_token_kills_session(self, api_client):
        """
        Register, refresh once, then replay the original refresh token:
        the replay fails and the newest tokens stop working too.
        """
        registered = api_client.post(reverse('accounts:register'), {
            'email': 'a@x.com',
            'password': 'SecurePass123',
            'display_name': 'Ann',
        })
        original_refresh = registered.data['refresh_token']

        refreshed = api_client.post(reverse('accounts:refresh'), {'refresh_token': original_refresh})
        assert refreshed.status_code == status.HTTP_200_OK
        assert refreshed.data['refresh_token'] != original_refresh

        replay = api_client.post(reverse('accounts:refresh'), {'refresh_token': original_refresh})
        assert replay.status_code == status.HTTP_401_UNAUTHORIZED

        newest = api_client.post(
            reverse('accounts:refresh'), {'refresh_token': refreshed.data['refresh_token']}
        )
        assert newest.status_code == status.HTTP_401_UNAUTHORIZED

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {refreshed.data['access_token']}")
        assert api_client.get(reverse('accounts:me')).status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_errors_are_generic(self, api_client, user, sessions):
        issued = sessions.create_session(user=user)
        sessions.logout(user_id=user.id, session_id=issued.session_id)

        revoked = api_client.post(reverse('accounts:refresh'), {'refresh_token': issued.refresh_token})
        unknown = api_client.post(reverse('accounts:refresh'), {'refresh_token': 'nope'})

        assert revoked.status_code == unknown.status_code == status.HTTP_401_UNAUTHORIZED
        assert revoked.data['error'] == unknown.data['error']

    def test_refresh_requires_token(self, api_client):
        response = api_client.post(reverse('accounts:refresh'), {})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_refresh_ignores_stale_bearer(self, api_client, user, sessions):
        stale = sessions.create_session(user=user)
        sessions.logout(user_id=user.id, session_id=stale.session_id)
        live = sessions.create_session(user=user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {stale.access_token}')

        response = api_client.post(reverse('accounts:refresh'), {'refresh_token': live.refresh_token})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['refresh_token'] != live.refresh_token


@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout/"""

    def test_logout_revokes_current_session(self, user):
        client = bearer_client(user)

        response = client.post(reverse('accounts:logout'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'ok': True}
        assert AuthSession.objects.get(id=client.tokens.session_id).revoked_at is not None
        assert client.get(reverse('accounts:me')).status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_leaves_other_sessions_alive(self, user):
        first = bearer_client(user)
        second = bearer_client(user)

        first.post(reverse('accounts:logout'))

        assert second.get(reverse('accounts:me')).status_code == status.HTTP_200_OK

    def test_logout_requires_authentication(self, api_client):
        response = api_client.post(reverse('accounts:logout'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestMe:
    """Tests for GET/PATCH /api/auth/me/"""

    def test_get_me(self, authenticated_client, user):
        response = authenticated_client.get(reverse('accounts:me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['id'] == str(user.id)
        assert response.data['user']['phone'] is None
        assert response.data['household'] is None

    def test_get_me_unauthenticated(self, api_client):
        response = api_client.get(reverse('accounts:me'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {
            'error': 'Authentication credentials were not provided.',
            'status': 401,
        }

    def test_invalid_bearer_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not.a.jwt')
        response = api_client.get(reverse('accounts:me'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'error': 'Invalid or expired credentials', 'status': 401}

    def test_revoked_session_error_shape(self, user):
        client = bearer_client(user)
        client.post(reverse('accounts:logout'))

        response = client.get(reverse('accounts:me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'error': 'Invalid or expired credentials', 'status': 401}
        assert response['WWW-Authenticate'].startswith('Bearer')

    def test_patch_me(self, authenticated_client):
        response = authenticated_client.patch(
            reverse('accounts:me'),
            {'display_name': 'Renamed', 'phone': '+5355500001'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['display_name'] == 'Renamed'
        assert response.data['user']['phone'] == '+5355500001'

    def test_patch_me_clear_only_identifier(self, authenticated_client):
        response = authenticated_client.patch(
            reverse('accounts:me'), {'email': None}, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_patch_me_email_conflict(self, authenticated_client, other_user):
        response = authenticated_client.patch(
            reverse('accounts:me'), {'email': other_user.email}, format='json'
        )
        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
class TestChangePassword:
    """Tests for PATCH /api/auth/password/"""

    def test_change_password(self, authenticated_client, user):
        response = authenticated_client.patch(
            reverse('accounts:change-password'),
            {'current_password': 'TestPass123', 'new_password': 'BrandNew456'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert User.objects.get(id=user.id).check_password('BrandNew456')

    def test_wrong_current_password(self, authenticated_client):
        response = authenticated_client.patch(
            reverse('accounts:change-password'),
            {'current_password': 'WrongPass1', 'new_password': 'BrandNew456'},
            format='json',
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_weak_new_password(self, authenticated_client):
        response = authenticated_client.patch(
            reverse('accounts:change-password'),
            {'current_password': 'TestPass123', 'new_password': 'weak'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Import Order Tests
# =============================================================================

class TestImportOrder:
    """The error taxonomy and DRF views load in a fresh interpreter in either order."""

    @pytest.mark.parametrize('first', ['config.exceptions', 'rest_framework.views'])
    def test_fresh_import(self, first):
        script = (
            'import django; django.setup(); '
            f'import {first}; '
            'import apps.accounts.authentication, config.exception_handler, apps.accounts.views'
        )
        env = {**os.environ, 'DJANGO_SETTINGS_MODULE': 'config.settings'}

        result = subprocess.run(
            [sys.executable, '-c', script],
            cwd=settings.BASE_DIR, env=env, capture_output=True, text=True,
        )

        assert result.returncode == 0, result.stderr

from unittest import mock

import pytest
from django.urls import reverse
from rest_framework import status

from apps.notifications.models import PushToken
from apps.notifications.services import FcmPushGateway, GatewayReport

from .conftest import EXPO_TOKEN, FCM_TOKEN


@pytest.mark.django_db
class TestRegisterToken:
    """Tests for POST /api/notifications/register-token/"""

    def test_register(self, actor_client, actor):
        response = actor_client.post(
            reverse('notifications:register-token'),
            {'token': EXPO_TOKEN, 'device_type': 'ios'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert PushToken.objects.get(id=response.data['token_id']).user_id == actor.id

    def test_invalid_token(self, actor_client):
        response = actor_client.post(
            reverse('notifications:register-token'),
            {'token': 'tiny', 'device_type': 'android'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid FCM device token'

    def test_bad_device_type(self, actor_client):
        response = actor_client.post(
            reverse('notifications:register-token'),
            {'token': EXPO_TOKEN, 'device_type': 'fridge'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_authentication(self, api_client):
        response = api_client.post(
            reverse('notifications:register-token'),
            {'token': EXPO_TOKEN, 'device_type': 'ios'},
            format='json',
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestRemoveToken:

    def test_remove(self, actor_client, actor):
        PushToken.objects.create(user=actor, token=FCM_TOKEN, token_type='fcm', device_type='android')

        response = actor_client.delete(reverse('notifications:remove-token', args=[FCM_TOKEN]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'ok': True}
        assert not PushToken.objects.exists()


@pytest.mark.django_db
class TestSendHouseholdNotification:
    """Tests for POST /api/notifications/send/"""

    def test_member_sends_custom_message(self, actor_client, household, member_tokens):
        sent = []

        def fake_send(self, tokens, *, title, body, data):
            sent.append((list(tokens), title, body))
            return GatewayReport(success_count=len(tokens))

        with mock.patch('apps.notifications.services.gateways.ExpoPushGateway.send', fake_send), \
                mock.patch.object(FcmPushGateway, 'is_configured', return_value=False):
            response = actor_client.post(
                reverse('notifications:send'),
                {'household_id': str(household.id), 'title': 'Hola', 'body': 'Prueba'},
                format='json',
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['ok'] is True
        # Nobody is excluded by default, so the actor's device is included.
        assert sorted(sent[0][0]) == sorted(['ExponentPushToken[actor-device]', EXPO_TOKEN])
        assert sent[0][1:] == ('Hola', 'Prueba')
        assert response.data['result']['member_count'] == 2

    def test_outsider_forbidden(self, outsider_client, household):
        response = outsider_client.post(
            reverse('notifications:send'),
            {'household_id': str(household.id), 'title': 'Hola', 'body': 'Prueba'},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

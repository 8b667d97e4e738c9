import pytest
from django.urls import reverse
from rest_framework import status

from apps.incomes.models import Income


@pytest.mark.django_db
class TestIncomes:
    """Tests for /api/incomes/"""

    def test_create_and_list(self, earner_client):
        response = earner_client.post(
            reverse('incomes:incomes'),
            {'amount': '800', 'description': 'Nomina', 'source': 'salary'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['amount'] == '800.00'
        assert response.data['currency'] == 'EUR'

        response = earner_client.get(reverse('incomes:incomes'), {'source': 'salary'})
        assert response.data['total'] == 1

    def test_invalid_source(self, earner_client):
        response = earner_client.post(
            reverse('incomes:incomes'),
            {'amount': '800', 'description': 'Nomina', 'source': 'lottery'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_user_without_household_can_record(self, loner_client):
        response = loner_client.post(
            reverse('incomes:incomes'),
            {'amount': '10', 'description': 'Regalo'},
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED

    def test_summary(self, earner_client):
        earner_client.post(
            reverse('incomes:incomes'),
            {'amount': '10.25', 'description': 'Venta'},
            format='json',
        )

        response = earner_client.get(reverse('incomes:summary'))

        assert response.data == {'total': '10.25', 'currency': 'EUR'}

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('incomes:incomes'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestIncomeDetail:

    def test_update_and_delete(self, earner_client, earner):
        income = Income.objects.create(
            owner=earner, amount='5.00', currency='EUR', description='Venta',
            occurred_at='2024-05-01T10:00:00Z',
        )
        url = reverse('incomes:detail', args=[income.id])

        response = earner_client.patch(url, {'description': 'Venta bici'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['description'] == 'Venta bici'

        response = earner_client.delete(url)
        assert response.data == {'ok': True}
        assert not Income.objects.exists()

    def test_someone_elses_income(self, loner_client, earner):
        income = Income.objects.create(
            owner=earner, amount='5.00', currency='EUR', description='Venta',
            occurred_at='2024-05-01T10:00:00Z',
        )

        response = loner_client.get(reverse('incomes:detail', args=[income.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Income not found'

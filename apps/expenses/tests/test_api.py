import pytest
from django.urls import reverse
from rest_framework import status

from apps.expenses.models import Expense


@pytest.mark.django_db
class TestExpenses:
    """Tests for /api/expenses/"""

    def test_create_manual(self, ana_client, ana, household):
        response = ana_client.post(
            reverse('expenses:expenses'),
            {'amount': '45.10', 'description': 'Internet', 'category': 'servicios'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['amount'] == '45.10'
        assert response.data['currency'] == 'EUR'
        assert response.data['source_type'] == 'manual'
        assert response.data['payer']['id'] == str(ana.id)

    def test_create_with_foreign_payer(self, ana_client, outsider, household):
        response = ana_client.post(
            reverse('expenses:expenses'),
            {'amount': '1', 'description': 'X', 'payer_id': str(outsider.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Payer is not a member of this household'

    def test_negative_amount(self, ana_client, household):
        response = ana_client.post(
            reverse('expenses:expenses'),
            {'amount': '-1', 'description': 'X'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_with_filters(self, beto_client, beto, purchases):
        response = beto_client.get(reverse('expenses:expenses'), {'payer_id': str(beto.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 1
        assert response.data['items'][0]['description'] == 'Jabon'

    def test_limit_above_maximum(self, ana_client, household):
        response = ana_client.get(reverse('expenses:expenses'), {'limit': 201})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_outsider_forbidden(self, outsider_client):
        response = outsider_client.get(reverse('expenses:expenses'))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestExpenseDetail:

    def test_get(self, ana_client, purchases):
        expense = Expense.objects.get(source_id=purchases['soap'].id)

        response = ana_client.get(reverse('expenses:detail', args=[expense.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['source_type'] == 'shopping_item'
        assert response.data['source_id'] == str(purchases['soap'].id)

    def test_delete_shopping_expense_conflicts(self, ana_client, purchases):
        expense = Expense.objects.get(source_id=purchases['soap'].id)

        response = ana_client.delete(reverse('expenses:detail', args=[expense.id]))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Only manual expenses can be deleted'

    def test_delete_missing(self, ana_client, household, ana):
        response = ana_client.delete(reverse('expenses:detail', args=[ana.id]))
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestSummaryEndpoints:

    @pytest.mark.parametrize('name, expected', [
        ('expenses:summary', '20.00'),
        ('expenses:summary-shared', '16.00'),
        ('expenses:summary-personal', '4.00'),
        ('expenses:summary-mine', '11.00'),
    ])
    def test_totals(self, ana_client, purchases, name, expected):
        response = ana_client.get(reverse(name))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'total': expected, 'currency': 'EUR'}

    def test_personal_history(self, ana_client, purchases):
        response = ana_client.get(reverse('expenses:history-personal'))

        assert response.data['total'] == 1
        assert response.data['items'][0]['description'] == 'Cuaderno'


@pytest.mark.django_db
class TestReportEndpoints:

    def test_by_payer(self, beto_client, purchases):
        response = beto_client.get(reverse('reports:by-payer'))

        assert response.status_code == status.HTTP_200_OK
        assert [(row['display_name'], row['total']) for row in response.data['items']] == [
            ('Beto', '9.00'),
            ('Ana', '7.00'),
        ]
        assert response.data['date_from'] is None

    def test_by_category(self, beto_client, purchases):
        response = beto_client.get(reverse('reports:by-category'))
        assert [row['category'] for row in response.data['items']] == ['cleaning', 'food', '(uncategorized)']

    def test_balance(self, beto_client, beto, purchases):
        response = beto_client.get(reverse('reports:balance'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user_id'] == str(beto.id)
        assert response.data['income'] == '0.00'
        assert response.data['expense'] == '9.00'
        assert response.data['balance'] == '-9.00'

    def test_inverted_range(self, beto_client, household):
        response = beto_client.get(
            reverse('reports:by-payer'),
            {'date_from': '2024-06-02T00:00:00Z', 'date_to': '2024-06-01T00:00:00Z'},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_outsider_forbidden(self, outsider_client):
        response = outsider_client.get(reverse('reports:balance'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

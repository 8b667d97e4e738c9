from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.expenses.models import Expense, ExpenseSource
from apps.expenses.services import (
    UNCATEGORIZED,
    ExpenseFilters,
    ExpenseNotFoundError,
    ExpenseScope,
    PayerNotMemberError,
    ShoppingExpenseDeleteError,
    balance,
    create_manual_expense,
    delete_expense,
    get_expense,
    list_expenses,
    summarize_expenses,
    total_by_category,
    total_by_payer,
)
from apps.households.services import NoHouseholdError, create_household
from apps.incomes.services import create_income


@pytest.mark.django_db
class TestManualExpenses:

    def test_payer_defaults_to_caller(self, ana, household):
        expense = create_manual_expense(
            user_id=ana.id,
            amount=Decimal('12.5'),
            description=' Luz ',
            category='',
        )

        assert expense.payer_id == ana.id
        assert expense.household_id == household.id
        assert expense.currency == 'EUR'
        assert expense.amount == Decimal('12.50')
        assert expense.description == 'Luz'
        assert expense.category is None
        assert expense.source_type == ExpenseSource.MANUAL
        assert expense.occurred_at is not None

    def test_payer_can_be_another_member(self, ana, beto, household):
        expense = create_manual_expense(
            user_id=ana.id, amount=Decimal('30'), description='Gas', payer_id=beto.id,
        )
        assert expense.payer_id == beto.id

    def test_payer_must_be_member(self, ana, outsider, household):
        with pytest.raises(PayerNotMemberError):
            create_manual_expense(
                user_id=ana.id, amount=Decimal('30'), description='Gas', payer_id=outsider.id,
            )

    def test_caller_without_household(self, outsider):
        with pytest.raises(NoHouseholdError):
            create_manual_expense(user_id=outsider.id, amount=Decimal('1'), description='X')

    def test_delete_manual(self, ana, beto, household):
        expense = create_manual_expense(user_id=ana.id, amount=Decimal('3'), description='Cafe')

        delete_expense(user_id=beto.id, expense_id=expense.id)

        assert not Expense.objects.filter(id=expense.id).exists()

    def test_shopping_expense_cannot_be_deleted(self, ana, purchases):
        expense = Expense.objects.get(source_id=purchases['rice'].id)

        with pytest.raises(ShoppingExpenseDeleteError):
            delete_expense(user_id=ana.id, expense_id=expense.id)

        assert Expense.objects.filter(id=expense.id).exists()

    def test_other_households_expense_is_not_found(self, ana, outsider, household):
        create_household(user_id=outsider.id, name='Otra', currency='USD')
        foreign = create_manual_expense(user_id=outsider.id, amount=Decimal('3'), description='Cafe')

        with pytest.raises(ExpenseNotFoundError):
            get_expense(user_id=ana.id, expense_id=foreign.id)
        with pytest.raises(ExpenseNotFoundError):
            delete_expense(user_id=ana.id, expense_id=foreign.id)


@pytest.mark.django_db
class TestListExpenses:

    def test_all_household_expenses(self, ana, purchases):
        page = list_expenses(user_id=ana.id)

        assert page['total'] == 4
        assert len(page['items']) == 4

    def test_filters(self, ana, beto, purchases):
        by_payer = list_expenses(user_id=ana.id, filters=ExpenseFilters(payer_id=beto.id))
        assert [e.description for e in by_payer['items']] == ['Jabon']

        by_category = list_expenses(user_id=ana.id, filters=ExpenseFilters(category='food'))
        assert by_category['total'] == 2

        create_manual_expense(user_id=ana.id, amount=Decimal('1'), description='Propina')
        manual = list_expenses(user_id=ana.id, filters=ExpenseFilters(source_type=ExpenseSource.MANUAL))
        assert [e.description for e in manual['items']] == ['Propina']

    def test_date_range_and_order(self, ana, household):
        now = timezone.now()
        for days_ago, name in ((3, 'old'), (2, 'middle'), (1, 'new')):
            create_manual_expense(
                user_id=ana.id, amount=Decimal('1'), description=name,
                occurred_at=now - timedelta(days=days_ago),
            )

        page = list_expenses(
            user_id=ana.id,
            filters=ExpenseFilters(date_from=now - timedelta(days=2, hours=1), order='asc'),
        )

        assert [e.description for e in page['items']] == ['middle', 'new']

    def test_offset_and_limit(self, ana, household):
        now = timezone.now()
        for n in range(5):
            create_manual_expense(
                user_id=ana.id, amount=Decimal('1'), description=f'e{n}',
                occurred_at=now - timedelta(minutes=n),
            )

        page = list_expenses(user_id=ana.id, filters=ExpenseFilters(offset=1, limit=2))

        assert page['total'] == 5
        assert [e.description for e in page['items']] == ['e1', 'e2']


@pytest.mark.django_db
class TestSummaries:

    def test_household_total(self, ana, purchases):
        summary = summarize_expenses(user_id=ana.id)
        assert summary == {'total': Decimal('20.00'), 'currency': 'EUR'}

    def test_shared_lists_total(self, beto, purchases):
        summary = summarize_expenses(user_id=beto.id, scope=ExpenseScope.SHARED)
        assert summary['total'] == Decimal('16.00')

    def test_personal_lists_total_is_per_user(self, ana, beto, purchases):
        assert summarize_expenses(user_id=ana.id, scope=ExpenseScope.PERSONAL)['total'] == Decimal('4.00')
        assert summarize_expenses(user_id=beto.id, scope=ExpenseScope.PERSONAL)['total'] == Decimal('0.00')

    def test_mine(self, ana, beto, purchases):
        create_manual_expense(user_id=ana.id, amount=Decimal('1.50'), description='Propina')

        assert summarize_expenses(user_id=ana.id, scope=ExpenseScope.MINE)['total'] == Decimal('12.50')
        assert summarize_expenses(user_id=beto.id, scope=ExpenseScope.MINE)['total'] == Decimal('9.00')

    def test_shared_history_ignores_manual_and_personal(self, ana, purchases):
        create_manual_expense(user_id=ana.id, amount=Decimal('1'), description='Propina')

        page = list_expenses(user_id=ana.id, scope=ExpenseScope.SHARED)

        assert {e.description for e in page['items']} == {'Arroz', 'Sal', 'Jabon'}


@pytest.mark.django_db
class TestReports:

    def test_by_payer(self, ana, beto, household, purchases):
        create_manual_expense(user_id=ana.id, amount=Decimal('100'), description='Alquiler')

        report = total_by_payer(user_id=ana.id)

        assert report['household_id'] == household.id
        assert report['items'] == [
            {'payer_id': beto.id, 'display_name': 'Beto', 'total': Decimal('9.00')},
            {'payer_id': ana.id, 'display_name': 'Ana', 'total': Decimal('7.00')},
        ]

    def test_by_category(self, ana, purchases):
        report = total_by_category(user_id=ana.id)

        assert report['items'] == [
            {'category': 'cleaning', 'total': Decimal('9.00')},
            {'category': 'food', 'total': Decimal('5.00')},
            {'category': UNCATEGORIZED, 'total': Decimal('2.00')},
        ]

    def test_range_excludes_everything(self, ana, purchases):
        future = timezone.now() + timedelta(days=1)
        report = total_by_payer(user_id=ana.id, date_from=future)

        assert report['items'] == []
        assert report['date_from'] == future

    def test_balance(self, ana, household, purchases):
        create_income(user_id=ana.id, amount=Decimal('50'), description='Sueldo', source='salary')

        result = balance(user_id=ana.id)

        assert result['currency'] == 'EUR'
        assert result['income'] == Decimal('50.00')
        assert result['expense'] == Decimal('11.00')
        assert result['balance'] == Decimal('39.00')

    def test_reports_require_household(self, outsider):
        with pytest.raises(NoHouseholdError):
            total_by_category(user_id=outsider.id)

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.serializers import ErrorResponseSerializer, OkResponseSerializer

from .serializers import (
    BalanceSerializer,
    CategoryReportSerializer,
    CreateExpenseSerializer,
    DateRangeSerializer,
    ExpenseFilterSerializer,
    ExpensePageSerializer,
    ExpenseSerializer,
    PayerReportSerializer,
    TotalSerializer,
)
from .services import (
    ExpenseFilters,
    ExpenseScope,
    balance,
    create_manual_expense,
    delete_expense,
    get_expense,
    list_expenses,
    summarize_expenses,
    total_by_category,
    total_by_payer,
)


def _filters(request) -> ExpenseFilters:
    query = ExpenseFilterSerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return ExpenseFilters(**query.validated_data)


def _date_range(request) -> dict:
    query = DateRangeSerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return query.validated_data


# =============================================================================
# Expenses
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[ExpenseFilterSerializer],
    responses={200: ExpensePageSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Expenses of the caller's household.",
    tags=['expenses'],
)
@extend_schema(
    methods=['POST'],
    request=CreateExpenseSerializer,
    responses={201: ExpenseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Record a manual expense. The payer defaults to the caller.",
    tags=['expenses'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expenses(request):
    if request.method == 'GET':
        page = list_expenses(user_id=request.user.id, filters=_filters(request))
        return Response(ExpensePageSerializer(page).data)

    serializer = CreateExpenseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    expense = create_manual_expense(user_id=request.user.id, **serializer.validated_data)
    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['GET'],
    responses={200: ExpenseSerializer, 404: ErrorResponseSerializer},
    tags=['expenses'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: OkResponseSerializer, 404: ErrorResponseSerializer, 409: ErrorResponseSerializer},
    description="Delete a manual expense. Expenses from purchased items are "
                "removed by unmarking the item instead.",
    tags=['expenses'],
)
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, expense_id):
    if request.method == 'GET':
        expense = get_expense(user_id=request.user.id, expense_id=expense_id)
        return Response(ExpenseSerializer(expense).data)

    delete_expense(user_id=request.user.id, expense_id=expense_id)
    return Response({'ok': True})


@extend_schema(
    parameters=[ExpenseFilterSerializer],
    responses={200: TotalSerializer, 403: ErrorResponseSerializer},
    description="Total spent. The route decides the scope: the whole household, "
                "shared-list purchases, the caller's personal-list purchases, "
                "or everything the caller paid.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_summary(request, scope=ExpenseScope.HOUSEHOLD):
    summary = summarize_expenses(user_id=request.user.id, filters=_filters(request), scope=scope)
    return Response(TotalSerializer(summary).data)


@extend_schema(
    parameters=[ExpenseFilterSerializer],
    responses={200: ExpensePageSerializer, 403: ErrorResponseSerializer},
    description="Shopping expenses from shared lists or from the caller's personal lists.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_history(request, scope):
    page = list_expenses(user_id=request.user.id, filters=_filters(request), scope=scope)
    return Response(ExpensePageSerializer(page).data)


# =============================================================================
# Reports
# =============================================================================

@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: PayerReportSerializer, 403: ErrorResponseSerializer},
    description="Shared-list spending per payer.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_by_payer(request):
    report = total_by_payer(user_id=request.user.id, **_date_range(request))
    return Response(PayerReportSerializer(report).data)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: CategoryReportSerializer, 403: ErrorResponseSerializer},
    description="Shared-list spending per category.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_by_category(request):
    report = total_by_category(user_id=request.user.id, **_date_range(request))
    return Response(CategoryReportSerializer(report).data)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: BalanceSerializer, 403: ErrorResponseSerializer},
    description="The caller's income minus what they paid.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_balance(request):
    report = balance(user_id=request.user.id, **_date_range(request))
    return Response(BalanceSerializer(report).data)

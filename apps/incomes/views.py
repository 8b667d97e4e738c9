from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.serializers import ErrorResponseSerializer, OkResponseSerializer
from apps.expenses.serializers import TotalSerializer

from .serializers import (
    CreateIncomeSerializer,
    IncomeFilterSerializer,
    IncomePageSerializer,
    IncomeSerializer,
    UpdateIncomeSerializer,
)
from .services import (
    IncomeFilters,
    create_income,
    delete_income,
    get_income,
    list_incomes,
    summarize_incomes,
    update_income,
)


def _filters(request) -> IncomeFilters:
    query = IncomeFilterSerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return IncomeFilters(**query.validated_data)


@extend_schema(
    methods=['GET'],
    parameters=[IncomeFilterSerializer],
    responses={200: IncomePageSerializer, 400: ErrorResponseSerializer},
    description="The caller's incomes.",
    tags=['incomes'],
)
@extend_schema(
    methods=['POST'],
    request=CreateIncomeSerializer,
    responses={201: IncomeSerializer, 400: ErrorResponseSerializer},
    description="Record an income in the caller's household currency.",
    tags=['incomes'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def incomes(request):
    if request.method == 'GET':
        page = list_incomes(user_id=request.user.id, filters=_filters(request))
        return Response(IncomePageSerializer(page).data)

    serializer = CreateIncomeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    income = create_income(user_id=request.user.id, **serializer.validated_data)
    return Response(IncomeSerializer(income).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[IncomeFilterSerializer],
    responses={200: TotalSerializer},
    description="Total income matching the filters.",
    tags=['incomes'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def income_summary(request):
    summary = summarize_incomes(user_id=request.user.id, filters=_filters(request))
    return Response(TotalSerializer(summary).data)


@extend_schema(
    methods=['GET'],
    responses={200: IncomeSerializer, 404: ErrorResponseSerializer},
    tags=['incomes'],
)
@extend_schema(
    methods=['PATCH'],
    request=UpdateIncomeSerializer,
    responses={200: IncomeSerializer, 404: ErrorResponseSerializer},
    tags=['incomes'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: OkResponseSerializer, 404: ErrorResponseSerializer},
    tags=['incomes'],
)
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def income_detail(request, income_id):
    if request.method == 'GET':
        income = get_income(user_id=request.user.id, income_id=income_id)
        return Response(IncomeSerializer(income).data)

    if request.method == 'PATCH':
        serializer = UpdateIncomeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        income = update_income(user_id=request.user.id, income_id=income_id, **serializer.validated_data)
        return Response(IncomeSerializer(income).data)

    delete_income(user_id=request.user.id, income_id=income_id)
    return Response({'ok': True})

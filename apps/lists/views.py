from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.serializers import ErrorResponseSerializer, OkResponseSerializer

from .serializers import (
    AddItemSerializer,
    CreateListSerializer,
    HistoryPageSerializer,
    HistoryQuerySerializer,
    PendingItemsPageSerializer,
    PendingItemsQuerySerializer,
    SetPurchasedSerializer,
    ShoppingItemSerializer,
    ShoppingListSerializer,
    UpdateItemSerializer,
    UpdateListSerializer,
)
from .services import (
    add_item,
    create_list,
    delete_item,
    delete_list,
    get_list,
    history_page,
    list_lists,
    pending_items_page,
    set_purchased,
    update_item,
    update_list,
)


# =============================================================================
# Lists
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: ShoppingListSerializer(many=True), 403: ErrorResponseSerializer},
    description="Shared lists of the caller's household plus their personal lists.",
    tags=['lists'],
)
@extend_schema(
    methods=['POST'],
    request=CreateListSerializer,
    responses={201: ShoppingListSerializer, 403: ErrorResponseSerializer},
    description="Create a shared or personal list.",
    tags=['lists'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def shopping_lists(request):
    if request.method == 'GET':
        lists = list_lists(user_id=request.user.id)
        return Response(ShoppingListSerializer(lists, many=True).data)

    serializer = CreateListSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    shopping_list = create_list(user_id=request.user.id, **serializer.validated_data)
    return Response(ShoppingListSerializer(shopping_list).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['GET'],
    responses={200: ShoppingListSerializer, 404: ErrorResponseSerializer},
    tags=['lists'],
)
@extend_schema(
    methods=['PATCH'],
    request=UpdateListSerializer,
    responses={200: ShoppingListSerializer, 404: ErrorResponseSerializer},
    tags=['lists'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: OkResponseSerializer, 404: ErrorResponseSerializer},
    description="Delete a list and its items. Recorded expenses are kept.",
    tags=['lists'],
)
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def shopping_list_detail(request, list_id):
    if request.method == 'GET':
        shopping_list = get_list(user_id=request.user.id, list_id=list_id)
        return Response(ShoppingListSerializer(shopping_list).data)

    if request.method == 'PATCH':
        serializer = UpdateListSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shopping_list = update_list(
            user_id=request.user.id,
            list_id=list_id,
            name=serializer.validated_data['name'],
        )
        return Response(ShoppingListSerializer(shopping_list).data)

    delete_list(user_id=request.user.id, list_id=list_id)
    return Response({'ok': True})


# =============================================================================
# Items
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[PendingItemsQuerySerializer],
    responses={200: PendingItemsPageSerializer, 404: ErrorResponseSerializer},
    description="Pending items, oldest first, with the pending total amount.",
    tags=['lists'],
)
@extend_schema(
    methods=['POST'],
    request=AddItemSerializer,
    responses={201: ShoppingItemSerializer, 404: ErrorResponseSerializer},
    description="Add an item. Household members are notified for shared lists.",
    tags=['lists'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def list_items(request, list_id):
    if request.method == 'GET':
        query = PendingItemsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        page = pending_items_page(user_id=request.user.id, list_id=list_id, **query.validated_data)
        return Response(PendingItemsPageSerializer(page).data)

    serializer = AddItemSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    item = add_item(user_id=request.user.id, list_id=list_id, **serializer.validated_data)
    return Response(ShoppingItemSerializer(item).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=UpdateItemSerializer,
    responses={200: ShoppingItemSerializer, 404: ErrorResponseSerializer},
    tags=['lists'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: OkResponseSerializer, 404: ErrorResponseSerializer},
    description="Delete an item and the expense recorded when it was purchased.",
    tags=['lists'],
)
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def list_item_detail(request, list_id, item_id):
    if request.method == 'PATCH':
        serializer = UpdateItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = update_item(
            user_id=request.user.id,
            list_id=list_id,
            item_id=item_id,
            **serializer.validated_data,
        )
        return Response(ShoppingItemSerializer(item).data)

    delete_item(user_id=request.user.id, list_id=list_id, item_id=item_id)
    return Response({'ok': True})


@extend_schema(
    request=SetPurchasedSerializer,
    responses={200: ShoppingItemSerializer, 404: ErrorResponseSerializer},
    description="Mark an item purchased, which records a shopping expense, "
                "or unmark it, which removes that expense.",
    tags=['lists'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def item_purchased(request, list_id, item_id):
    serializer = SetPurchasedSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    item = set_purchased(
        user_id=request.user.id,
        list_id=list_id,
        item_id=item_id,
        purchased=serializer.validated_data['purchased'],
    )
    return Response(ShoppingItemSerializer(item).data)


@extend_schema(
    parameters=[HistoryQuerySerializer],
    responses={200: HistoryPageSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Purchased items, most recent first.",
    tags=['lists'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_history(request, list_id):
    query = HistoryQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    page = history_page(user_id=request.user.id, list_id=list_id, **query.validated_data)
    return Response(HistoryPageSerializer(page).data)

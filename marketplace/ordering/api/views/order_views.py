from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.params import query_int
from marketplace.api.serializers import ErrorResponseSerializer, OrderListResponseSerializer
from marketplace.domain.exceptions import InsufficientStock
from marketplace.ordering.api.serializers import (
    CheckoutResponseSerializer,
    CreateOrderRequestSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    UpdateOrderStatusRequestSerializer,
)


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    @extend_schema(
        operation_id="orders_list",
        summary="List the caller's orders",
        description="""
        **What it receives:**
        - Authentication token
        - Optional status filter (query param)
        - Pagination parameters (page, page_size)

        **What it returns:**
        - Consumers: orders they placed
        - Business accounts: orders received by businesses they own, plus their own purchases
        - Admins: every order
        """,
        parameters=[
            OpenApiParameter(name="status", type=str, description="Filter by order status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
        ],
        responses={
            200: OpenApiResponse(response=OrderListResponseSerializer, description="Orders retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown status filter"),
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        result = container.order_orchestrator().list_orders(
            request.user,
            status=request.query_params.get("status") or None,
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size"),
        )
        result["results"] = OrderSerializer(result["results"], many=True).data
        return Response(result, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        description="""
        **What it receives:**
        - `id` (UUID in URL): Order to retrieve
        - Authentication token (order buyer, owning vendor or admin)

        **What it returns:**
        - Order with item snapshots and status history
        """,
        responses={
            200: OpenApiResponse(response=OrderDetailSerializer, description="Order retrieved successfully"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not a party to the order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        order = container.order_orchestrator().get_order(pk, request.user)
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_create",
        summary="Create per-vendor orders from a cart",
        description="""
        **What it receives:**
        - `items`: cart lines `{product_id, quantity}` from any number of vendors
        - `delivery_method`: `pickup` or `delivery`
        - `contact`: optional delivery address, phone, notes

        **What it returns:**
        - One pending order per vendor whose stock could be reserved
        - `failures`: vendor groups that were dropped (re-submit them to retry)
        - 409 when no vendor group could be placed
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OpenApiResponse(response=CheckoutResponseSerializer, description="Orders created"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Empty cart or invalid line"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown product"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Insufficient stock for every vendor"),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = container.order_orchestrator().create_orders(
            buyer=request.user,
            cart=[{"product_id": line["product_id"], "quantity": line["quantity"]} for line in data["items"]],
            delivery_method=data["delivery_method"],
            contact=dict(data.get("contact") or {}),
        )

        failures = [failure.to_dict() for failure in result.failures]
        if result.all_failed:
            raise InsufficientStock(
                message="None of the vendor groups in the cart could be placed",
                details={"failures": failures},
            )

        return Response(
            {
                "orders": OrderSerializer(result.orders, many=True).data,
                "failures": failures,
                "count": len(result.orders),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="orders_update_status",
        summary="Apply an order status transition",
        description="""
        **What it receives:**
        - `id` (UUID in URL): Order to update
        - `status`: target status
        - `reason`: optional free text kept in the status history

        **Who may call it:**
        - The owning vendor: any permitted transition
        - The buyer: cancellation while the order is still pending
        - Admins: any permitted transition

        Cancelling returns every item's quantity to stock.
        """,
        request=UpdateOrderStatusRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderDetailSerializer, description="Order updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown status or invalid transition"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Actor may not apply this transition"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Order already delivered or cancelled"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["patch"], url_path="status", url_name="status")
    def update_status(self, request, pk=None):
        serializer = UpdateOrderStatusRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = container.order_state_machine().transition(
            pk,
            request.user,
            serializer.validated_data["status"],
            reason=serializer.validated_data.get("reason", ""),
        )
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_200_OK)

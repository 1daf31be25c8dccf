# quotations/views/order.py

"""
ACTIVE ORDER ENDPOINTS

GET  /quotations/orders/                   list (?status=)
GET  /quotations/orders/{id}/              detail with items + picking progress
POST /quotations/orders/{id}/advance/      one step forward (Mark Ready gated on picking)
POST /quotations/orders/{id}/status/       {"status": ...} forward move, skips allowed
POST /quotations/order-items/{id}/pick/    {"picked": true|false}
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.context import OperatorContext
from permissions.roles import CAP_ORDERS_PICK, CAP_QUOTATIONS_VIEW, HasCapability
from quotations.models import ActiveOrder
from quotations.serializers import (
    ActiveOrderSerializer,
    OrderItemSerializer,
    OrderStatusInputSerializer,
    PickInputSerializer,
)
from quotations.services.exceptions import QuotationError
from quotations.services.order_service import (
    advance_order,
    picking_progress,
    set_item_picked,
    transition_order,
)
from quotations.views.errors import quotation_error_response


@extend_schema(tags=["Orders"])
class ActiveOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    # Per-status capabilities are checked in the order service.
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_QUOTATIONS_VIEW
    serializer_class = ActiveOrderSerializer

    def get_queryset(self):
        qs = ActiveOrder.objects.select_related("quotation").prefetch_related("items__picked_by")

        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        return qs.order_by("-created_at")

    @extend_schema(request=None, responses={200: ActiveOrderSerializer})
    @action(detail=True, methods=["post"])
    def advance(self, request, pk=None):
        try:
            order = advance_order(operator=OperatorContext.from_request(request), order_id=pk)
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(ActiveOrderSerializer(order).data)

    @extend_schema(request=OrderStatusInputSerializer, responses={200: ActiveOrderSerializer})
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        cmd = OrderStatusInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            order = transition_order(
                operator=OperatorContext.from_request(request),
                order_id=pk,
                target_status=cmd.validated_data["status"],
            )
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(ActiveOrderSerializer(order).data)


@extend_schema(tags=["Orders"], request=PickInputSerializer)
class OrderItemPickView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_PICK

    def post(self, request, item_id):
        cmd = PickInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            item = set_item_picked(
                operator=OperatorContext.from_request(request),
                item_id=item_id,
                picked=cmd.validated_data["picked"],
            )
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(
            {
                "item": OrderItemSerializer(item).data,
                "progress": picking_progress(item.order).as_dict(),
            }
        )

# products/views/scan.py

"""
QR SCANNER ENDPOINTS

POST /products/scan/resolve/            payload -> live product (+ view record)
POST /products/scan/{id}/sell/          {"quantity": n}
POST /products/scan/{id}/stock-up/      {"quantity": n}
POST /products/scan/{id}/adjust/        {"quantity_change": +/-n}
POST /products/scan/{id}/relocate/      {"new_location": "RA2"}
POST /products/scan/{id}/flag/          {"note": "..."}
POST /products/scan/{id}/unflag/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from permissions.context import OperatorContext
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_FLAG,
    CAP_INVENTORY_RELOCATE,
    CAP_INVENTORY_SCAN,
    HasCapability,
)
from products.serializers import (
    ProductLocationHistorySerializer,
    ProductSerializer,
    ScanHistorySerializer,
)
from products.serializers.scan import (
    AdjustCommandSerializer,
    FlagCommandSerializer,
    QuantityCommandSerializer,
    RelocateCommandSerializer,
    ScanResolveSerializer,
)
from products.services import scan_actions
from products.services.exceptions import InventoryError
from products.services.qr_payload import parse_qr_payload
from products.views.errors import inventory_error_response


def mutation_payload(result) -> dict:
    return {
        "product": ProductSerializer(result.product).data,
        "record": ScanHistorySerializer(result.record).data,
        "location_record": (
            ProductLocationHistorySerializer(result.location_record).data
            if result.location_record is not None
            else None
        ),
    }


@extend_schema(tags=["Scanner"])
class ScanViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "scan"

    required_capability = CAP_INVENTORY_SCAN

    _ACTION_CAPABILITIES = {
        "stock_up": CAP_INVENTORY_ADJUST,
        "adjust": CAP_INVENTORY_ADJUST,
        "relocate": CAP_INVENTORY_RELOCATE,
        "flag": CAP_INVENTORY_FLAG,
        "unflag": CAP_INVENTORY_FLAG,
    }

    def get_permissions(self):
        self.required_capability = self._ACTION_CAPABILITIES.get(self.action, CAP_INVENTORY_SCAN)
        return [IsAuthenticated(), HasCapability()]

    def _run(self, fn, **kwargs):
        try:
            result = fn(operator=OperatorContext.from_request(self.request), **kwargs)
        except InventoryError as exc:
            return inventory_error_response(exc)
        return Response(mutation_payload(result))

    @extend_schema(request=ScanResolveSerializer)
    @action(detail=False, methods=["post"], url_path="resolve")
    def resolve(self, request):
        cmd = ScanResolveSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            payload = parse_qr_payload(cmd.validated_data["payload"])
        except InventoryError as exc:
            return inventory_error_response(exc)

        return self._run(scan_actions.record_view, product_id=payload.id)

    @extend_schema(request=QuantityCommandSerializer)
    @action(detail=True, methods=["post"], url_path="sell")
    def sell(self, request, pk=None):
        cmd = QuantityCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        return self._run(
            scan_actions.sell,
            product_id=pk,
            quantity=cmd.validated_data["quantity"],
            notes=cmd.validated_data.get("notes", ""),
        )

    @extend_schema(request=QuantityCommandSerializer)
    @action(detail=True, methods=["post"], url_path="stock-up")
    def stock_up(self, request, pk=None):
        cmd = QuantityCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        return self._run(
            scan_actions.stock_up,
            product_id=pk,
            quantity=cmd.validated_data["quantity"],
            notes=cmd.validated_data.get("notes", ""),
        )

    @extend_schema(request=AdjustCommandSerializer)
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        cmd = AdjustCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        return self._run(
            scan_actions.custom_adjust,
            product_id=pk,
            quantity_change=cmd.validated_data["quantity_change"],
            notes=cmd.validated_data.get("notes", ""),
        )

    @extend_schema(request=RelocateCommandSerializer)
    @action(detail=True, methods=["post"], url_path="relocate")
    def relocate(self, request, pk=None):
        cmd = RelocateCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        return self._run(
            scan_actions.relocate,
            product_id=pk,
            new_location=cmd.validated_data["new_location"],
            notes=cmd.validated_data.get("notes", ""),
        )

    @extend_schema(request=FlagCommandSerializer)
    @action(detail=True, methods=["post"], url_path="flag")
    def flag(self, request, pk=None):
        cmd = FlagCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        return self._run(
            scan_actions.flag_for_review,
            product_id=pk,
            note=cmd.validated_data.get("note", ""),
        )

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="unflag")
    def unflag(self, request, pk=None):
        return self._run(scan_actions.clear_review_flag, product_id=pk)

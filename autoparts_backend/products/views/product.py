# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product master data (CRUD)
- QR label PNG per product
- Audit trails: scan history + location history
- Low stock alerts + restock
- Bulk location update
- Inventory analytics
"""

from django.core.exceptions import ValidationError
from django.db.models import Q
from django.http import HttpResponse
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.context import OperatorContext
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_RELOCATE,
    CAP_INVENTORY_VIEW,
    CAP_REPORTS_VIEW_INVENTORY,
    HasCapability,
)
from products.models import Product, ScanHistory
from products.serializers import (
    ProductLocationHistorySerializer,
    ProductSerializer,
    ScanHistorySerializer,
)
from products.serializers.scan import BulkRelocateSerializer, QuantityCommandSerializer
from products.services.analytics import inventory_overview
from products.services.catalog import create_product, update_product
from products.services.exceptions import InventoryError
from products.services.labels import render_label_png
from products.services.relocation import bulk_relocate as relocate_products
from products.services.relocation import location_history_for
from products.services.stock_alerts import list_low_stock_products, restock_low_stock
from products.views.errors import inventory_error_response
from products.views.scan import mutation_payload


@extend_schema(tags=["Products"])
class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]

    required_capability = CAP_INVENTORY_VIEW

    _ACTION_CAPABILITIES = {
        "create": CAP_INVENTORY_EDIT,
        "update": CAP_INVENTORY_EDIT,
        "partial_update": CAP_INVENTORY_EDIT,
        "destroy": CAP_INVENTORY_EDIT,
        "restock": CAP_INVENTORY_ADJUST,
        "bulk_relocate": CAP_INVENTORY_RELOCATE,
        "analytics": CAP_REPORTS_VIEW_INVENTORY,
    }

    def get_permissions(self):
        self.required_capability = self._ACTION_CAPABILITIES.get(self.action, CAP_INVENTORY_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Product.objects.select_related("category")

        params = self.request.query_params
        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(name__icontains=q) | Q(product_code__icontains=q) | Q(sku__icontains=q)
            )

        location = (params.get("location") or "").strip().upper()
        if location == "UNASSIGNED":
            qs = qs.filter(location__isnull=True)
        elif location:
            qs = qs.filter(location=location)

        status_filter = (params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        return qs.order_by("-created_at")

    # -----------------------------
    # Writes go through the catalog service
    # -----------------------------
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            product = create_product(
                operator=OperatorContext.from_request(request),
                data=serializer.validated_data,
            )
        except (InventoryError, ValidationError) as exc:
            return inventory_error_response(exc)

        return Response(self.get_serializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            product = update_product(
                operator=OperatorContext.from_request(request),
                product=instance,
                data=serializer.validated_data,
            )
        except (InventoryError, ValidationError) as exc:
            return inventory_error_response(exc)

        return Response(self.get_serializer(product).data)

    # -----------------------------
    # QR label
    # -----------------------------
    @extend_schema(responses={(200, "image/png"): bytes})
    @action(detail=True, methods=["get"], url_path="label")
    def label(self, request, pk=None):
        product = self.get_object()
        png = render_label_png(product)
        response = HttpResponse(png, content_type="image/png")
        response["Content-Disposition"] = f'inline; filename="{product.product_code}.png"'
        return response

    # -----------------------------
    # Audit trails
    # -----------------------------
    @action(detail=True, methods=["get"], url_path="scan-history")
    def scan_history(self, request, pk=None):
        product = self.get_object()
        qs = ScanHistory.objects.filter(product=product).select_related("performed_by")
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ScanHistorySerializer(page, many=True).data)
        return Response(ScanHistorySerializer(qs, many=True).data)

    @action(detail=True, methods=["get"], url_path="location-history")
    def location_history(self, request, pk=None):
        product = self.get_object()
        qs = location_history_for(product)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(
                ProductLocationHistorySerializer(page, many=True).data
            )
        return Response(ProductLocationHistorySerializer(qs, many=True).data)

    # -----------------------------
    # Low stock
    # -----------------------------
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        products = list_low_stock_products(operator=OperatorContext.from_request(request))
        data = self.get_serializer(products, many=True).data
        return Response({"count": len(data), "results": data})

    @extend_schema(request=QuantityCommandSerializer)
    @action(detail=True, methods=["post"], url_path="restock")
    def restock(self, request, pk=None):
        cmd = QuantityCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            result = restock_low_stock(
                operator=OperatorContext.from_request(request),
                product_id=pk,
                quantity=cmd.validated_data["quantity"],
            )
        except InventoryError as exc:
            return inventory_error_response(exc)

        return Response(mutation_payload(result))

    # -----------------------------
    # Bulk location update
    # -----------------------------
    @extend_schema(request=BulkRelocateSerializer)
    @action(detail=False, methods=["post"], url_path="bulk-relocate")
    def bulk_relocate(self, request):
        cmd = BulkRelocateSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            result = relocate_products(
                operator=OperatorContext.from_request(request),
                product_ids=cmd.validated_data["product_ids"],
                new_location=cmd.validated_data["new_location"],
                notes=cmd.validated_data.get("notes", ""),
            )
        except InventoryError as exc:
            return inventory_error_response(exc)

        return Response(
            {
                "moved": [str(p.pk) for p in result.moved],
                "skipped": [str(p.pk) for p in result.skipped],
                "missing": result.missing,
            }
        )

    # -----------------------------
    # Analytics
    # -----------------------------
    @action(detail=False, methods=["get"], url_path="analytics")
    def analytics(self, request):
        return Response(inventory_overview(operator=OperatorContext.from_request(request)))

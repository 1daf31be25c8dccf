# quotations/views/quotation.py

"""
QUOTATION VIEWSET

GET  /quotations/quotations/               list (?status=, ?q= number / party / vehicle)
POST /quotations/quotations/               create (pending)
GET  /quotations/quotations/{id}/
POST /quotations/quotations/{id}/accept/   -> 201 with the spawned order
POST /quotations/quotations/{id}/decline/
GET  /quotations/quotations/{id}/pdf/      printable quotation
"""

from django.db.models import Q
from django.http import HttpResponse
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from billing.services.exceptions import DocumentGenerationError
from permissions.context import OperatorContext
from permissions.roles import CAP_QUOTATIONS_MANAGE, CAP_QUOTATIONS_VIEW, HasCapability
from quotations.models import Quotation
from quotations.serializers import (
    ActiveOrderSerializer,
    QuotationInputSerializer,
    QuotationListSerializer,
    QuotationSerializer,
)
from quotations.services.exceptions import QuotationError
from quotations.services.quotation_service import (
    accept_quotation,
    create_quotation,
    decline_quotation,
    quotation_document,
)
from quotations.views.errors import quotation_error_response


@extend_schema(tags=["Quotations"])
class QuotationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_QUOTATIONS_VIEW

    _ACTION_CAPABILITIES = {
        "create": CAP_QUOTATIONS_MANAGE,
        "accept": CAP_QUOTATIONS_MANAGE,
        "decline": CAP_QUOTATIONS_MANAGE,
    }

    def get_permissions(self):
        self.required_capability = self._ACTION_CAPABILITIES.get(self.action, CAP_QUOTATIONS_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_serializer_class(self):
        if self.action == "list":
            return QuotationListSerializer
        return QuotationSerializer

    def get_queryset(self):
        qs = Quotation.objects.all()

        if self.action == "retrieve":
            qs = qs.prefetch_related("items")

        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(quotation_number__icontains=q)
                | Q(party_name__icontains=q)
                | Q(vehicle_number__icontains=q)
            )

        return qs.order_by("-created_at")

    @extend_schema(request=QuotationInputSerializer, responses={201: QuotationSerializer})
    def create(self, request, *args, **kwargs):
        cmd = QuotationInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            quotation = create_quotation(
                operator=OperatorContext.from_request(request),
                data=cmd.validated_data,
            )
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={201: ActiveOrderSerializer})
    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        try:
            order = accept_quotation(operator=OperatorContext.from_request(request), quotation_id=pk)
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(ActiveOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: QuotationSerializer})
    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):
        try:
            quotation = decline_quotation(
                operator=OperatorContext.from_request(request), quotation_id=pk
            )
        except QuotationError as exc:
            return quotation_error_response(exc)

        return Response(QuotationSerializer(quotation).data)

    @extend_schema(responses={(200, "application/pdf"): bytes})
    @action(detail=True, methods=["get"], url_path="pdf")
    def pdf(self, request, pk=None):
        try:
            filename, content = quotation_document(
                operator=OperatorContext.from_request(request), quotation_id=pk
            )
        except (QuotationError, DocumentGenerationError) as exc:
            return quotation_error_response(exc)

        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = f'inline; filename="{filename}"'
        return response

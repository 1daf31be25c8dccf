# billing/views/bill.py

"""
BILL VIEWSET

GET    /billing/bills/                    list (?q= bill no / party / GSTIN)
POST   /billing/bills/                    create (201; document_status ready|failed)
GET    /billing/bills/{id}/               detail with lines, payments, HSN summary
DELETE /billing/bills/{id}/
GET    /billing/bills/{id}/payments/      payment history
POST   /billing/bills/{id}/payments/      record a payment
GET    /billing/bills/{id}/pdf/           stored PDF (regenerated when missing)
POST   /billing/bills/{id}/regenerate-pdf/
"""

from django.db.models import Q
from django.http import HttpResponse
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from billing.models import Bill
from billing.serializers import (
    BillInputSerializer,
    BillListSerializer,
    BillPaymentSerializer,
    BillSerializer,
    PaymentInputSerializer,
)
from billing.services.bill_service import (
    create_bill,
    delete_bill,
    get_bill,
    get_bill_document,
    regenerate_bill_document,
)
from billing.services.exceptions import BillingError
from billing.services.payment_service import payments_for, record_payment
from billing.views.errors import billing_error_response
from permissions.context import OperatorContext
from permissions.roles import (
    CAP_BILLING_CREATE,
    CAP_BILLING_DELETE,
    CAP_BILLING_PAYMENT,
    CAP_BILLING_VIEW,
    HasCapability,
)


@extend_schema(tags=["Billing"])
class BillViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BILLING_VIEW

    _ACTION_CAPABILITIES = {
        "create": CAP_BILLING_CREATE,
        "destroy": CAP_BILLING_DELETE,
        "regenerate_pdf": CAP_BILLING_CREATE,
    }

    def get_permissions(self):
        capability = self._ACTION_CAPABILITIES.get(self.action, CAP_BILLING_VIEW)
        if self.action == "payments" and self.request.method == "POST":
            capability = CAP_BILLING_PAYMENT
        self.required_capability = capability
        return [IsAuthenticated(), HasCapability()]

    def get_serializer_class(self):
        if self.action == "list":
            return BillListSerializer
        return BillSerializer

    def get_queryset(self):
        qs = Bill.objects.all()

        if self.action == "retrieve":
            qs = qs.prefetch_related("items", "payments__recorded_by")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(bill_number__icontains=q)
                | Q(party_name__icontains=q)
                | Q(party_gstin__icontains=q)
            )

        return qs.order_by("-created_at")

    @extend_schema(request=BillInputSerializer, responses={201: BillSerializer})
    def create(self, request, *args, **kwargs):
        cmd = BillInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            result = create_bill(
                operator=OperatorContext.from_request(request),
                data=cmd.validated_data,
            )
        except BillingError as exc:
            return billing_error_response(exc)

        payload = BillSerializer(result.bill).data
        payload["document_status"] = result.document_status
        if result.warning:
            payload["warning"] = result.warning
        return Response(payload, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        try:
            delete_bill(operator=OperatorContext.from_request(request), bill_id=pk)
        except BillingError as exc:
            return billing_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=PaymentInputSerializer, responses={200: BillPaymentSerializer(many=True)})
    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request, pk=None):
        operator = OperatorContext.from_request(request)

        if request.method == "GET":
            try:
                bill = get_bill(operator=operator, bill_id=pk)
            except BillingError as exc:
                return billing_error_response(exc)
            return Response(
                BillPaymentSerializer(payments_for(operator=operator, bill=bill), many=True).data
            )

        cmd = PaymentInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            payment = record_payment(
                operator=operator,
                bill_id=pk,
                amount=cmd.validated_data["amount"],
                method=cmd.validated_data["method"],
                payment_date=cmd.validated_data.get("payment_date"),
                note=cmd.validated_data.get("note", ""),
            )
        except BillingError as exc:
            return billing_error_response(exc)

        bill = Bill.objects.get(pk=payment.bill_id)
        return Response(
            {
                "payment": BillPaymentSerializer(payment).data,
                "remaining_amount": str(bill.remaining_amount),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses={(200, "application/pdf"): bytes})
    @action(detail=True, methods=["get"], url_path="pdf")
    def pdf(self, request, pk=None):
        try:
            filename, content = get_bill_document(
                operator=OperatorContext.from_request(request), bill_id=pk
            )
        except BillingError as exc:
            return billing_error_response(exc)

        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = f'inline; filename="{filename}"'
        return response

    @extend_schema(request=None, responses={200: BillSerializer})
    @action(detail=True, methods=["post"], url_path="regenerate-pdf")
    def regenerate_pdf(self, request, pk=None):
        try:
            bill = regenerate_bill_document(
                operator=OperatorContext.from_request(request), bill_id=pk
            )
        except BillingError as exc:
            return billing_error_response(exc)

        payload = BillSerializer(bill).data
        payload["document_status"] = "ready"
        return Response(payload)

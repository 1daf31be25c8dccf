# billing/views/preview.py

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from billing.serializers import BillInputSerializer
from billing.services.bill_service import preview_bill
from billing.services.exceptions import BillingError
from billing.services.tax import tax_percent
from billing.views.errors import billing_error_response
from permissions.context import OperatorContext
from permissions.roles import CAP_BILLING_CREATE, HasCapability


def _money(value) -> str:
    return f"{value:.2f}"


@extend_schema(tags=["Billing"], request=BillInputSerializer)
class BillPreviewView(APIView):
    """
    POST /billing/preview/

    Line amounts, totals and HSN summary for a draft bill. Nothing is saved
    and no number is consumed.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BILLING_CREATE

    def post(self, request):
        cmd = BillInputSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            preview = preview_bill(
                operator=OperatorContext.from_request(request),
                data=cmd.validated_data,
            )
        except BillingError as exc:
            return billing_error_response(exc)

        totals = preview["totals"]
        return Response(
            {
                "lines": [
                    {
                        "description": line.description,
                        "hsn_sac": line.hsn_sac,
                        "quantity": _money(line.quantity),
                        "unit": line.unit,
                        "rate": _money(line.rate),
                        "taxable_value": _money(line.taxable_value),
                        "cgst_amount": _money(line.cgst_amount),
                        "sgst_amount": _money(line.sgst_amount),
                        "total_amount": _money(line.total_amount),
                    }
                    for line in preview["lines"]
                ],
                "totals": {
                    "item_count": totals.item_count,
                    "subtotal": _money(totals.subtotal),
                    "cgst_amount": _money(totals.cgst_amount),
                    "sgst_amount": _money(totals.sgst_amount),
                    "total_tax": _money(totals.total_tax),
                    "total_amount": _money(totals.total_amount),
                    "tax_percent": tax_percent(totals.total_tax, totals.subtotal),
                },
                "hsn_summary": [
                    {
                        "hsn_sac": row["hsn_sac"],
                        "taxable_value": _money(row["taxable_value"]),
                        "total_tax": _money(row["total_tax"]),
                        "is_total": row["is_total"],
                    }
                    for row in preview["hsn_summary"]
                ],
            }
        )

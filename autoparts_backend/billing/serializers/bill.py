# billing/serializers/bill.py

"""
BILLING SERIALIZERS

Input serializers only check shape (types, lengths). Business validation
(party name, GSTIN, phone, positive quantities, tax ranges) lives in
billing.services.aggregator.validate_bill_input so the API, the preview
endpoint and direct service callers share one rule set.
"""

from rest_framework import serializers

from billing.models import Bill, BillItem, BillPayment
from billing.services.hsn import group_by_hsn
from billing.services.tax import tax_percent


# =========================================================
# Input
# =========================================================
class BillLineInputSerializer(serializers.Serializer):
    product = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(allow_blank=True, max_length=500)
    hsn_sac = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, max_length=32)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    unit = serializers.CharField(required=False, allow_blank=True, max_length=8)
    rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    cgst_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    sgst_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)


class BillInputSerializer(serializers.Serializer):
    party_name = serializers.CharField(allow_blank=True, max_length=255)
    party_address = serializers.CharField(required=False, allow_blank=True)
    party_gstin = serializers.CharField(required=False, allow_blank=True, max_length=32)
    party_phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    place_of_supply = serializers.CharField(required=False, allow_blank=True, max_length=128)
    invoice_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = BillLineInputSerializer(many=True, allow_empty=True)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.ChoiceField(choices=BillPayment.METHOD_CHOICES, default=BillPayment.METHOD_CASH)
    payment_date = serializers.DateField(required=False)
    note = serializers.CharField(required=False, allow_blank=True, max_length=255)


# =========================================================
# Output
# =========================================================
class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = [
            "id",
            "position",
            "product",
            "description",
            "hsn_sac",
            "quantity",
            "unit",
            "rate",
            "taxable_value",
            "cgst_rate",
            "sgst_rate",
            "cgst_amount",
            "sgst_amount",
            "total_amount",
        ]
        read_only_fields = fields


class BillPaymentSerializer(serializers.ModelSerializer):
    recorded_by_email = serializers.EmailField(source="recorded_by.email", read_only=True, default=None)

    class Meta:
        model = BillPayment
        fields = [
            "id",
            "amount",
            "method",
            "payment_date",
            "note",
            "recorded_by",
            "recorded_by_email",
            "created_at",
        ]
        read_only_fields = fields


class BillListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bill
        fields = [
            "id",
            "bill_number",
            "invoice_date",
            "party_name",
            "party_gstin",
            "total_amount",
            "remaining_amount",
            "pdf_path",
            "created_at",
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    items = BillItemSerializer(many=True, read_only=True)
    payments = BillPaymentSerializer(many=True, read_only=True)
    hsn_summary = serializers.SerializerMethodField()
    tax_percent = serializers.SerializerMethodField()
    paid_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Bill
        fields = [
            "id",
            "bill_number",
            "invoice_date",
            "party_name",
            "party_address",
            "party_gstin",
            "party_phone",
            "place_of_supply",
            "notes",
            "subtotal",
            "cgst_amount",
            "sgst_amount",
            "total_tax",
            "total_amount",
            "tax_percent",
            "paid_amount",
            "remaining_amount",
            "pdf_path",
            "items",
            "payments",
            "hsn_summary",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_hsn_summary(self, obj) -> list:
        return [
            {k: (str(v) if k not in ("hsn_sac", "is_total") else v) for k, v in row.as_dict().items()}
            for row in group_by_hsn(obj.items.all())
        ]

    def get_tax_percent(self, obj) -> int:
        return tax_percent(obj.total_tax, obj.subtotal)

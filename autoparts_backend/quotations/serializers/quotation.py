# quotations/serializers/quotation.py

"""
QUOTATION / ORDER SERIALIZERS

Input serializers check shape only. Blank-row dropping and the
"at least one item" rule live in quotations.services.quotation_service.
"""

from rest_framework import serializers

from quotations.models import ActiveOrder, OrderItem, Quotation, QuotationItem
from quotations.services.order_service import picking_progress


# =========================================================
# Input
# =========================================================
class QuotationItemInputSerializer(serializers.Serializer):
    product = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, max_length=500)
    # Free text: unused form rows arrive with blank rate / quantity and are
    # dropped by the service.
    quantity = serializers.CharField(allow_blank=True, allow_null=True, default="1")
    rate = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class QuotationInputSerializer(serializers.Serializer):
    party_name = serializers.CharField(allow_blank=True, max_length=255)
    party_address = serializers.CharField(required=False, allow_blank=True)
    vehicle_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    comments = serializers.CharField(required=False, allow_blank=True)
    items = QuotationItemInputSerializer(many=True, allow_empty=True)


class OrderStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ActiveOrder.STATUS_CHOICES)


class PickInputSerializer(serializers.Serializer):
    picked = serializers.BooleanField(default=True)


# =========================================================
# Output
# =========================================================
class QuotationItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuotationItem
        fields = ["id", "position", "product", "description", "quantity", "rate", "total_amount"]
        read_only_fields = fields


class QuotationListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(source="items.count", read_only=True)

    class Meta:
        model = Quotation
        fields = [
            "id",
            "quotation_number",
            "party_name",
            "vehicle_number",
            "status",
            "total_amount",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields


class QuotationSerializer(serializers.ModelSerializer):
    items = QuotationItemSerializer(many=True, read_only=True)
    order_id = serializers.SerializerMethodField()

    class Meta:
        model = Quotation
        fields = [
            "id",
            "quotation_number",
            "party_name",
            "party_address",
            "vehicle_number",
            "comments",
            "status",
            "subtotal",
            "total_amount",
            "items",
            "order_id",
            "created_by",
            "decided_by",
            "decided_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_order_id(self, obj):
        order = ActiveOrder.objects.filter(quotation=obj).only("id").first()
        return str(order.pk) if order else None


class OrderItemSerializer(serializers.ModelSerializer):
    picked_by_email = serializers.EmailField(source="picked_by.email", read_only=True, default=None)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "description",
            "quantity",
            "is_picked",
            "picked_at",
            "picked_by",
            "picked_by_email",
        ]
        read_only_fields = fields


class ActiveOrderSerializer(serializers.ModelSerializer):
    quotation_number = serializers.CharField(source="quotation.quotation_number", read_only=True)
    party_name = serializers.CharField(source="quotation.party_name", read_only=True)
    vehicle_number = serializers.CharField(source="quotation.vehicle_number", read_only=True)
    total_amount = serializers.DecimalField(
        source="quotation.total_amount", max_digits=14, decimal_places=2, read_only=True
    )
    items = OrderItemSerializer(many=True, read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = ActiveOrder
        fields = [
            "id",
            "order_number",
            "quotation",
            "quotation_number",
            "party_name",
            "vehicle_number",
            "total_amount",
            "status",
            "status_changed_at",
            "items",
            "progress",
            "created_at",
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        return picking_progress(obj).as_dict()

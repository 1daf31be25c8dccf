# products/serializers/history.py

from rest_framework import serializers

from products.models import ProductLocationHistory, ScanHistory


class ScanHistorySerializer(serializers.ModelSerializer):
    performed_by_email = serializers.EmailField(source="performed_by.email", read_only=True, default=None)

    class Meta:
        model = ScanHistory
        fields = [
            "id",
            "product",
            "action",
            "quantity_change",
            "old_stock",
            "new_stock",
            "old_location",
            "new_location",
            "notes",
            "performed_by",
            "performed_by_email",
            "created_at",
        ]
        read_only_fields = fields


class ProductLocationHistorySerializer(serializers.ModelSerializer):
    changed_by_email = serializers.EmailField(source="changed_by.email", read_only=True, default=None)

    class Meta:
        model = ProductLocationHistory
        fields = [
            "id",
            "product",
            "old_location",
            "new_location",
            "notes",
            "changed_by",
            "changed_by_email",
            "changed_at",
        ]
        read_only_fields = fields

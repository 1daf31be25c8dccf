# products/serializers/scan.py

"""
Scanner command serializers (input only).
Quantity rules (positive / non-zero) are enforced by the recorder service.
"""

from rest_framework import serializers

from products.models import Product
from products.services.scan_actions import MAX_STOCK


class ScanResolveSerializer(serializers.Serializer):
    payload = serializers.CharField(trim_whitespace=False)


class QuantityCommandSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(max_value=MAX_STOCK)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AdjustCommandSerializer(serializers.Serializer):
    quantity_change = serializers.IntegerField(min_value=-MAX_STOCK, max_value=MAX_STOCK)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RelocateCommandSerializer(serializers.Serializer):
    new_location = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class FlagCommandSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")


class BulkRelocateSerializer(serializers.Serializer):
    product_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    new_location = serializers.ChoiceField(choices=Product.LOCATION_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

# products/serializers/product.py

"""
PRODUCT SERIALIZER

- product_code is minted by the catalog service, never client supplied
- stock_quantity / location are writable on create only; afterwards they
  move through the audited scanner + relocation endpoints
- images accepts the versioned manifest or a legacy list of URLs
"""

from rest_framework import serializers

from products.models import Category, Product
from products.services.exceptions import InvalidImageManifest
from products.services.media import normalize_images
from products.services.stock_alerts import stock_level


class ProductSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), required=False, allow_null=True
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    effective_low_stock_threshold = serializers.IntegerField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_level = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "product_code",
            "name",
            "slug",
            "sku",
            "category",
            "category_name",
            "short_description",
            "description",
            "price",
            "stock_quantity",
            "low_stock_threshold",
            "effective_low_stock_threshold",
            "is_low_stock",
            "stock_level",
            "location",
            "status",
            "review_note",
            "published",
            "tags",
            "images",
            "revision",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "product_code",
            "status",
            "review_note",
            "revision",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"slug": {"required": False}}

    def get_stock_level(self, obj) -> str:
        return stock_level(obj)

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_images(self, value):
        try:
            return normalize_images(value)
        except InvalidImageManifest as exc:
            raise serializers.ValidationError(str(exc))

    def validate_tags(self, value):
        if value in (None, ""):
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
            raise serializers.ValidationError("tags must be a list of strings")
        return [t.strip() for t in value if t.strip()]

    def validate(self, attrs):
        if self.instance is not None:
            for field in ("stock_quantity", "location"):
                if field in attrs and attrs[field] != getattr(self.instance, field):
                    raise serializers.ValidationError(
                        {field: "Use the scanner / relocation endpoints to change this field."}
                    )
                attrs.pop(field, None)
        return attrs

# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe):
- Product master data is editable.
- stock_quantity / location / status are read-only here; they change
  through the scanner and relocation services so every change is audited.
- ScanHistory and ProductLocationHistory are view-only.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product, ProductLocationHistory, ScanHistory


class _ReadOnlyAuditAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "created_at")
    search_fields = ("name",)


class LocationHistoryInline(admin.TabularInline):
    model = ProductLocationHistory
    extra = 0
    can_delete = False
    fields = ("old_location", "new_location", "changed_by", "notes", "changed_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "product_code",
        "name",
        "location",
        "stock_quantity",
        "low_stock_threshold",
        "status",
        "published",
    )
    list_filter = ("location", "status", "published", "category")
    search_fields = ("product_code", "name", "sku")
    readonly_fields = (
        "product_code",
        "stock_quantity",
        "location",
        "status",
        "review_note",
        "revision",
        "created_by",
        "created_at",
        "updated_at",
    )
    inlines = [LocationHistoryInline]

    def has_add_permission(self, request):
        # product codes are minted by the catalog service (API)
        return False


@admin.register(ScanHistory)
class ScanHistoryAdmin(_ReadOnlyAuditAdmin):
    list_display = ("product", "action", "quantity_change", "old_stock", "new_stock", "performed_by", "created_at")
    list_filter = ("action",)
    search_fields = ("product__name", "product__product_code")


@admin.register(ProductLocationHistory)
class ProductLocationHistoryAdmin(_ReadOnlyAuditAdmin):
    list_display = ("product", "old_location", "new_location", "changed_by", "changed_at")
    list_filter = ("new_location",)
    search_fields = ("product__name", "product__product_code")

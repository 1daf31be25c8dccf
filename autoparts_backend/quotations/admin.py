# quotations/admin.py

"""
Quotations and orders move only through the quotation services
(numbering, lock on accept, forward-only status). Admin is read-only.
"""

from django.contrib import admin

from quotations.models import ActiveOrder, OrderItem, Quotation, QuotationItem


class QuotationItemInline(admin.TabularInline):
    model = QuotationItem
    extra = 0
    can_delete = False
    fields = ("position", "description", "product", "quantity", "rate", "total_amount")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("description", "quantity", "is_picked", "picked_at", "picked_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class _ReadOnlyAdmin(admin.ModelAdmin):
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Quotation)
class QuotationAdmin(_ReadOnlyAdmin):
    list_display = ("quotation_number", "party_name", "vehicle_number", "status", "total_amount", "created_at")
    list_filter = ("status",)
    search_fields = ("quotation_number", "party_name", "vehicle_number")
    inlines = [QuotationItemInline]


@admin.register(ActiveOrder)
class ActiveOrderAdmin(_ReadOnlyAdmin):
    list_display = ("order_number", "quotation", "status", "status_changed_at")
    list_filter = ("status",)
    search_fields = ("order_number", "quotation__quotation_number", "quotation__party_name")
    inlines = [OrderItemInline]

# billing/admin.py

"""
Bills are created through the billing service only (numbering + PDF).
Admin is a read-only window onto saved invoices and their payments.
"""

from django.contrib import admin

from billing.models import Bill, BillItem, BillPayment


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    can_delete = False
    fields = (
        "description",
        "hsn_sac",
        "quantity",
        "unit",
        "rate",
        "taxable_value",
        "cgst_amount",
        "sgst_amount",
        "total_amount",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class BillPaymentInline(admin.TabularInline):
    model = BillPayment
    extra = 0
    can_delete = False
    fields = ("amount", "method", "payment_date", "note", "recorded_by", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = (
        "bill_number",
        "invoice_date",
        "party_name",
        "party_gstin",
        "total_amount",
        "remaining_amount",
    )
    search_fields = ("bill_number", "party_name", "party_gstin")
    date_hierarchy = "invoice_date"
    inlines = [BillItemInline, BillPaymentInline]

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser

from django.contrib import admin

from sequences.models import DocumentSequence


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("kind", "scope", "last_value", "updated_at")
    list_filter = ("kind",)
    readonly_fields = ("kind", "scope", "last_value", "updated_at")

from django.contrib import admin  # type: ignore

from .models import LegalDocument, LegalDocumentVersion, Resource


class LegalDocumentVersionInline(admin.TabularInline):
    model = LegalDocumentVersion
    extra = 0
    readonly_fields = ("version_number", "file", "file_size", "mime_type", "uploaded_by", "uploaded_at")


@admin.register(LegalDocument)
class LegalDocumentAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "status", "property", "expiry_date", "uploaded_at")
    list_filter = ("category", "status")
    search_fields = ("name", "description")
    inlines = [LegalDocumentVersionInline]


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "property", "created_at")
    list_filter = ("type",)
    search_fields = ("name", "property__name")

from django.contrib import admin  # type: ignore

from .models import Contact, ContactProperty


class ContactPropertyInline(admin.TabularInline):
    model = ContactProperty
    extra = 0
    autocomplete_fields = ("property",)


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "email", "phone", "category", "language")
    list_filter = ("category", "language")
    search_fields = ("first_name", "last_name", "email", "phone")
    inlines = [ContactPropertyInline]

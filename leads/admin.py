from django.contrib import admin

from .models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = (
        "email",
        "first_name",
        "last_name",
        "company",
        "source",
        "status",
        "score",
        "is_qualified",
        "owner",
        "created_at",
    )
    search_fields = ("first_name", "last_name", "email", "company", "city")
    list_filter = ("status", "source", "is_qualified")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("owner",)

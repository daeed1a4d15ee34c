from django.contrib import admin

from .models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = (
        "client_name",
        "order_id",
        "stage",
        "assign_team_member",
        "assignment_status",
        "discounted_price",
        "created_at",
    )
    list_filter = ("stage", "source", "payment_status", "billing_sent_status", "assignment_status")
    search_fields = ("client_name", "client_company_name", "order_id", "email", "phone")
    readonly_fields = ("discounted_price", "created_at", "updated_at")
    raw_id_fields = ("referred_by_client",)
    date_hierarchy = "created_at"

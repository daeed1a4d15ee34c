from django.contrib import admin

from .models import LeadNotification


@admin.register(LeadNotification)
class LeadNotificationAdmin(admin.ModelAdmin):
    list_display = ("lead", "user", "is_viewed", "created_at", "viewed_at")
    list_filter = ("is_viewed",)
    search_fields = ("lead__client_name", "lead__order_id", "user__full_name")
    list_select_related = ("lead", "user")

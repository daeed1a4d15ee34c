from django.contrib import admin
from django.db.models import Count

from .models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "purchase_order_count", "created_at")
    search_fields = ("name", "description")

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_po_count=Count("purchase_orders"))

    @admin.display(description="Purchase orders", ordering="_po_count")
    def purchase_order_count(self, obj):
        return obj._po_count

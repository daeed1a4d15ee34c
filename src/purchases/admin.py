from django.contrib import admin

from .models import MTokenSerialNumber, PurchaseOrder


class MTokenSerialNumberInline(admin.TabularInline):
    model = MTokenSerialNumber
    extra = 0
    fields = ("serial_number", "is_used", "used_in_lead")
    readonly_fields = ("serial_number", "is_used", "used_in_lead")
    can_delete = False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("product_name", "store", "quantity", "amount", "purchase_date", "created_at")
    list_filter = ("store", "purchase_date")
    inlines = [MTokenSerialNumberInline]
    list_select_related = ("store",)
    date_hierarchy = "purchase_date"


@admin.register(MTokenSerialNumber)
class MTokenSerialNumberAdmin(admin.ModelAdmin):
    list_display = ("serial_number", "store", "purchase_date", "is_used", "used_in_lead")
    list_filter = ("is_used", "store")
    search_fields = ("serial_number",)
    list_select_related = ("store", "used_in_lead")
    readonly_fields = ("is_used", "used_in_lead")

from django.contrib import admin

from .models import PasswordReset, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin configuration for the custom User model."""

    list_display = (
        "email",
        "full_name",
        "role",
        "lead_count",
        "is_active",
        "date_joined",
    )
    list_filter = ("role", "is_active", "is_staff", "is_superuser")
    search_fields = ("email", "full_name", "phone")
    ordering = ("full_name",)
    actions = ("activate_users", "deactivate_users")
    fields = (
        "email",
        "full_name",
        "phone",
        "image",
        "role",
        "is_active",
        "is_staff",
        "is_superuser",
        "last_login",
        "date_joined",
    )
    readonly_fields = ("date_joined", "last_login")

    @admin.display(description="Assigned leads")
    def lead_count(self, obj):
        from leads.models import Lead

        return Lead.objects.filter(assign_team_member=obj.full_name).count()

    @admin.action(description="Activate selected users")
    def activate_users(self, request, queryset):
        queryset.update(is_active=True)

    @admin.action(description="Deactivate selected users")
    def deactivate_users(self, request, queryset):
        queryset.update(is_active=False)


@admin.register(PasswordReset)
class PasswordResetAdmin(admin.ModelAdmin):
    list_display = ("email", "is_used", "created_at", "expires_at")
    list_filter = ("is_used",)
    search_fields = ("email",)
    readonly_fields = ("email", "code", "created_at", "expires_at")

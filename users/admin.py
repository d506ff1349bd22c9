from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "email",
        "name",
        "role",
        "subscription_status",
        "is_active",
    )
    list_editable = ("role",)
    search_fields = ("email", "name")
    list_filter = ("role", "subscription_status", "is_active")
    readonly_fields = ("subscription_id", "subscription_price_id", "date_joined")
    ordering = ("-id",)

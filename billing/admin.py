# billing/admin.py
"""
Django admin configuration for billing models.
"""

import csv
from django.contrib import admin
from django.http import HttpResponse

from .models import Payment, StripeEvent


def export_as_csv(modeladmin, request, queryset):
    """Export selected rows to CSV."""
    meta = modeladmin.model._meta
    field_names = [field.name for field in meta.fields]

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{meta.model_name}.csv"'
    writer = csv.writer(response)

    writer.writerow(field_names)
    for obj in queryset:
        writer.writerow([getattr(obj, f) for f in field_names])

    return response


export_as_csv.short_description = "Export selected to CSV"


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "program", "amount", "currency", "status", "created_at"]
    list_filter = ["status", "currency", "created_at"]
    search_fields = ["user__email", "program__title", "stripe_payment_id"]
    readonly_fields = ["id", "stripe_payment_id", "created_at"]
    ordering = ["-created_at"]
    actions = [export_as_csv]


@admin.register(StripeEvent)
class StripeEventAdmin(admin.ModelAdmin):
    list_display = ["event_id", "event_type", "created_at"]
    list_filter = ["event_type"]
    search_fields = ["event_id"]
    readonly_fields = ["event_id", "event_type", "created_at"]
    ordering = ["-created_at"]

from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "project", "client", "amount", "provider", "status", "reconciled_via", "withdrawn_at", "created_at")
    list_filter = ("status", "provider", "reconciled_via")
    search_fields = ("id", "gateway_reference", "operator_reference")
    readonly_fields = ("version", "withdrawn_at", "withdrawal_reference")

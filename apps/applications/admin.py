from django.contrib import admin
from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("project", "developer", "bid_amount", "status", "created_at")
    list_filter = ("status",)

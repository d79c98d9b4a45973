from django.contrib import admin
from .models import Project, Milestone


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("title", "client", "status", "visibility", "assigned_developer", "created_at")
    list_filter = ("status", "visibility")
    search_fields = ("title", "description")
    inlines = [MilestoneInline]

import time

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


def generate_milestone_id():
    """Creation timestamp (nanoseconds) as a string."""
    return str(time.time_ns())


class Project(models.Model):
    STATUS = [
        ('active', 'Active'),
        ('in-progress', 'In Progress'),
        ('review', 'In Review'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    VISIBILITY = [
        ('public', 'Public'),
        ('private', 'Private'),
    ]

    DURATION_UNITS = [
        ('days', 'Days'),
        ('weeks', 'Weeks'),
        ('months', 'Months'),
    ]

    client = models.ForeignKey(User, on_delete=models.CASCADE, related_name="projects")

    title = models.CharField(max_length=255)
    description = models.TextField()
    requirements = models.JSONField(default=list, blank=True)
    skills = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=100, blank=True)

    budget_min = models.PositiveIntegerField()
    budget_max = models.PositiveIntegerField()

    duration_timeframe = models.PositiveIntegerField()
    duration_unit = models.CharField(max_length=10, choices=DURATION_UNITS, default='days')

    status = models.CharField(max_length=20, choices=STATUS, default='active')
    visibility = models.CharField(max_length=10, choices=VISIBILITY, default='public')

    assigned_developer = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_projects",
    )

    # Summary of the most recent successful payment
    payment_status = models.CharField(max_length=20, blank=True)
    last_payment_amount = models.PositiveIntegerField(null=True, blank=True)
    last_payment_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "projects"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "visibility"]),
        ]

    def clean(self):
        if self.budget_min is not None and self.budget_max is not None:
            if self.budget_min > self.budget_max:
                raise ValidationError("Minimum budget cannot exceed maximum budget.")

    def is_party(self, user):
        return user.id in (self.client_id, self.assigned_developer_id)

    def __str__(self):
        return f"Project: {self.title}"


class Milestone(models.Model):
    STATUS = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="milestones")
    milestone_id = models.CharField(max_length=32, default=generate_milestone_id)

    title = models.CharField(max_length=255)
    description = models.TextField()
    amount = models.PositiveIntegerField(help_text="XAF")
    due_date = models.DateTimeField()

    status = models.CharField(max_length=20, choices=STATUS, default='pending')
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="completed_milestones",
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "milestones"
        ordering = ["due_date", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["project", "milestone_id"], name="unique_milestone_per_project"),
        ]

    def mark_completed(self, by, payment=None):
        self.status = "completed"
        self.completed_at = timezone.now()
        self.completed_by = by
        self.payment = payment
        self.save(update_fields=["status", "completed_at", "completed_by", "payment"])

    def __str__(self):
        return f"Milestone {self.milestone_id} ({self.status}) of project #{self.project_id}"

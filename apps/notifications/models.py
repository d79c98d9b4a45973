from django.db import models
from django.conf import settings


class Notification(models.Model):
    """
    Universal notification model for clients and developers.
    """

    NOTIFICATION_TYPES = [
        ("APPLICATION_SUBMITTED", "Application Submitted"),
        ("APPLICATION_ACCEPTED", "Application Accepted"),
        ("APPLICATION_REJECTED", "Application Rejected"),
        ("PAYMENT_COMPLETED", "Payment Completed"),
        ("NEW_MESSAGE", "New Message"),
        ("SYSTEM", "System Notification"),
    ]

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications"
    )

    notif_type = models.CharField(
        max_length=50,
        choices=NOTIFICATION_TYPES
    )

    title = models.CharField(max_length=255)

    message = models.TextField(blank=True)

    # Front-end route to open when the notification is clicked
    link = models.CharField(max_length=255, blank=True)

    # Optional metadata (store IDs like project_id, application_id)
    data = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "is_read"]),
        ]

    def __str__(self):
        return f"Notification({self.recipient_id}, {self.notif_type})"

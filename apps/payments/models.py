import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Payment(models.Model):
    STATUS = [
        ('pending', 'Pending'),
        ('successful', 'Successful'),
        ('failed', 'Failed'),
    ]

    PROVIDERS = [
        ('mtn', 'MTN Mobile Money'),
        ('orange', 'Orange Money'),
    ]

    RECONCILED_VIA = [
        ('redirect', 'Return URL'),
        ('webhook', 'Webhook'),
        ('poll', 'Status poll'),
    ]

    # Sent to the gateway as the external reference
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    project = models.ForeignKey("projects.Project", on_delete=models.PROTECT, related_name="payments")
    client = models.ForeignKey(User, on_delete=models.PROTECT, related_name="payments_made")
    developer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments_received",
    )

    amount = models.PositiveIntegerField(help_text="XAF")
    phone_number = models.CharField(max_length=20)
    provider = models.CharField(max_length=10, choices=PROVIDERS, default='mtn')
    status = models.CharField(max_length=20, choices=STATUS, default='pending')

    is_paying_all = models.BooleanField(default=False)
    milestones = models.ManyToManyField("projects.Milestone", blank=True, related_name="payments")
    description = models.CharField(max_length=255, blank=True)

    # Payer details shown on the hosted payment page
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)

    payment_url = models.URLField(max_length=500, blank=True)
    gateway_reference = models.CharField(max_length=100, blank=True, db_index=True)
    gateway_status = models.CharField(max_length=30, blank=True)
    operator = models.CharField(max_length=50, blank=True)
    operator_reference = models.CharField(max_length=100, blank=True)
    final_amount = models.PositiveIntegerField(null=True, blank=True)

    version = models.PositiveIntegerField(default=0)
    reconciled_via = models.CharField(max_length=10, choices=RECONCILED_VIA, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    # Set once the developer has withdrawn this payment
    withdrawn_at = models.DateTimeField(null=True, blank=True)
    withdrawal_reference = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"]),
        ]

    @property
    def is_terminal(self):
        return self.status in ("successful", "failed")

    @property
    def payout_amount(self):
        return self.final_amount or self.amount

    def __str__(self):
        return f"Payment {self.id} ({self.status}) for project #{self.project_id}"

from datetime import timedelta

from django.conf import settings
from django.db.models import Q, Sum
from django.utils import timezone

from .models import Payment


class PaymentAccessSelector:
    """
    Row-level read access: clients see what they paid, developers what
    they received, staff everything.
    """
    @staticmethod
    def for_user(user):
        qs = Payment.objects.select_related("project", "client", "developer").prefetch_related("milestones")
        if user.is_staff:
            return qs
        return qs.filter(Q(client=user) | Q(developer=user))


class DeveloperEarningsSelector:
    @staticmethod
    def summary(developer):
        qs = Payment.objects.filter(developer=developer, status="successful")
        totals = qs.aggregate(total=Sum("amount"))
        return {
            "payment_count": qs.count(),
            "total_received": totals["total"] or 0,
        }


class StalePaymentSelector:
    """Pending payments old enough to ask the gateway about."""
    @staticmethod
    def pollable(now=None):
        now = now or timezone.now()
        cutoff = now - timedelta(minutes=settings.PAYMENT_POLL_AFTER_MINUTES)
        return Payment.objects.filter(status="pending", created_at__lte=cutoff)

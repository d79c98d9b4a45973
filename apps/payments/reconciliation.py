"""
Single entry point for applying a gateway payment event to local state.

The webhook, the browser return URL, the failure URL and status polling all
normalize what they receive into a ``PaymentEvent`` and call
``reconcile_payment``. Only ``pending`` payments move to a terminal state;
any later event for the same payment is reported as a duplicate and changes
nothing.
"""
import logging
import math
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.cores.currency import format_xaf
from apps.notifications.services.create_notifications import notify_user
from .models import Payment

logger = logging.getLogger(__name__)

APPLIED = "applied"
DUPLICATE = "duplicate"
NON_TERMINAL = "non_terminal"

# PositiveIntegerField upper bound on Postgres
MAX_STORED_AMOUNT = 2147483647


class PaymentNotFound(Exception):
    pass


@dataclass
class PaymentEvent:
    external_id: str
    status: str
    source: str
    reference: str = ""
    operator: str = ""
    operator_reference: str = ""
    amount: object = None


@dataclass
class ReconciliationResult:
    payment: Payment
    outcome: str

    @property
    def applied(self):
        return self.outcome == APPLIED


def _parse_amount(value):
    """Gateway-reported amount, or None when it cannot be stored."""
    if value in (None, ""):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(amount) or not 0 < amount <= MAX_STORED_AMOUNT:
        return None
    return int(amount) or None


def _lock_payment(external_id):
    try:
        return (
            Payment.objects
            .select_for_update()
            .get(pk=external_id)
        )
    except (Payment.DoesNotExist, DjangoValidationError, ValueError):
        # A malformed UUID is as good as missing
        raise PaymentNotFound(external_id)


@transaction.atomic
def reconcile_payment(event, config):
    payment = _lock_payment(event.external_id)
    new_status = config.classify(event.status)

    if payment.is_terminal:
        logger.info(
            "Duplicate %s event for payment %s ignored (already %s)",
            event.source, payment.id, payment.status,
        )
        return ReconciliationResult(payment, DUPLICATE)

    now = timezone.now()

    if new_status is None:
        payment.gateway_status = event.status or payment.gateway_status
        if event.reference:
            payment.gateway_reference = event.reference
        payment.save(update_fields=["gateway_status", "gateway_reference", "updated_at"])
        logger.info("Payment %s still %s at gateway", payment.id, event.status)
        return ReconciliationResult(payment, NON_TERMINAL)

    payment.status = new_status
    payment.gateway_status = event.status
    if event.reference:
        payment.gateway_reference = event.reference
    payment.operator = event.operator or payment.operator
    payment.operator_reference = event.operator_reference or payment.operator_reference
    payment.final_amount = _parse_amount(event.amount) or payment.amount
    payment.reconciled_via = event.source
    payment.version += 1

    if new_status == "successful":
        payment.completed_at = now
    else:
        payment.failed_at = now

    payment.save()

    if new_status == "successful":
        _complete_milestones(payment)
        _update_project_summary(payment, now)
        _notify_developer(payment)

    logger.info(
        "Payment %s moved to %s via %s (version %s)",
        payment.id, payment.status, event.source, payment.version,
    )
    return ReconciliationResult(payment, APPLIED)


def _complete_milestones(payment):
    for milestone in payment.milestones.select_for_update().filter(status="pending"):
        milestone.mark_completed(by=payment.client, payment=payment)


def _update_project_summary(payment, when):
    project = payment.project
    project.payment_status = "completed"
    project.last_payment_amount = payment.final_amount or payment.amount
    project.last_payment_at = when
    project.save(update_fields=["payment_status", "last_payment_amount", "last_payment_at", "updated_at"])


def _notify_developer(payment):
    if payment.developer_id is None:
        return

    notify_user(
        recipient=payment.developer,
        notif_type="PAYMENT_COMPLETED",
        title="Payment received",
        message=(
            f"{format_xaf(payment.final_amount or payment.amount)} was paid "
            f"for \"{payment.project.title}\"."
        ),
        link=f"/dashboard/projects/{payment.project_id}",
        data={"payment_id": str(payment.id), "project_id": payment.project_id},
    )


def event_from_transaction(payment, data):
    """Normalize a ``/transaction/<reference>/`` response."""
    return PaymentEvent(
        external_id=str(payment.id),
        status=str(data.get("status") or ""),
        source="poll",
        reference=data.get("reference") or payment.gateway_reference,
        operator=data.get("operator") or "",
        operator_reference=data.get("operator_reference") or "",
        amount=data.get("amount"),
    )


def refresh_payment(payment, gateway, config):
    """Ask the gateway for the transaction status and reconcile it."""
    if not payment.gateway_reference:
        logger.warning("Payment %s has no gateway reference; cannot poll", payment.id)
        return ReconciliationResult(payment, NON_TERMINAL)

    data = gateway.check_payment_status(payment.gateway_reference)
    return reconcile_payment(event_from_transaction(payment, data), config)

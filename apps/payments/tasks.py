import logging

from celery import shared_task

from .campay import CampayConfig, CampayClient
from .exceptions import PaymentGatewayError
from .models import Payment
from .reconciliation import refresh_payment
from .selectors import StalePaymentSelector

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(PaymentGatewayError,),
    retry_backoff=10,
    retry_kwargs={"max_retries": 3},
)
def refresh_payment_status(self, payment_id):
    try:
        payment = Payment.objects.get(pk=payment_id)
    except Payment.DoesNotExist:
        logger.warning("Payment %s vanished before polling", payment_id)
        return None

    config = CampayConfig.from_settings()
    result = refresh_payment(payment, CampayClient(config), config)
    return result.outcome


@shared_task
def refresh_pending_payments():
    """
    Queue a status poll for every stale pending payment. Payments that never
    got a gateway reference are orphans; they are logged and left alone.
    """
    stale = StalePaymentSelector.pollable()
    orphans = stale.filter(gateway_reference="")
    if orphans.exists():
        logger.warning("%s pending payments have no gateway reference", orphans.count())

    queued = 0
    for payment_id in stale.exclude(gateway_reference="").values_list("id", flat=True):
        refresh_payment_status.delay(str(payment_id))
        queued += 1

    logger.info("Queued status polls for %s pending payments", queued)
    return queued

import logging
import re

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.projects.models import Project
from .exceptions import PaymentGatewayError, PaymentValidationError
from .models import Payment

logger = logging.getLogger(__name__)


class PaymentInitiationService:
    """
    Creates a pending Payment and asks the gateway for a hosted payment page.

    Amount and phone are checked before anything is written, so a rejected
    request never leaves a Payment behind. A gateway failure after the row
    exists leaves it pending without a URL.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    # ------------------- ENTRY POINTS ------------------- #

    def pay_milestone(self, client, project_id, milestone_id, phone_number, provider, payer=None):
        project = self._get_owned_project(project_id, client)
        milestone = get_object_or_404(project.milestones, milestone_id=milestone_id)
        if milestone.status != "pending":
            raise ValidationError("This milestone has already been paid.")

        return self.initiate(
            client=client,
            project=project,
            amount=milestone.amount,
            phone_number=phone_number,
            provider=provider,
            milestones=[milestone],
            payer=payer,
        )

    def pay_all_pending(self, client, project_id, phone_number, provider, payer=None):
        project = self._get_owned_project(project_id, client)
        pending = list(project.milestones.filter(status="pending"))
        if not pending:
            raise ValidationError("No pending milestones to pay")

        return self.initiate(
            client=client,
            project=project,
            amount=sum(m.amount for m in pending),
            phone_number=phone_number,
            provider=provider,
            milestones=pending,
            is_paying_all=True,
            payer=payer,
        )

    # ------------------- FLOW ------------------- #

    def initiate(self, client, project, amount, phone_number, provider, milestones,
                 is_paying_all=False, payer=None):
        self.validate_request(amount, phone_number, provider)

        if project.assigned_developer_id is None:
            raise ValidationError("This project has no assigned developer yet.")

        payer = payer or {}
        if is_paying_all:
            description = f"Payment for all pending milestones in project: {project.title}"
        else:
            description = f"Payment for milestone in project: {project.title}"

        with transaction.atomic():
            payment = Payment.objects.create(
                project=project,
                client=client,
                developer_id=project.assigned_developer_id,
                amount=amount,
                phone_number=phone_number,
                provider=provider,
                is_paying_all=is_paying_all,
                description=description,
                first_name=payer.get("first_name") or client.first_name,
                last_name=payer.get("last_name") or client.last_name,
                email=payer.get("email") or client.email,
            )
            payment.milestones.set(milestones)

        try:
            link = self.gateway.get_payment_link(
                amount=amount,
                description=description,
                external_id=payment.id,
                phone_number=phone_number,
                first_name=payment.first_name,
                last_name=payment.last_name,
                email=payment.email,
                provider=provider,
            )
        except (PaymentGatewayError, PaymentValidationError):
            logger.warning("Payment %s left pending: no payment link obtained", payment.id)
            raise

        payment.payment_url = link["payment_url"]
        payment.gateway_reference = link.get("reference") or ""
        payment.gateway_status = link.get("status", "PENDING")
        payment.save(update_fields=["payment_url", "gateway_reference", "gateway_status", "updated_at"])

        logger.info(
            "Payment %s initiated by user %s for project %s (%s XAF)",
            payment.id, client.id, project.id, amount,
        )
        return payment

    def validate_request(self, amount, phone_number, provider):
        self.gateway.validate_amount(amount)

        if len(re.sub(r"\D", "", str(phone_number or ""))) < 9:
            raise PaymentValidationError("Please enter a valid phone number")

        self.gateway.validate_phone_number(phone_number, provider)

    def _get_owned_project(self, project_id, client):
        project = get_object_or_404(Project, pk=project_id)
        if project.client_id != client.id:
            raise PermissionDenied("Only the project owner can pay its milestones.")
        return project




class WithdrawalService:
    """
    Pays a successful payment out to the developer's mobile-money number.
    The payout amount always comes from the payment, and a payment is
    withdrawn at most once.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    @transaction.atomic
    def withdraw(self, developer, payment_id, phone_number, provider, description=""):
        payment = get_object_or_404(Payment.objects.select_for_update(), pk=payment_id)

        if payment.developer_id != developer.id:
            raise PermissionDenied("You can only withdraw payments you received.")
        if payment.status != "successful":
            raise ValidationError("Only successful payments can be withdrawn.")
        if payment.withdrawn_at is not None:
            raise ValidationError("This payment has already been withdrawn.")

        amount = payment.payout_amount
        response = self.gateway.withdraw(
            amount=amount,
            phone_number=phone_number,
            provider=provider,
            description=description or f"Withdrawal for payment {payment.id}",
        )
        if not isinstance(response, dict):
            response = {}

        payment.withdrawn_at = timezone.now()
        payment.withdrawal_reference = response.get("reference") or ""
        payment.save(update_fields=["withdrawn_at", "withdrawal_reference", "updated_at"])

        logger.info("Payment %s withdrawn by user %s (%s XAF)", payment.id, developer.id, amount)
        return payment, response

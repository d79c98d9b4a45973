import hashlib
import hmac
import json
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.cores.currency import format_xaf
from apps.cores.permissions import IsClient, IsDeveloper
from apps.projects.models import Project
from .campay import CampayConfig, CampayClient
from .models import Payment
from .reconciliation import (
    PaymentEvent,
    PaymentNotFound,
    reconcile_payment,
    refresh_payment,
)
from .selectors import PaymentAccessSelector, DeveloperEarningsSelector
from .serializers import (
    PaymentSerializer,
    PaymentInitiateSerializer,
    WithdrawalSerializer,
    GatewayHistorySerializer,
)
from .services import PaymentInitiationService, WithdrawalService

logger = logging.getLogger(__name__)


class GatewayMixin:
    def get_config(self):
        return CampayConfig.from_settings()

    def get_gateway(self):
        return CampayClient(self.get_config())


# ---------------- Initiation ----------------
class MilestonePaymentView(GatewayMixin, APIView):
    """Start a mobile-money payment for one milestone."""
    permission_classes = [IsClient]

    def post(self, request, project_id, milestone_id):
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentInitiationService(self.get_gateway()).pay_milestone(
            client=request.user,
            project_id=project_id,
            milestone_id=milestone_id,
            phone_number=serializer.validated_data["phone_number"],
            provider=serializer.validated_data["provider"],
            payer=serializer.payer(),
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PayAllMilestonesView(GatewayMixin, APIView):
    """Start one payment covering every pending milestone of a project."""
    permission_classes = [IsClient]

    def post(self, request, project_id):
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentInitiationService(self.get_gateway()).pay_all_pending(
            client=request.user,
            project_id=project_id,
            phone_number=serializer.validated_data["phone_number"],
            provider=serializer.validated_data["provider"],
            payer=serializer.payer(),
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


# ---------------- Webhook ----------------
def _valid_signature(secret, body, signature):
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


@csrf_exempt
@require_POST
def campay_webhook(request):
    config = CampayConfig.from_settings()
    signature = request.headers.get("X-Campay-Signature", "")

    if not _valid_signature(config.webhook_secret, request.body, signature):
        logger.warning("Rejected Campay webhook with invalid signature")
        return JsonResponse({"error": "Invalid webhook signature"}, status=401)

    try:
        payload = json.loads(request.body or b"{}")
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    reference = payload.get("reference")
    gateway_status = payload.get("status")
    external_id = payload.get("external_id")

    if not reference or not gateway_status or not external_id:
        return JsonResponse({"error": "Missing required fields"}, status=400)

    event = PaymentEvent(
        external_id=external_id,
        status=gateway_status,
        source="webhook",
        reference=reference,
        operator=payload.get("operator") or "",
        operator_reference=payload.get("operator_reference") or "",
        amount=payload.get("amount"),
    )

    try:
        result = reconcile_payment(event, config)
    except PaymentNotFound:
        return JsonResponse({"error": "Payment record not found"}, status=404)
    except Exception:
        logger.exception("Error processing Campay webhook for %s", external_id)
        return JsonResponse({"error": "Internal server error"}, status=500)

    return JsonResponse({"message": "Webhook processed successfully", "outcome": result.outcome})


# ---------------- Return URLs ----------------
class PaymentReturnMixin(GatewayMixin):

    def get_client_payment(self, external_id):
        try:
            payment = Payment.objects.select_related("project").get(pk=external_id)
        except (Payment.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound("Payment record not found")

        if payment.client_id != self.request.user.id:
            raise PermissionDenied("This payment belongs to another user.")
        return payment

    def reconcile(self, event):
        try:
            return reconcile_payment(event, self.get_config())
        except PaymentNotFound:
            raise NotFound("Payment record not found")


class PaymentReturnView(PaymentReturnMixin, APIView):
    """
    Called by the front end when the browser comes back from the hosted
    payment page with the gateway's query parameters.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = request.query_params
        reference = params.get("reference")
        gateway_status = params.get("status")
        external_id = params.get("external_reference")

        if not reference or not gateway_status or not external_id:
            raise ValidationError({"error": "Missing payment information"})

        self.get_client_payment(external_id)

        result = self.reconcile(PaymentEvent(
            external_id=external_id,
            status=gateway_status,
            source="redirect",
            reference=reference,
            operator=params.get("operator", ""),
            operator_reference=params.get("operator_reference", ""),
            amount=params.get("amount"),
        ))
        payment = result.payment
        amount = payment.final_amount or payment.amount

        return Response({
            "payment_id": str(payment.id),
            "status": payment.status,
            "success": payment.status == "successful",
            "outcome": result.outcome,
            "amount": amount,
            "amount_display": format_xaf(amount),
            "operator": payment.operator,
            "operator_reference": payment.operator_reference,
            "project_id": payment.project_id,
            "project_url": f"/dashboard/projects/{payment.project_id}",
        })


class PaymentFailedView(PaymentReturnMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        external_id = request.query_params.get("external_reference")
        if not external_id:
            raise ValidationError({"error": "Missing payment information"})

        self.get_client_payment(external_id)

        config = self.get_config()
        result = self.reconcile(PaymentEvent(
            external_id=external_id,
            status=config.failure_statuses[0],
            source="redirect",
            reference=request.query_params.get("reference", ""),
        ))
        payment = result.payment

        return Response({
            "payment_id": str(payment.id),
            "status": payment.status,
            "outcome": result.outcome,
            "project_id": payment.project_id,
            "retry_url": f"/payments/{payment.id}/retry",
        })


# ---------------- Polling ----------------
class PaymentRefreshView(GatewayMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        payment = get_object_or_404(PaymentAccessSelector.for_user(request.user), pk=pk)

        if payment.status == "pending":
            config = self.get_config()
            result = refresh_payment(payment, CampayClient(config), config)
            payment = result.payment

        return Response(PaymentSerializer(payment).data)


# ---------------- Listing ----------------
class MyPaymentsView(generics.ListAPIView):
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = PaymentAccessSelector.for_user(self.request.user)
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs


class PaymentDetailView(generics.RetrieveAPIView):
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return PaymentAccessSelector.for_user(self.request.user)


class ProjectPaymentsView(generics.ListAPIView):
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        project = get_object_or_404(Project, pk=self.kwargs["project_id"])
        if not project.is_party(self.request.user):
            raise PermissionDenied("You are not part of this project.")
        return project.payments.select_related("client", "developer").prefetch_related("milestones")


class EarningsSummaryView(APIView):
    permission_classes = [IsDeveloper]

    def get(self, request):
        return Response(DeveloperEarningsSelector.summary(request.user))


# ---------------- Withdrawals ----------------
class WithdrawalView(GatewayMixin, APIView):
    permission_classes = [IsDeveloper]

    def post(self, request):
        serializer = WithdrawalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment, response = WithdrawalService(self.get_gateway()).withdraw(
            developer=request.user,
            payment_id=data["payment"],
            phone_number=data["phone_number"],
            provider=data["provider"],
            description=data.get("description", ""),
        )
        return Response(
            {**response, "payment": str(payment.id), "amount": payment.payout_amount},
            status=status.HTTP_202_ACCEPTED,
        )


# ---------------- Gateway account (admin) ----------------
class GatewayBalanceView(GatewayMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, permissions.IsAdminUser]

    def get(self, request):
        return Response(self.get_gateway().get_balance())


class GatewayHistoryView(GatewayMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, permissions.IsAdminUser]

    def post(self, request):
        serializer = GatewayHistorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        history = self.get_gateway().get_payment_history(
            serializer.validated_data["start_date"],
            serializer.validated_data["end_date"],
        )
        return Response(history)

"""
HTTP client for the Campay mobile-money aggregator.

The client never reads Django settings itself: callers build a
``CampayConfig`` (usually with ``CampayConfig.from_settings()``) and pass it in.
"""
import logging
import math
import re
from dataclasses import dataclass

import requests
from django.conf import settings

from .exceptions import PaymentGatewayError, PaymentValidationError

logger = logging.getLogger(__name__)

COUNTRY_CODE = "237"

PROVIDER_PREFIXES = {
    "mtn": ("6",),
    "orange": ("6", "9"),
}

PROVIDER_ERRORS = {
    "mtn": "Invalid MTN number. Must start with 6 and be 9 digits long",
    "orange": "Invalid Orange number. Must start with 6 or 9 and be 9 digits long",
}


@dataclass(frozen=True)
class CampayConfig:
    base_url: str
    token: str
    webhook_secret: str = ""
    redirect_url: str = ""
    failure_redirect_url: str = ""
    min_amount: int = 5
    max_amount: int = 100
    timeout: int = 30
    success_statuses: tuple = ("SUCCESSFUL", "SUCCESS")
    failure_statuses: tuple = ("FAILED",)

    @classmethod
    def from_settings(cls):
        conf = settings.CAMPAY
        return cls(
            base_url=conf["BASE_URL"].rstrip("/"),
            token=conf["TOKEN"],
            webhook_secret=conf.get("WEBHOOK_SECRET", ""),
            redirect_url=conf.get("REDIRECT_URL", ""),
            failure_redirect_url=conf.get("FAILURE_REDIRECT_URL", ""),
            min_amount=conf.get("MIN_AMOUNT", 5),
            max_amount=conf.get("MAX_AMOUNT", 100),
            timeout=conf.get("TIMEOUT", 30),
            success_statuses=tuple(conf.get("SUCCESS_STATUSES", cls.success_statuses)),
            failure_statuses=tuple(conf.get("FAILURE_STATUSES", cls.failure_statuses)),
        )

    def classify(self, gateway_status):
        """Map a raw gateway status literal to successful, failed or None."""
        value = (gateway_status or "").upper()
        if value in self.success_statuses:
            return "successful"
        if value in self.failure_statuses:
            return "failed"
        return None


def validate_phone_number(phone_number, provider):
    """
    Normalize a Cameroonian mobile number to ``237XXXXXXXXX``.

    Non-digits and a leading country code are stripped; the remaining
    nine digits must start with a prefix valid for the provider.
    """
    if provider not in PROVIDER_PREFIXES:
        raise PaymentValidationError(f"Unsupported provider: {provider}")

    digits = re.sub(r"\D", "", str(phone_number or ""))
    if digits.startswith(COUNTRY_CODE):
        digits = digits[len(COUNTRY_CODE):]

    if len(digits) != 9 or not digits.startswith(PROVIDER_PREFIXES[provider]):
        raise PaymentValidationError(PROVIDER_ERRORS[provider])

    return f"{COUNTRY_CODE}{digits}"


class CampayClient:

    def __init__(self, config, session=None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Token {config.token}",
            "Content-Type": "application/json",
        })

    # ------------------- VALIDATION ------------------- #

    def validate_phone_number(self, phone_number, provider):
        return validate_phone_number(phone_number, provider)

    def validate_amount(self, amount, operation="payments"):
        try:
            value = float(amount)
        except (TypeError, ValueError, OverflowError):
            raise PaymentValidationError("Please enter a valid amount")
        if not math.isfinite(value):
            raise PaymentValidationError("Please enter a valid amount")

        if value < self.config.min_amount:
            raise PaymentValidationError(f"Minimum payment amount is {self.config.min_amount} XAF")
        if value > self.config.max_amount:
            raise PaymentValidationError(
                f"Demo environment only allows {operation} up to {self.config.max_amount} XAF"
            )
        return value

    # ------------------- TRANSPORT ------------------- #

    def _request(self, method, path, fallback, error_key="message", **kwargs):
        url = f"{self.config.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Campay %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError(fallback) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            detail = data.get(error_key) if isinstance(data, dict) else None
            logger.warning("Campay %s %s returned %s: %s", method, path, response.status_code, data)
            raise PaymentGatewayError(detail or fallback)

        return data

    # ------------------- OPERATIONS ------------------- #

    def collect(self, amount, phone_number, provider, description, external_id):
        """Push a payment request straight to the payer's handset."""
        if not all([amount, phone_number, provider, description, external_id]):
            raise PaymentValidationError("Missing required payment parameters")

        value = self.validate_amount(amount)
        phone = self.validate_phone_number(phone_number, provider)

        data = self._request(
            "POST", "/collect/", "Failed to initiate payment",
            json={
                "amount": str(round(value * 100)),
                "from": phone,
                "description": description,
                "external_id": str(external_id),
                "provider": provider,
            },
        )
        if not isinstance(data, dict) or not data.get("reference"):
            raise PaymentGatewayError("Invalid response from Campay payment initiation")
        return data

    def get_payment_link(self, amount, description, external_id, phone_number=None,
                         first_name=None, last_name=None, email=None, provider="mtn"):
        """Request a hosted payment page tagged with ``external_id``."""
        self.validate_amount(amount)

        payload = {
            "amount": str(amount),
            "currency": "XAF",
            "description": description or "Payment for milestone",
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "external_reference": str(external_id or ""),
            "redirect_url": self.config.redirect_url,
            "failure_redirect_url": self.config.failure_redirect_url,
            "payment_options": "MOMO",
            "payer_can_pay_more": "no",
        }
        if phone_number:
            payload["from"] = self.validate_phone_number(phone_number, provider)

        data = self._request("POST", "/get_payment_link/", "Failed to generate payment link", json=payload)
        if not isinstance(data, dict) or not data.get("link"):
            raise PaymentGatewayError("Failed to get payment link from Campay")

        return {
            "payment_url": data["link"],
            "reference": data.get("reference"),
            "status": "PENDING",
        }

    def check_payment_status(self, reference):
        return self._request("GET", f"/transaction/{reference}/", "Failed to check payment status")

    def get_balance(self):
        return self._request("GET", "/balance/", "Failed to get balance", error_key="detail")

    def get_payment_history(self, start_date, end_date):
        return self._request(
            "POST", "/history/", "Failed to fetch payment history",
            json={"start_date": str(start_date), "end_date": str(end_date)},
        )

    def withdraw(self, amount, phone_number, provider, description):
        if not all([amount, phone_number, provider, description]):
            raise PaymentValidationError("Missing required withdrawal parameters")

        value = self.validate_amount(amount, operation="withdrawals")
        phone = self.validate_phone_number(phone_number, provider)

        return self._request(
            "POST", "/withdraw/", "Failed to initiate withdrawal",
            json={
                "amount": str(round(value * 100)),
                "to": phone,
                "description": description,
                "provider": provider,
            },
        )
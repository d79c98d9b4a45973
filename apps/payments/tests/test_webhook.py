import hashlib
import hmac
import json
import uuid
from unittest.mock import patch

from django.conf import settings
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.notifications.models import Notification
from .helpers import make_user, make_project, make_milestone, make_payment

SECRET = "whsec-test"
CAMPAY = {**settings.CAMPAY, "WEBHOOK_SECRET": SECRET}


def sign(body, secret=SECRET):
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


@override_settings(CAMPAY=CAMPAY)
class CampayWebhookTests(TestCase):

    def setUp(self):
        self.client_user = make_user("client", role="client")
        self.developer = make_user("dev", role="developer")
        self.project = make_project(self.client_user, self.developer)
        self.milestone = make_milestone(self.project, 50, "3001")
        self.payment = make_payment(self.project, [self.milestone])
        self.url = reverse("campay-webhook")

    def post(self, payload, signature=None):
        body = json.dumps(payload).encode()
        return self.client.post(
            self.url,
            data=body,
            content_type="application/json",
            HTTP_X_CAMPAY_SIGNATURE=signature if signature is not None else sign(body),
        )

    def payload(self, **overrides):
        data = {"reference": "ref-1", "status": "SUCCESS", "external_id": str(self.payment.id)}
        data.update(overrides)
        return data

    def test_valid_webhook_completes_payment(self):
        response = self.post(self.payload(operator="MTN", operator_reference="op-7"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Webhook processed successfully")

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "successful")
        self.assertEqual(self.payment.reconciled_via, "webhook")
        self.assertEqual(self.payment.operator_reference, "op-7")

        self.milestone.refresh_from_db()
        self.assertEqual(self.milestone.status, "completed")
        self.project.refresh_from_db()
        self.assertEqual(self.project.payment_status, "completed")

    def test_bad_signature_is_rejected_without_writes(self):
        response = self.post(self.payload(), signature=sign(b"something else"))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid webhook signature"})

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "pending")
        self.assertEqual(self.payment.version, 0)
        self.milestone.refresh_from_db()
        self.assertEqual(self.milestone.status, "pending")
        self.assertFalse(Notification.objects.exists())

    def test_missing_signature_is_rejected(self):
        response = self.post(self.payload(), signature="")
        self.assertEqual(response.status_code, 401)

    @override_settings(CAMPAY={**settings.CAMPAY, "WEBHOOK_SECRET": ""})
    def test_unconfigured_secret_rejects_everything(self):
        response = self.post(self.payload(), signature=sign(json.dumps(self.payload()).encode(), ""))
        self.assertEqual(response.status_code, 401)

    def test_missing_fields(self):
        response = self.post({"reference": "ref-1", "status": "SUCCESS"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields"})

    def test_unknown_payment(self):
        response = self.post(self.payload(external_id=str(uuid.uuid4())))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Payment record not found"})

    def test_repeated_delivery_reports_duplicate(self):
        self.post(self.payload())
        response = self.post(self.payload(operator_reference="late"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["outcome"], "duplicate")
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.version, 1)
        self.assertEqual(self.payment.operator_reference, "")

    def test_unusable_amount_still_completes_payment(self):
        for index, amount in enumerate((float("inf"), -45, "not-a-number")):
            milestone = make_milestone(self.project, 50, f"31{index}")
            payment = make_payment(self.project, [milestone])

            response = self.post(self.payload(external_id=str(payment.id), amount=amount))

            self.assertEqual(response.status_code, 200, amount)
            self.assertEqual(response.json()["outcome"], "applied")
            payment.refresh_from_db()
            self.assertEqual(payment.status, "successful")
            self.assertEqual(payment.final_amount, 50)

    def test_unexpected_error_is_500(self):
        with patch("apps.payments.views.reconcile_payment", side_effect=RuntimeError("db down")):
            response = self.post(self.payload())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})

    def test_get_is_not_allowed(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 405)

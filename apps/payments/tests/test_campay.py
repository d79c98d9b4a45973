from unittest.mock import MagicMock

import requests
from django.test import SimpleTestCase

from apps.payments.campay import CampayConfig, CampayClient, validate_phone_number
from apps.payments.exceptions import PaymentGatewayError, PaymentValidationError


def make_config(**overrides):
    values = {
        "base_url": "https://demo.campay.net/api",
        "token": "test-token",
        "redirect_url": "http://localhost:5173/payments/status",
        "failure_redirect_url": "http://localhost:5173/payments/failed",
    }
    values.update(overrides)
    return CampayConfig(**values)


def make_response(data, ok=True, status_code=200):
    response = MagicMock(ok=ok, status_code=status_code)
    response.json.return_value = data
    return response


class PhoneNumberValidationTests(SimpleTestCase):

    def test_mtn_number_gets_country_code(self):
        self.assertEqual(validate_phone_number("677123456", "mtn"), "237677123456")

    def test_existing_country_code_and_separators_are_stripped(self):
        self.assertEqual(validate_phone_number("+237 677-12-34-56", "mtn"), "237677123456")

    def test_orange_accepts_6_and_9_prefixes(self):
        self.assertEqual(validate_phone_number("691234567", "orange"), "237691234567")
        self.assertEqual(validate_phone_number("955123456", "orange"), "237955123456")

    def test_mtn_rejects_9_prefix(self):
        with self.assertRaisesMessage(PaymentValidationError, "Invalid MTN number"):
            validate_phone_number("955123456", "mtn")

    def test_wrong_length_is_rejected(self):
        for number in ("67712345", "6771234567", "2376771234"):
            with self.assertRaises(PaymentValidationError):
                validate_phone_number(number, "mtn")

    def test_orange_rejects_other_prefixes(self):
        with self.assertRaisesMessage(PaymentValidationError, "Invalid Orange number"):
            validate_phone_number("755123456", "orange")

    def test_unknown_provider_is_rejected(self):
        with self.assertRaises(PaymentValidationError):
            validate_phone_number("677123456", "airtel")


class CampayClientTests(SimpleTestCase):

    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.client = CampayClient(make_config(), session=self.session)

    def test_session_carries_token_header(self):
        self.assertEqual(self.session.headers["Authorization"], "Token test-token")

    def test_amount_out_of_bounds_never_reaches_the_network(self):
        for amount in (0, 4, 4.99, 101, 5000):
            with self.assertRaises(PaymentValidationError):
                self.client.get_payment_link(amount=amount, description="x", external_id="abc")
            with self.assertRaises(PaymentValidationError):
                self.client.withdraw(amount, "677123456", "mtn", "payout")

        self.session.request.assert_not_called()

    def test_non_finite_amounts_are_rejected(self):
        for amount in ("nan", float("nan"), "inf", float("-inf")):
            with self.assertRaisesMessage(PaymentValidationError, "Please enter a valid amount"):
                self.client.validate_amount(amount)

        with self.assertRaises(PaymentValidationError):
            self.client.get_payment_link(amount="nan", description="x", external_id="abc")
        self.session.request.assert_not_called()

    def test_bound_messages(self):
        with self.assertRaisesMessage(PaymentValidationError, "Minimum payment amount is 5 XAF"):
            self.client.validate_amount(3)
        with self.assertRaisesMessage(PaymentValidationError, "Demo environment only allows payments up to 100 XAF"):
            self.client.validate_amount(150)
        with self.assertRaisesMessage(PaymentValidationError, "only allows withdrawals up to 100 XAF"):
            self.client.withdraw(150, "677123456", "mtn", "payout")

    def test_get_payment_link_request_and_result(self):
        self.session.request.return_value = make_response(
            {"link": "https://pay.campay.net/abc", "reference": "ref-1"}
        )

        result = self.client.get_payment_link(
            amount=50,
            description="",
            external_id="payment-1",
            phone_number="677123456",
            first_name="Ada",
            last_name="Ngo",
            email="ada@example.com",
        )

        self.assertEqual(result, {
            "payment_url": "https://pay.campay.net/abc",
            "reference": "ref-1",
            "status": "PENDING",
        })

        method, url = self.session.request.call_args.args
        payload = self.session.request.call_args.kwargs["json"]
        self.assertEqual(method, "POST")
        self.assertEqual(url, "https://demo.campay.net/api/get_payment_link/")
        self.assertEqual(payload["amount"], "50")
        self.assertEqual(payload["currency"], "XAF")
        self.assertEqual(payload["from"], "237677123456")
        self.assertEqual(payload["description"], "Payment for milestone")
        self.assertEqual(payload["external_reference"], "payment-1")
        self.assertEqual(payload["redirect_url"], "http://localhost:5173/payments/status")
        self.assertEqual(payload["failure_redirect_url"], "http://localhost:5173/payments/failed")
        self.assertEqual(payload["payment_options"], "MOMO")
        self.assertEqual(payload["payer_can_pay_more"], "no")

    def test_missing_link_is_a_gateway_error(self):
        self.session.request.return_value = make_response({"reference": "ref-1"})

        with self.assertRaisesMessage(PaymentGatewayError, "Failed to get payment link from Campay"):
            self.client.get_payment_link(amount=50, description="x", external_id="p")

    def test_collect_sends_smallest_currency_unit(self):
        self.session.request.return_value = make_response({"reference": "ref-9"})

        data = self.client.collect(25, "677123456", "mtn", "Milestone", "p-1")

        self.assertEqual(data["reference"], "ref-9")
        payload = self.session.request.call_args.kwargs["json"]
        self.assertEqual(payload["amount"], "2500")
        self.assertEqual(payload["from"], "237677123456")

    def test_withdraw_payload(self):
        self.session.request.return_value = make_response({"reference": "w-1", "status": "PENDING"})

        self.client.withdraw(10, "691234567", "orange", "Withdrawal")

        payload = self.session.request.call_args.kwargs["json"]
        self.assertEqual(payload, {
            "amount": "1000",
            "to": "237691234567",
            "description": "Withdrawal",
            "provider": "orange",
        })

    def test_error_response_uses_gateway_message(self):
        self.session.request.return_value = make_response(
            {"message": "Insufficient balance"}, ok=False, status_code=400
        )

        with self.assertRaises(PaymentGatewayError) as ctx:
            self.client.check_payment_status("ref-1")
        self.assertEqual(str(ctx.exception.detail), "Insufficient balance")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_error_response_without_message_uses_fallback(self):
        self.session.request.return_value = make_response({}, ok=False, status_code=500)

        with self.assertRaisesMessage(PaymentGatewayError, "Failed to fetch payment history"):
            self.client.get_payment_history("2024-01-01", "2024-01-31")

    def test_balance_error_reads_detail(self):
        self.session.request.return_value = make_response(
            {"detail": "Invalid token."}, ok=False, status_code=401
        )

        with self.assertRaisesMessage(PaymentGatewayError, "Invalid token."):
            self.client.get_balance()

    def test_transport_error_is_wrapped(self):
        self.session.request.side_effect = requests.ConnectionError("boom")

        with self.assertRaisesMessage(PaymentGatewayError, "Failed to check payment status"):
            self.client.check_payment_status("ref-1")


class CampayConfigTests(SimpleTestCase):

    def test_both_success_literals_are_terminal_success(self):
        config = make_config()
        self.assertEqual(config.classify("SUCCESSFUL"), "successful")
        self.assertEqual(config.classify("success"), "successful")
        self.assertEqual(config.classify("FAILED"), "failed")
        self.assertIsNone(config.classify("PENDING"))
        self.assertIsNone(config.classify(None))

    def test_success_literals_are_configurable(self):
        config = make_config(success_statuses=("PAID",))
        self.assertEqual(config.classify("PAID"), "successful")
        self.assertIsNone(config.classify("SUCCESSFUL"))

    def test_from_settings(self):
        config = CampayConfig.from_settings()
        self.assertEqual(config.min_amount, 5)
        self.assertEqual(config.max_amount, 100)
        self.assertIn("SUCCESSFUL", config.success_statuses)

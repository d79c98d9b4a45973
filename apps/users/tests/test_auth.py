from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.tasks import send_otp_email
from apps.users.utils import create_and_send_otp, generate_otp, verify_otp

User = get_user_model()


class OtpUtilsTests(TestCase):

    def test_generate_otp_length_and_digits(self):
        otp = generate_otp(6)
        self.assertEqual(len(otp), 6)
        self.assertTrue(otp.isdigit())

    @patch("apps.users.tasks.send_otp_email.delay")
    def test_otp_is_single_use(self, delay):
        otp = create_and_send_otp("ada@example.com")

        delay.assert_called_once_with("ada@example.com", otp, "verify_email")
        self.assertFalse(verify_otp("ada@example.com", "000000" if otp != "000000" else "111111"))
        self.assertTrue(verify_otp("ADA@example.com ", otp))
        self.assertFalse(verify_otp("ada@example.com", otp))

    def test_send_otp_email_task(self):
        send_otp_email("ada@example.com", "123456")

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("123456", mail.outbox[0].body)


@patch("apps.users.tasks.send_otp_email.delay")
class RegistrationFlowTests(APITestCase):

    def register(self, **overrides):
        data = {
            "email": "Ada@Example.com",
            "username": "ada",
            "display_name": "Ada N.",
            "role": "developer",
            "password": "Str0ng!pass",
            "confirm_password": "Str0ng!pass",
        }
        data.update(overrides)
        with self.captureOnCommitCallbacks(execute=True):
            return self.client.post(reverse("register"), data)

    def test_register_creates_unverified_user_and_sends_code(self, delay):
        response = self.register()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email="ada@example.com")
        self.assertFalse(user.is_verified)
        self.assertEqual(user.role, "developer")
        delay.assert_called_once()

    def test_weak_password_is_rejected(self, delay):
        response = self.register(password="weakpass", confirm_password="weakpass")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.exists())

    def test_duplicate_email_is_rejected(self, delay):
        self.register()
        response = self.register(username="ada2")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_requires_verified_email(self, delay):
        self.register()

        response = self.client.post(reverse("login"), {"email": "ada@example.com", "password": "Str0ng!pass"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["email"][0].code, "email_not_verified")

    def test_verify_then_login(self, delay):
        self.register()
        otp = delay.call_args.args[1]

        response = self.client.post(reverse("verify-email"), {"email": "ada@example.com", "otp": otp})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(User.objects.get(email="ada@example.com").is_verified)

        response = self.client.post(reverse("login"), {"email": "ada@example.com", "password": "Str0ng!pass"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data["data"])
        self.assertEqual(response.data["data"]["user"]["role"], "developer")

    def test_wrong_otp(self, delay):
        self.register()

        response = self.client.post(reverse("verify-email"), {"email": "ada@example.com", "otp": "not-it"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_endpoint(self, delay):
        self.register()
        user = User.objects.get(email="ada@example.com")
        self.client.force_authenticate(user)

        response = self.client.patch(reverse("me"), {"display_name": "Ada Ngono", "role": "client"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.display_name, "Ada Ngono")
        self.assertEqual(user.role, "developer")

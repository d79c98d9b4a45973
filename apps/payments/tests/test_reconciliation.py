import uuid

from django.test import TestCase

from apps.notifications.models import Notification
from apps.payments.reconciliation import (
    APPLIED,
    DUPLICATE,
    NON_TERMINAL,
    PaymentEvent,
    PaymentNotFound,
    reconcile_payment,
)
from .helpers import make_user, make_project, make_milestone, make_payment, campay_config


class ReconcilePaymentTests(TestCase):

    def setUp(self):
        self.config = campay_config()
        self.client_user = make_user("client", role="client")
        self.developer = make_user("dev", role="developer")
        self.project = make_project(self.client_user, self.developer)
        self.m1 = make_milestone(self.project, 30, "2001")
        self.m2 = make_milestone(self.project, 20, "2002")
        self.m3 = make_milestone(self.project, 10, "2003")
        self.payment = make_payment(self.project, [self.m1, self.m2], is_paying_all=True)

    def event(self, status, source="redirect", **extra):
        return PaymentEvent(external_id=str(self.payment.id), status=status, source=source, **extra)

    def test_pay_all_success_completes_linked_milestones_only(self):
        result = reconcile_payment(
            self.event("SUCCESSFUL", reference="ref-1", operator="MTN", operator_reference="op-1", amount="50"),
            self.config,
        )

        self.assertEqual(result.outcome, APPLIED)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "successful")
        self.assertEqual(self.payment.version, 1)
        self.assertEqual(self.payment.reconciled_via, "redirect")
        self.assertEqual(self.payment.operator_reference, "op-1")
        self.assertEqual(self.payment.final_amount, 50)
        self.assertIsNotNone(self.payment.completed_at)

        for milestone in (self.m1, self.m2):
            milestone.refresh_from_db()
            self.assertEqual(milestone.status, "completed")
            self.assertEqual(milestone.payment_id, self.payment.id)
            self.assertEqual(milestone.completed_by, self.client_user)
            self.assertIsNotNone(milestone.completed_at)

        self.m3.refresh_from_db()
        self.assertEqual(self.m3.status, "pending")
        self.assertIsNone(self.m3.payment_id)

    def test_success_updates_project_summary_and_notifies_developer(self):
        reconcile_payment(self.event("SUCCESS", source="webhook"), self.config)

        self.project.refresh_from_db()
        self.assertEqual(self.project.payment_status, "completed")
        self.assertEqual(self.project.last_payment_amount, 50)
        self.assertIsNotNone(self.project.last_payment_at)

        notification = Notification.objects.get(recipient=self.developer)
        self.assertEqual(notification.notif_type, "PAYMENT_COMPLETED")
        self.assertEqual(notification.data["payment_id"], str(self.payment.id))

    def test_second_delivery_is_a_no_op(self):
        reconcile_payment(self.event("SUCCESSFUL", operator_reference="first", amount="50"), self.config)
        self.payment.refresh_from_db()
        first_completed_at = self.payment.completed_at

        result = reconcile_payment(
            self.event("SUCCESSFUL", source="webhook", operator_reference="second", amount="49"),
            self.config,
        )

        self.assertEqual(result.outcome, DUPLICATE)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.version, 1)
        self.assertEqual(self.payment.operator_reference, "first")
        self.assertEqual(self.payment.final_amount, 50)
        self.assertEqual(self.payment.completed_at, first_completed_at)
        self.assertEqual(self.payment.reconciled_via, "redirect")
        self.assertEqual(Notification.objects.filter(notif_type="PAYMENT_COMPLETED").count(), 1)

    def test_failed_payment_is_not_revived(self):
        reconcile_payment(self.event("FAILED"), self.config)
        result = reconcile_payment(self.event("SUCCESSFUL", source="webhook"), self.config)

        self.assertEqual(result.outcome, DUPLICATE)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "failed")
        self.assertIsNotNone(self.payment.failed_at)
        self.m1.refresh_from_db()
        self.assertEqual(self.m1.status, "pending")

    def test_non_terminal_status_is_recorded_only(self):
        result = reconcile_payment(self.event("PENDING", source="poll", reference="ref-2"), self.config)

        self.assertEqual(result.outcome, NON_TERMINAL)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "pending")
        self.assertEqual(self.payment.gateway_status, "PENDING")
        self.assertEqual(self.payment.gateway_reference, "ref-2")
        self.assertEqual(self.payment.version, 0)

    def test_unknown_payment(self):
        with self.assertRaises(PaymentNotFound):
            reconcile_payment(
                PaymentEvent(external_id=str(uuid.uuid4()), status="SUCCESSFUL", source="webhook"),
                self.config,
            )

    def test_malformed_external_id(self):
        with self.assertRaises(PaymentNotFound):
            reconcile_payment(
                PaymentEvent(external_id="not-a-uuid", status="SUCCESSFUL", source="webhook"),
                self.config,
            )

    def test_already_completed_milestone_keeps_its_payment(self):
        self.m2.mark_completed(by=self.client_user)

        reconcile_payment(self.event("SUCCESSFUL"), self.config)

        self.m2.refresh_from_db()
        self.assertIsNone(self.m2.payment_id)

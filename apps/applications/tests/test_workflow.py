from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db.models import QuerySet
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.applications.models import Application
from apps.applications.services.assignment import accept_application, reject_application
from apps.notifications.models import Notification
from apps.projects.models import Project

User = get_user_model()


def make_user(username, role):
    return User.objects.create_user(
        email=f"{username}@example.com",
        username=username,
        password="Str0ng!pass",
        role=role,
        is_verified=True,
    )


def make_project(client, **extra):
    values = {
        "title": "Build a delivery app",
        "description": "Flutter app for Douala deliveries",
        "budget_min": 50000,
        "budget_max": 150000,
        "duration_timeframe": 6,
        "duration_unit": "weeks",
    }
    values.update(extra)
    return Project.objects.create(client=client, **values)


def apply(project, developer, status="pending"):
    return Application.objects.create(
        project=project,
        developer=developer,
        proposal="I have shipped three similar apps.",
        bid_amount=90000,
        estimated_duration=5,
        status=status,
    )


class ApplyToProjectTests(APITestCase):

    def setUp(self):
        self.owner = make_user("owner", "client")
        self.developer = make_user("dev", "developer")
        self.project = make_project(self.owner)
        self.client.force_authenticate(self.developer)
        self.url = reverse("application-apply")

    def payload(self, **overrides):
        data = {
            "project": self.project.id,
            "proposal": "I can deliver this in five weeks.",
            "bid_amount": 100000,
            "estimated_duration": 5,
            "duration_unit": "weeks",
        }
        data.update(overrides)
        return data

    def test_apply_notifies_the_client(self):
        response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        application = Application.objects.get()
        self.assertEqual(application.developer, self.developer)
        self.assertEqual(application.status, "pending")

        notification = Notification.objects.get(recipient=self.owner)
        self.assertEqual(notification.notif_type, "APPLICATION_SUBMITTED")

    def test_cannot_apply_twice(self):
        self.client.post(self.url, self.payload())
        response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("already applied", str(response.data))
        self.assertEqual(Application.objects.count(), 1)

    def test_cannot_apply_to_closed_project(self):
        self.project.status = "in-progress"
        self.project.save()

        response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clients_cannot_apply(self):
        self.client.force_authenticate(make_user("other-client", "client"))

        response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_blank_proposal_is_rejected(self):
        response = self.client.post(self.url, self.payload(proposal="   "))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_applications(self):
        apply(self.project, self.developer)

        response = self.client.get(reverse("my-applications"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["project"]["id"], self.project.id)


class ApplicationDecisionTests(APITestCase):

    def setUp(self):
        self.owner = make_user("owner", "client")
        self.project = make_project(self.owner)
        self.dev_a = make_user("dev-a", "developer")
        self.dev_b = make_user("dev-b", "developer")
        self.dev_c = make_user("dev-c", "developer")
        self.app_a = apply(self.project, self.dev_a)
        self.app_b = apply(self.project, self.dev_b)
        self.app_c = apply(self.project, self.dev_c)
        self.client.force_authenticate(self.owner)

    def decide(self, application, decision):
        return self.client.post(
            reverse("application-decision", args=[application.id]),
            {"status": decision},
        )

    def test_accept_assigns_developer_and_rejects_the_rest(self):
        response = self.decide(self.app_a, "accepted")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "accepted")

        self.project.refresh_from_db()
        self.assertEqual(self.project.status, "in-progress")
        self.assertEqual(self.project.assigned_developer, self.dev_a)

        for application, expected in ((self.app_a, "accepted"), (self.app_b, "rejected"), (self.app_c, "rejected")):
            application.refresh_from_db()
            self.assertEqual(application.status, expected)

        self.assertEqual(Notification.objects.count(), 3)
        self.assertEqual(
            Notification.objects.get(recipient=self.dev_a).notif_type, "APPLICATION_ACCEPTED"
        )
        for developer in (self.dev_b, self.dev_c):
            notification = Notification.objects.get(recipient=developer)
            self.assertEqual(notification.notif_type, "APPLICATION_REJECTED")
            self.assertEqual(notification.link, "/dashboard/my-applications")

    def test_already_rejected_applications_are_not_notified_again(self):
        self.app_c.status = "rejected"
        self.app_c.save()

        self.decide(self.app_a, "accepted")

        self.assertFalse(Notification.objects.filter(recipient=self.dev_c).exists())
        self.assertEqual(Notification.objects.count(), 2)

    def test_reject_single_application(self):
        response = self.decide(self.app_b, "rejected")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.app_b.refresh_from_db()
        self.assertEqual(self.app_b.status, "rejected")
        self.project.refresh_from_db()
        self.assertEqual(self.project.status, "active")
        self.assertEqual(Notification.objects.get().recipient, self.dev_b)

    def test_only_owner_can_decide(self):
        self.client.force_authenticate(make_user("intruder", "client"))

        response = self.decide(self.app_a, "accepted")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.app_a.refresh_from_db()
        self.assertEqual(self.app_a.status, "pending")
        self.assertFalse(Notification.objects.exists())

    def test_decided_applications_are_final(self):
        self.decide(self.app_b, "rejected")

        response = self.decide(self.app_b, "accepted")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_second_acceptance_fails_once_project_is_assigned(self):
        self.decide(self.app_a, "accepted")
        other = make_user("dev-d", "developer")
        late = apply(self.project, other)

        response = self.decide(late, "accepted")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.project.refresh_from_db()
        self.assertEqual(self.project.assigned_developer, self.dev_a)

    def test_owner_lists_project_applications(self):
        response = self.client.get(reverse("project-applications", args=[self.project.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)

    def test_unknown_application_is_404(self):
        response = self.client.post(reverse("application-decision", args=[999999]), {"status": "accepted"})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DecisionLockOrderTests(TestCase):

    def setUp(self):
        self.owner = make_user("owner", "client")
        self.project = make_project(self.owner)
        self.first = apply(self.project, make_user("dev-a", "developer"))
        self.second = apply(self.project, make_user("dev-b", "developer"))

    def record_locks(self):
        calls = []
        original = QuerySet.select_for_update

        def recording(queryset, *args, **kwargs):
            calls.append((queryset.model, kwargs.get("of", ())))
            return original(queryset, *args, **kwargs)

        return calls, patch.object(QuerySet, "select_for_update", recording)

    def test_accept_locks_project_before_applications(self):
        calls, recorder = self.record_locks()
        with recorder:
            accept_application(self.first.id, self.owner)

        self.assertEqual(calls, [
            (Project, ()),
            (Application, ("self",)),
            (Application, ("self",)),
        ])

    def test_reject_locks_project_before_application(self):
        calls, recorder = self.record_locks()
        with recorder:
            reject_application(self.second.id, self.owner)

        self.assertEqual(calls, [(Project, ()), (Application, ("self",))])

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.payments.campay import CampayConfig
from apps.payments.models import Payment
from apps.projects.models import Project, Milestone

User = get_user_model()


def make_user(username, role="client", **extra):
    return User.objects.create_user(
        email=f"{username}@example.com",
        username=username,
        password="Str0ng!pass",
        role=role,
        is_verified=True,
        **extra,
    )


def make_project(client, developer=None, **extra):
    values = {
        "title": "Mobile money checkout",
        "description": "Integrate MTN and Orange payments",
        "budget_min": 50,
        "budget_max": 100,
        "duration_timeframe": 2,
        "duration_unit": "weeks",
        "status": "in-progress" if developer else "active",
    }
    values.update(extra)
    return Project.objects.create(client=client, assigned_developer=developer, **values)


def make_milestone(project, amount, milestone_id, status="pending"):
    return Milestone.objects.create(
        project=project,
        milestone_id=milestone_id,
        title=f"Milestone {milestone_id}",
        description="Deliverable",
        amount=amount,
        due_date=timezone.now() + timedelta(days=7),
        status=status,
    )


def make_payment(project, milestones, amount=None, **extra):
    payment = Payment.objects.create(
        project=project,
        client=project.client,
        developer=project.assigned_developer,
        amount=amount if amount is not None else sum(m.amount for m in milestones),
        phone_number="677123456",
        provider="mtn",
        gateway_reference=extra.pop("gateway_reference", "ref-1"),
        **extra,
    )
    payment.milestones.set(milestones)
    return payment


def campay_config(**overrides):
    values = {
        "base_url": "https://demo.campay.net/api",
        "token": "test-token",
        "webhook_secret": "whsec-test",
    }
    values.update(overrides)
    return CampayConfig(**values)

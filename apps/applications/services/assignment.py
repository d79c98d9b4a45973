import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.applications.models import Application
from apps.notifications.services.create_notifications import notify_user
from apps.projects.models import Project

logger = logging.getLogger(__name__)

MY_APPLICATIONS_LINK = "/dashboard/my-applications"


def _notify_decision(application, decision):
    project = application.project
    notify_user(
        recipient=application.developer,
        notif_type=f"APPLICATION_{decision.upper()}",
        title=f"Application {decision}",
        message=f"Your application for the project \"{project.title}\" has been {decision}.",
        link=MY_APPLICATIONS_LINK,
        data={"project_id": project.id, "application_id": application.id},
    )


def _lock_pending_application(application_id, client):
    """Row locks are always taken project first, then applications."""
    project_id = get_object_or_404(
        Application.objects.values_list("project_id", flat=True),
        pk=application_id,
    )
    project = Project.objects.select_for_update().get(pk=project_id)

    if project.client_id != client.id:
        raise PermissionDenied("Only the project owner can decide on applications.")

    application = (
        Application.objects
        .select_for_update(of=("self",))
        .select_related("developer")
        .get(pk=application_id)
    )
    application.project = project

    if application.status != "pending":
        raise ValidationError(f"Application is already {application.status}.")

    return application, project


@transaction.atomic
def accept_application(application_id, client):
    """
    Accept one application and assign its developer to the project.
    Every other pending application on the project is rejected, and each
    affected developer is notified. All writes commit together.
    """
    application, project = _lock_pending_application(application_id, client)

    if project.status != "active":
        raise ValidationError("This project is no longer accepting applications.")

    application.status = "accepted"
    application.save(update_fields=["status", "updated_at"])

    project.status = "in-progress"
    project.assigned_developer = application.developer
    project.save(update_fields=["status", "assigned_developer", "updated_at"])

    others = list(
        Application.objects
        .select_for_update(of=("self",))
        .select_related("developer")
        .filter(project=project, status="pending")
        .exclude(pk=application.pk)
    )
    for other in others:
        other.project = project
        other.status = "rejected"
        other.save(update_fields=["status", "updated_at"])
        _notify_decision(other, "rejected")

    _notify_decision(application, "accepted")

    logger.info(
        "Application %s accepted for project %s; %s other application(s) rejected",
        application.id, project.id, len(others),
    )
    return application


@transaction.atomic
def reject_application(application_id, client):
    application, _ = _lock_pending_application(application_id, client)

    application.status = "rejected"
    application.save(update_fields=["status", "updated_at"])
    _notify_decision(application, "rejected")

    logger.info("Application %s rejected", application.id)
    return application

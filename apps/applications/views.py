import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from apps.cores.permissions import IsDeveloper
from apps.notifications.services.create_notifications import notify_user
from apps.projects.models import Project
from .models import Application
from .serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    MyApplicationSerializer,
    ApplicationDecisionSerializer,
)
from .services.assignment import accept_application, reject_application

logger = logging.getLogger(__name__)


class ApplicationCreateView(generics.CreateAPIView):
    '''
    Allow a developer to apply to a project with a proposal and a bid
    '''

    serializer_class = ApplicationCreateSerializer
    permission_classes = [IsDeveloper]

    def perform_create(self, serializer):
        application = serializer.save()
        project = application.project
        notify_user(
            recipient=project.client,
            notif_type="APPLICATION_SUBMITTED",
            title="New application",
            message=f"{self.request.user.get_display_name()} applied to \"{project.title}\".",
            link=f"/dashboard/projects/{project.id}/applications",
            data={"project_id": project.id, "application_id": application.id},
        )


class MyApplicationsView(generics.ListAPIView):
    serializer_class = MyApplicationSerializer
    permission_classes = [IsDeveloper]

    def get_queryset(self):
        return (
            Application.objects
            .select_related('project', 'project__client', 'project__assigned_developer')
            .filter(developer=self.request.user)
            .order_by('-created_at')
        )


class ProjectApplicationsView(generics.ListAPIView):
    serializer_class = ApplicationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        project = get_object_or_404(Project, pk=self.kwargs["project_id"])
        if project.client_id != self.request.user.id:
            raise PermissionDenied("Only the project owner can view its applications.")
        return project.applications.select_related("developer")


class ApplicationDecisionView(generics.GenericAPIView):
    """
    Accept or reject an application. Accepting assigns the developer and
    rejects every other pending application on the project.
    """
    serializer_class = ApplicationDecisionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if serializer.validated_data["status"] == "accepted":
            application = accept_application(pk, request.user)
        else:
            application = reject_application(pk, request.user)

        return Response(ApplicationSerializer(application).data, status=status.HTTP_200_OK)

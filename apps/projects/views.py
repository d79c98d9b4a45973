import logging

from django.db.models import ProtectedError, Q, Sum
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.cores.permissions import IsDeveloper
from .filters import ProjectFilter
from .models import Project, Milestone
from .serializers import (
    ProjectSerializer,
    ProjectDetailSerializer,
    ProjectStatusSerializer,
    MilestoneSerializer,
)

logger = logging.getLogger(__name__)


class ProjectViewSet(viewsets.ModelViewSet):
    """
    Projects the current user takes part in: posted by the client or
    assigned to the developer. Public projects can also be retrieved.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ProjectDetailSerializer
        return ProjectSerializer

    def get_queryset(self):
        user = self.request.user
        qs = Project.objects.select_related("client", "assigned_developer")

        if self.action == "retrieve":
            return qs.filter(
                Q(client=user) | Q(assigned_developer=user) | Q(visibility="public")
            ).prefetch_related("milestones")

        return qs.filter(Q(client=user) | Q(assigned_developer=user))

    def get_owned_project(self, pk):
        project = get_object_or_404(Project, pk=pk)
        if project.client_id != self.request.user.id:
            raise PermissionDenied("Only the project owner can change this project.")
        return project

    def create(self, request, *args, **kwargs):
        if request.user.role != "client":
            raise PermissionDenied("Only clients can post projects.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = serializer.save()
        logger.info("Project %s created by user %s", project.id, request.user.id)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None, *args, **kwargs):
        project = self.get_owned_project(pk)
        partial = kwargs.pop('partial', False)

        serializer = self.get_serializer(project, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(serializer.data)

    def partial_update(self, request, pk=None, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, pk, *args, **kwargs)

    def destroy(self, request, pk=None, *args, **kwargs):
        project = self.get_owned_project(pk)
        try:
            project.delete()
        except ProtectedError:
            raise ValidationError("Projects with payments cannot be deleted.")
        return Response({"detail": "Project deleted successfully."}, status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        project = self.get_owned_project(pk)
        serializer = ProjectStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        project.status = serializer.validated_data["status"]
        project.save(update_fields=["status", "updated_at"])
        return Response({"id": project.id, "status": project.status})


class BrowseProjectsView(generics.ListAPIView):
    """Active, public projects open for applications."""
    serializer_class = ProjectSerializer
    permission_classes = [IsDeveloper]

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = ProjectFilter
    search_fields = ["title", "description", "category"]
    ordering_fields = ["created_at", "budget_max"]

    def get_queryset(self):
        return (
            Project.objects
            .select_related("client")
            .filter(status="active", visibility="public")
            .order_by("-created_at")
        )


class ProjectMilestoneMixin:
    def get_project(self):
        project = get_object_or_404(Project, pk=self.kwargs["project_id"])
        if not project.is_party(self.request.user):
            raise PermissionDenied("You are not part of this project.")
        return project


class MilestoneListCreateView(ProjectMilestoneMixin, generics.ListCreateAPIView):
    serializer_class = MilestoneSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return self.get_project().milestones.all()

    def list(self, request, *args, **kwargs):
        milestones = self.get_queryset()
        pending_total = milestones.filter(status="pending").aggregate(total=Sum("amount"))["total"] or 0
        return Response({
            "milestones": self.get_serializer(milestones, many=True).data,
            "pending_total": pending_total,
        })

    def create(self, request, *args, **kwargs):
        project = self.get_project()
        if project.client_id != request.user.id:
            raise PermissionDenied("Only the project owner can add milestones.")

        serializer = self.get_serializer(
            data=request.data,
            context={"request": request, "project": project},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class MilestoneCompleteView(ProjectMilestoneMixin, generics.GenericAPIView):
    """Mark a milestone completed without a payment."""
    serializer_class = MilestoneSerializer
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        project = self.get_project()
        if project.client_id != request.user.id:
            raise PermissionDenied("Only the project owner can complete milestones.")

        milestone = get_object_or_404(Milestone, project=project, milestone_id=self.kwargs["milestone_id"])
        if milestone.status == "completed":
            raise ValidationError("Milestone is already completed.")

        milestone.mark_completed(by=request.user)
        return Response(self.get_serializer(milestone).data)

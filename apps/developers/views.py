import logging

from rest_framework import generics, permissions
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import SearchFilter, OrderingFilter
from django_filters.rest_framework import DjangoFilterBackend
from django.shortcuts import get_object_or_404

from .filters import DeveloperFilter
from .models import DeveloperProfile
from .serializers import DeveloperProfileSerializer, DeveloperListSerializer

logger = logging.getLogger(__name__)


class MyDeveloperProfileView(generics.RetrieveUpdateAPIView):
    """
    The signed-in developer's own profile. Created on first access.
    """
    serializer_class = DeveloperProfileSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'put', 'patch']

    def get_object(self):
        if self.request.user.role != "developer":
            raise PermissionDenied("Only developers can have profiles.")

        profile, created = DeveloperProfile.objects.get_or_create(user=self.request.user)
        if created:
            logger.info("Created developer profile for user %s", self.request.user.id)
        return profile


class FindDevelopersView(generics.ListAPIView):
    serializer_class = DeveloperListSerializer
    permission_classes = [permissions.IsAuthenticated]

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = DeveloperFilter
    search_fields = ["title", "bio", "user__display_name", "user__username"]
    ordering_fields = ["hourly_rate", "updated_at"]

    def get_queryset(self):
        return (
            DeveloperProfile.objects
            .select_related("user")
            .filter(user__role="developer", user__is_active=True)
        )


class DeveloperDetailView(generics.RetrieveAPIView):
    serializer_class = DeveloperProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return get_object_or_404(
            DeveloperProfile.objects.select_related("user").prefetch_related(
                "experience_entries",
                "education_entries",
                "portfolioitem_entries",
                "certification_entries",
            ),
            user_id=self.kwargs["user_id"],
        )

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    ProjectViewSet,
    BrowseProjectsView,
    MilestoneListCreateView,
    MilestoneCompleteView,
)

project_router = DefaultRouter()
project_router.register("projects", ProjectViewSet, basename="projects")

urlpatterns = [
    path('projects/browse/', BrowseProjectsView.as_view(), name='browse-projects'),
    path('projects/<int:project_id>/milestones/', MilestoneListCreateView.as_view(), name='project-milestones'),
    path(
        'projects/<int:project_id>/milestones/<str:milestone_id>/complete/',
        MilestoneCompleteView.as_view(),
        name='milestone-complete',
    ),

    path('', include(project_router.urls)),
]

from django.urls import path
from .views import (
    ApplicationCreateView,
    MyApplicationsView,
    ProjectApplicationsView,
    ApplicationDecisionView,
)

urlpatterns = [
    path('applications/apply/', ApplicationCreateView.as_view(), name='application-apply'),
    path('my-applications/', MyApplicationsView.as_view(), name='my-applications'),
    path('projects/<int:project_id>/applications/', ProjectApplicationsView.as_view(), name='project-applications'),
    path('applications/<int:pk>/decision/', ApplicationDecisionView.as_view(), name='application-decision'),
]

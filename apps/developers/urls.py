from django.urls import path
from .views import MyDeveloperProfileView, FindDevelopersView, DeveloperDetailView

urlpatterns = [
    path('developers/', FindDevelopersView.as_view(), name='find-developers'),
    path('developers/me/', MyDeveloperProfileView.as_view(), name='developer-profile-me'),
    path('developers/<int:user_id>/', DeveloperDetailView.as_view(), name='developer-detail'),
]

from django.urls import path
from .views import (
    RegisterView,
    SendVerificationView,
    VerifyEmailView,
    LoginView,
    MeView,
)

urlpatterns = [
    # Authentication & registration
    path('register/', RegisterView.as_view(), name='register'),
    path('send-verification/', SendVerificationView.as_view(), name='send-verification'),
    path('verify-email/', VerifyEmailView.as_view(), name='verify-email'),
    path('login/', LoginView.as_view(), name='login'),

    path('me/', MeView.as_view(), name='me'),
]

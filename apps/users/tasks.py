# apps/users/tasks.py
from celery import shared_task
from django.core.mail import send_mail
from django.conf import settings

SUBJECTS = {
    "verify_email": "Verify your CamerDev email address",
    "password_reset": "Your CamerDev password reset code",
}


@shared_task
def send_otp_email(email: str, otp: str, purpose: str = "verify_email"):
    subject = SUBJECTS.get(purpose, f"[CamerDev] Code for {purpose}")
    message = f"Your verification code is {otp}. It will expire in 10 minutes."
    from_email = getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@camerdev.cm")
    send_mail(subject, message, from_email, [email])

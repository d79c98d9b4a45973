from django.db import models
from django.conf import settings
User = settings.AUTH_USER_MODEL


class DeveloperProfile(models.Model):
    AVAILABILITY_CHOICES = [
        ('full-time', 'Full Time'),
        ('part-time', 'Part Time'),
        ('not-available', 'Not Available'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="developer_profile")
    title = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)
    skills = models.JSONField(default=list, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    hourly_rate = models.PositiveIntegerField(null=True, blank=True, help_text="XAF per hour")
    availability = models.CharField(max_length=20, choices=AVAILABILITY_CHOICES, default='full-time')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "developer_profiles"
        ordering = ["-updated_at"]

    def __str__(self):
        return f"Developer Profile: {self.user}"


class ProfileEntry(models.Model):
    """Ordered sub-record of a developer profile."""
    profile = models.ForeignKey(DeveloperProfile, on_delete=models.CASCADE, related_name="%(class)s_entries")
    position = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ["position", "id"]


class Experience(ProfileEntry):
    company = models.CharField(max_length=120)
    role = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)


class Education(ProfileEntry):
    institution = models.CharField(max_length=150)
    degree = models.CharField(max_length=120)
    field_of_study = models.CharField(max_length=120, blank=True)
    year_completed = models.IntegerField(null=True, blank=True)


class PortfolioItem(ProfileEntry):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    link = models.URLField(blank=True)
    technologies = models.JSONField(default=list, blank=True)


class Certification(ProfileEntry):
    name = models.CharField(max_length=200)
    issuer = models.CharField(max_length=200, blank=True)
    issued_on = models.DateField(null=True, blank=True)
    credential_url = models.URLField(blank=True)

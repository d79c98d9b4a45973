import logging

from django.core.validators import RegexValidator
from django.db import transaction
from rest_framework import serializers

from apps.cores.fields import FlexibleListField
from .models import (
    DeveloperProfile, Experience, Education, PortfolioItem, Certification,
)

logger = logging.getLogger(__name__)


# ----------------------------
# Entry Serializers
# ----------------------------
class ExperienceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Experience
        fields = ['id', 'position', 'company', 'role', 'description', 'start_date', 'end_date']
        read_only_fields = ['id', 'position']

    def validate(self, data):
        if data.get('end_date') and data['end_date'] < data['start_date']:
            raise serializers.ValidationError("End date cannot be before start date.")
        return data


class EducationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Education
        fields = ['id', 'position', 'institution', 'degree', 'field_of_study', 'year_completed']
        read_only_fields = ['id', 'position']

    def validate_year_completed(self, value):
        if value is not None and (value > 2100 or value < 1950):
            raise serializers.ValidationError("Year is unrealistic.")
        return value


class PortfolioItemSerializer(serializers.ModelSerializer):
    technologies = FlexibleListField(required=False)

    class Meta:
        model = PortfolioItem
        fields = ['id', 'position', 'title', 'description', 'link', 'technologies']
        read_only_fields = ['id', 'position']


class CertificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Certification
        fields = ['id', 'position', 'name', 'issuer', 'issued_on', 'credential_url']
        read_only_fields = ['id', 'position']


# ----------------------------
# Developer Profile Serializer
# ----------------------------
class DeveloperProfileSerializer(serializers.ModelSerializer):
    ENTRY_FIELDS = {
        "experience": (Experience, "experience_entries"),
        "education": (Education, "education_entries"),
        "portfolio": (PortfolioItem, "portfolioitem_entries"),
        "certifications": (Certification, "certification_entries"),
    }

    user_id = serializers.IntegerField(source='user.id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    display_name = serializers.CharField(source='user.get_display_name', read_only=True)
    is_verified = serializers.BooleanField(source='user.is_verified', read_only=True)

    skills = FlexibleListField(required=False)

    experience = ExperienceSerializer(many=True, required=False, source='experience_entries')
    education = EducationSerializer(many=True, required=False, source='education_entries')
    portfolio = PortfolioItemSerializer(many=True, required=False, source='portfolioitem_entries')
    certifications = CertificationSerializer(many=True, required=False, source='certification_entries')

    phone_number = serializers.CharField(
        required=False,
        allow_blank=True,
        validators=[RegexValidator(
            regex=r'^\+?\d{9,15}$',
            message='Invalid phone number format. Use 677123456 or +237677123456'
        )]
    )

    class Meta:
        model = DeveloperProfile
        fields = [
            'id', 'user_id', 'email', 'display_name', 'is_verified',
            'title', 'bio', 'skills', 'phone_number', 'hourly_rate', 'availability',
            'experience', 'education', 'portfolio', 'certifications',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def _pop_entries(self, validated_data):
        entries = {}
        for field, (_, source) in self.ENTRY_FIELDS.items():
            if source in validated_data:
                entries[field] = validated_data.pop(source)
        return entries

    @transaction.atomic
    def create(self, validated_data):
        entries = self._pop_entries(validated_data)
        profile = DeveloperProfile.objects.create(**validated_data)
        self._save_entries(profile, entries)
        return profile

    @transaction.atomic
    def update(self, instance, validated_data):
        entries = self._pop_entries(validated_data)

        for key, value in validated_data.items():
            setattr(instance, key, value)
        instance.save()

        # Only lists the client sent are replaced
        self._save_entries(instance, entries)
        return instance

    def _save_entries(self, profile, entries):
        for field, items in entries.items():
            model, source = self.ENTRY_FIELDS[field]
            getattr(profile, source).all().delete()
            model.objects.bulk_create([
                model(profile=profile, position=index, **item)
                for index, item in enumerate(items)
            ])
            logger.debug("Replaced %s %s entries for profile %s", len(items), field, profile.id)


class DeveloperListSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True)
    display_name = serializers.CharField(source='user.get_display_name', read_only=True)
    skills = FlexibleListField(read_only=True)

    class Meta:
        model = DeveloperProfile
        fields = ['id', 'user_id', 'display_name', 'title', 'bio', 'skills', 'hourly_rate', 'availability']

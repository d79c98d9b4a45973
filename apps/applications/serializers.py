from rest_framework import serializers

from apps.projects.serializers import ProjectSerializer
from apps.users.serializers import UserMiniSerializer
from .models import Application


# ---------------- Application Create / Apply ----------------
class ApplicationCreateSerializer(serializers.ModelSerializer):
    developer = serializers.HiddenField(
        default=serializers.CurrentUserDefault()
    )

    class Meta:
        model = Application
        fields = [
            'id',
            'project',
            'developer',
            'proposal',
            'bid_amount',
            'estimated_duration',
            'duration_unit',
            'status',
        ]
        read_only_fields = ['id', 'status']
        # duplicate applications are reported by validate() with a clearer message
        validators = []

    def validate_proposal(self, value):
        if not value.strip():
            raise serializers.ValidationError("Proposal cannot be empty.")
        if len(value) > 5000:
            raise serializers.ValidationError("Proposal cannot exceed 5000 characters.")
        return value

    def validate_bid_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Bid amount must be positive.")
        return value

    def validate(self, attrs):
        user = attrs['developer']
        project = attrs['project']

        if project.client_id == user.id:
            raise serializers.ValidationError("You cannot apply to your own project.")

        if Application.objects.filter(project=project, developer=user).exists():
            raise serializers.ValidationError("You have already applied to this project.")

        if project.status != 'active' or project.visibility != 'public':
            raise serializers.ValidationError("This project is not open for applications.")

        return attrs


class ApplicationSerializer(serializers.ModelSerializer):
    developer = UserMiniSerializer(read_only=True)

    class Meta:
        model = Application
        fields = [
            'id',
            'project',
            'developer',
            'proposal',
            'bid_amount',
            'estimated_duration',
            'duration_unit',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MyApplicationSerializer(serializers.ModelSerializer):
    project = ProjectSerializer(read_only=True)

    class Meta:
        model = Application
        fields = [
            'id',
            'status',
            'proposal',
            'bid_amount',
            'estimated_duration',
            'duration_unit',
            'created_at',
            'project',
        ]


class ApplicationDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=["accepted", "rejected"])

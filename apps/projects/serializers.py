from django.db.models import Sum
from rest_framework import serializers

from apps.cores.currency import format_xaf
from apps.cores.fields import FlexibleListField
from apps.users.serializers import UserMiniSerializer
from .models import Project, Milestone


class MilestoneSerializer(serializers.ModelSerializer):
    amount_display = serializers.SerializerMethodField()

    class Meta:
        model = Milestone
        fields = [
            "id",
            "milestone_id",
            "title",
            "description",
            "amount",
            "amount_display",
            "due_date",
            "status",
            "completed_at",
            "completed_by",
            "payment",
            "created_at",
        ]
        read_only_fields = [
            "id",
            "milestone_id",
            "status",
            "completed_at",
            "completed_by",
            "payment",
            "created_at",
        ]

    def get_amount_display(self, obj):
        return format_xaf(obj.amount)

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Please fill in all fields")
        return value

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Please enter a valid amount")
        return value

    def create(self, validated_data):
        return Milestone.objects.create(project=self.context["project"], **validated_data)


class ProjectSerializer(serializers.ModelSerializer):
    client = UserMiniSerializer(read_only=True)
    assigned_developer = UserMiniSerializer(read_only=True)
    requirements = FlexibleListField(required=False)
    skills = FlexibleListField(required=False)

    class Meta:
        model = Project
        fields = [
            "id",
            "title",
            "description",
            "requirements",
            "budget_min",
            "budget_max",
            "duration_timeframe",
            "duration_unit",
            "skills",
            "category",
            "status",
            "visibility",
            "client",
            "assigned_developer",
            "payment_status",
            "last_payment_amount",
            "last_payment_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "status",
            "client",
            "assigned_developer",
            "payment_status",
            "last_payment_amount",
            "last_payment_at",
            "created_at",
            "updated_at",
        ]

    # ------------------- VALIDATIONS ------------------- #

    def validate_title(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError("Title must be at least 5 characters long.")
        return value

    def validate_duration_timeframe(self, value):
        if value <= 0:
            raise serializers.ValidationError("Duration must be positive.")
        return value

    def validate(self, attrs):
        budget_min = attrs.get("budget_min", getattr(self.instance, "budget_min", None))
        budget_max = attrs.get("budget_max", getattr(self.instance, "budget_max", None))

        if budget_min is not None and budget_max is not None and budget_min > budget_max:
            raise serializers.ValidationError({"budget_max": "Maximum budget must be at least the minimum budget."})

        return attrs

    def create(self, validated_data):
        return Project.objects.create(client=self.context["request"].user, **validated_data)


class ProjectDetailSerializer(ProjectSerializer):
    milestones = MilestoneSerializer(many=True, read_only=True)
    pending_total = serializers.SerializerMethodField()
    already_applied = serializers.SerializerMethodField()

    class Meta(ProjectSerializer.Meta):
        fields = ProjectSerializer.Meta.fields + ["milestones", "pending_total", "already_applied"]

    def get_pending_total(self, obj):
        return obj.milestones.filter(status="pending").aggregate(total=Sum("amount"))["total"] or 0

    def get_already_applied(self, obj):
        request = self.context.get("request")
        if request and request.user.is_authenticated:
            return obj.applications.filter(developer=request.user).exists()
        return False


class ProjectStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=["active", "review", "completed", "cancelled"])

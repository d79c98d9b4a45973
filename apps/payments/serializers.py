from rest_framework import serializers

from apps.cores.currency import format_xaf
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    amount_display = serializers.SerializerMethodField()
    milestone_ids = serializers.SerializerMethodField()
    project_title = serializers.CharField(source="project.title", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "project",
            "project_title",
            "client",
            "developer",
            "amount",
            "amount_display",
            "phone_number",
            "provider",
            "status",
            "is_paying_all",
            "milestone_ids",
            "description",
            "payment_url",
            "gateway_reference",
            "gateway_status",
            "operator",
            "operator_reference",
            "final_amount",
            "version",
            "reconciled_via",
            "created_at",
            "updated_at",
            "completed_at",
            "failed_at",
            "withdrawn_at",
            "withdrawal_reference",
        ]
        read_only_fields = fields

    def get_amount_display(self, obj):
        return format_xaf(obj.amount)

    def get_milestone_ids(self, obj):
        return [m.milestone_id for m in obj.milestones.all()]


class PaymentInitiateSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)
    provider = serializers.ChoiceField(choices=["mtn", "orange"], default="mtn")
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)

    def payer(self):
        data = self.validated_data
        return {key: data.get(key) for key in ("first_name", "last_name", "email")}


class WithdrawalSerializer(serializers.Serializer):
    payment = serializers.UUIDField()
    phone_number = serializers.CharField(max_length=20)
    provider = serializers.ChoiceField(choices=["mtn", "orange"], default="mtn")
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class GatewayHistorySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("Start date must be before end date.")
        return attrs

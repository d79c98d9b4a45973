import re

from django.contrib.auth import get_user_model, authenticate
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .utils import create_and_send_otp, verify_otp


User = get_user_model()


class UserMiniSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(source="get_display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "username", "display_name", "role"]


# -------- Register (creates the account, unverified) --------
class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150)
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=[("client", "Client"), ("developer", "Developer")])
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={'input_type': 'password'},
        help_text="Password must contain uppercase, lowercase, number, and special character."
    )
    confirm_password = serializers.CharField(write_only=True, min_length=8)

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("Email already registered.")
        return value

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("Username already taken.")
        return value

    def validate_password(self, value):
        """Password strength validation"""
        if not re.search(r"[A-Z]", value):
            raise serializers.ValidationError("Password must contain at least one uppercase letter.")
        if not re.search(r"[a-z]", value):
            raise serializers.ValidationError("Password must contain at least one lowercase letter.")
        if not re.search(r"\d", value):
            raise serializers.ValidationError("Password must contain at least one digit.")
        if not re.search(r"[!@#$%^&*(),.?\":{}|<>]", value):
            raise serializers.ValidationError("Password must contain at least one special character.")
        return value

    def validate(self, data):
        if data["password"] != data["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": "Passwords do not match."})
        return data

    @transaction.atomic
    def create(self, validated_data):
        validated_data.pop("confirm_password")
        password = validated_data.pop("password")

        user = User.objects.create_user(password=password, is_verified=False, **validated_data)
        transaction.on_commit(lambda: create_and_send_otp(user.email, purpose="verify_email"))
        return user


# -------- Resend verification code --------
class SendVerificationSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        value = value.lower().strip()
        user = User.objects.filter(email=value).first()
        if not user:
            raise serializers.ValidationError("No account found for this email.")
        if user.is_verified:
            raise serializers.ValidationError("Email is already verified.")
        return value

    def create(self, validated_data):
        email = validated_data["email"]
        create_and_send_otp(email, purpose="verify_email")
        return {"email": email, "otp_sent": True}


# -------- Verify email with OTP --------
class VerifyEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(write_only=True)

    def validate(self, data):
        email = data["email"].lower().strip()
        user = User.objects.filter(email=email).first()
        if not user:
            raise serializers.ValidationError({"email": "No account found for this email."})

        if not verify_otp(email, data["otp"], purpose="verify_email"):
            raise serializers.ValidationError({"otp": "Invalid or expired OTP."})

        data["user"] = user
        return data

    def save(self, **kwargs):
        user = self.validated_data["user"]
        user.is_verified = True
        user.save(update_fields=["is_verified"])
        return user


# ---------- Login ----------
class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, data):
        email = data.get('email').lower().strip()
        password = data.get('password')

        user = authenticate(email=email, password=password)
        if not user:
            raise serializers.ValidationError("Invalid email or password.")

        if not user.is_active:
            raise serializers.ValidationError("User account is disabled.")

        if not user.is_verified:
            raise serializers.ValidationError(
                {"email": "Please verify your email before logging in."},
                code="email_not_verified",
            )

        refresh = RefreshToken.for_user(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user": UserSerializer(user).data,
        }


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "display_name",
            "role",
            "is_verified",
            "created_at",
        ]
        read_only_fields = ["id", "email", "username", "role", "is_verified", "created_at"]

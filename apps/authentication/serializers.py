from rest_framework import serializers
from .models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user info embedded in inspection, listing and job responses"""

    name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone"]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    verificationStatus = serializers.CharField(source="verification_status", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "phone", "role", "verificationStatus"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    SELF_SERVICE_ROLES = [User.CLIENT, User.AGENT, User.INSPECTOR]

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    role = serializers.ChoiceField(choices=SELF_SERVICE_ROLES, default=User.CLIENT)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists")
        return value.lower()


class VerificationDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[User.VERIFIED, User.REJECTED])
    reason = serializers.CharField(required=False, allow_blank=True, default="")

# users/api/serializers.py

"""
API Serializers for accounts and JWT sessions.
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from users.models import User
from users.services.session import add_snapshot_claims


class SignupSerializer(serializers.Serializer):
    """Serializer for member signup."""

    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_email(self, value):
        email = value.strip().lower()
        if User.objects.filter(email=email).exists():
            raise serializers.ValidationError("An account with this email already exists")
        return email

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data.get("name", ""),
        )


class UserSerializer(serializers.ModelSerializer):
    """Serializer for user data."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "bio",
            "image",
            "subscription_id",
            "subscription_status",
            "subscription_price_id",
            "subscription_start_date",
            "subscription_end_date",
            "nutrition_streak",
            "date_joined",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["name", "bio", "image"]


class SnapshotTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Email/password login; tokens carry the role and subscription snapshot."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        return add_snapshot_claims(token, user)

"""
Core App Serializers - Authentication & Users
"""

from rest_framework import serializers

from .models import UserRole


class LoginSerializer(serializers.Serializer):
    """Email/password sign-in."""

    email = serializers.CharField(max_length=254)
    password = serializers.CharField(max_length=128, trim_whitespace=False)


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class RegisterSerializer(serializers.Serializer):
    """Admin self-registration."""

    email = serializers.CharField(max_length=254)
    password = serializers.CharField(max_length=128, trim_whitespace=False)
    name = serializers.CharField(max_length=150)


class UserUpdateSerializer(serializers.Serializer):
    """
    Admin update of a user.

    An unknown role is accepted here and ignored by the service, the same
    way the dashboard has always behaved.
    """

    role = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, data):
        if 'is_active' not in data and 'isActive' in data:
            data['is_active'] = data['isActive']
        data.pop('isActive', None)
        return data


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)

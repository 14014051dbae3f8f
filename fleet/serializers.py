"""
FLEET App Serializers - Courier Management
"""

from rest_framework import serializers


class CourierListQuerySerializer(serializers.Serializer):
    active_only = serializers.BooleanField(required=False, default=False)


class CourierRegisterSerializer(serializers.Serializer):
    """New repartidor account created by an admin."""

    email = serializers.CharField(max_length=254)
    password = serializers.CharField(max_length=128, trim_whitespace=False)
    name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    license_number = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


class CourierUpdateSerializer(serializers.Serializer):
    """
    Partial update of a repartidor profile.

    Only submitted fields end up in validated_data.
    """

    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    license_number = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    phone_verified = serializers.BooleanField(required=False)

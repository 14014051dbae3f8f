"""
Logistics App Serializers - Orders & Delivery Assignments
"""

from rest_framework import serializers

from .models import AssignmentStatus

STATUS_FILTER_CHOICES = ['all'] + list(AssignmentStatus.values)


class AssignOrderSerializer(serializers.Serializer):
    """
    Admin assignment of an order to a courier.

    Presence of both ids is checked by the service so the dashboard
    gets its usual message.
    """

    order_id = serializers.CharField(required=False, allow_blank=True, default='')
    repartidor_id = serializers.CharField(required=False, allow_blank=True, default='')


class AssignmentListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_FILTER_CHOICES, required=False, default='all')


class AssignmentStatusSerializer(serializers.Serializer):
    """Courier status update."""

    status = serializers.ChoiceField(choices=AssignmentStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class LocationSerializer(serializers.Serializer):
    """GPS point sent by the courier app while delivering."""

    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    accuracy = serializers.FloatField(required=False, allow_null=True, min_value=0)


class DeliveryPhotoSerializer(serializers.Serializer):
    photo = serializers.ImageField()

"""
REPORTS App Serializers
"""

from rest_framework import serializers

from .services import ReportPeriod


class PeriodReportQuerySerializer(serializers.Serializer):
    """Query string of /api/reports/period/."""

    period = serializers.ChoiceField(choices=ReportPeriod.choices, default=ReportPeriod.MONTH.value)
    offset = serializers.IntegerField(min_value=0, default=0)
    compare = serializers.BooleanField(default=False)

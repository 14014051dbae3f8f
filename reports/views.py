"""
REPORTS App - Metrics API for the admin dashboard

Both endpoints are recomputed on every request and never cached.
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdmin
from core.views import no_store

from .serializers import PeriodReportQuerySerializer
from .services import DashboardMetricsService, PeriodReportService


class DashboardMetricsView(APIView):
    """
    GET /api/reports/dashboard/
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        return no_store(Response(DashboardMetricsService().get_metrics()))


class PeriodReportView(APIView):
    """
    Revenue / orders report.

    GET /api/reports/period/?period=week|month|year&offset=0&compare=true
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        query = PeriodReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        report = PeriodReportService().get_report(
            period=params['period'],
            offset=params['offset'],
            compare=params['compare'],
        )
        return no_store(Response(report))

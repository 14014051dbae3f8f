"""
COURIER App - Services for Dashboard Data

Aggregation of a courier's assignments for the mobile dashboard.
"""

from typing import Any, Dict, List, Optional

from django.conf import settings

from logistics.models import AssignmentStatus, DeliveryAssignment
from logistics.services.assignments import AssignmentService


def count_by_status(assignments: List[DeliveryAssignment]) -> Dict[str, int]:
    """Total plus one counter per assignment status."""
    counts = {'total': len(assignments)}
    for status in AssignmentStatus.values:
        counts[status] = sum(1 for a in assignments if a.status == status)
    return counts


class CourierStatsService:
    """
    Service for aggregating courier statistics.

    Provides data for the courier dashboard:
    - Counts per assignment status
    - Most recent assignments
    """

    def __init__(self, assignments: Optional[AssignmentService] = None):
        self.assignments = assignments or AssignmentService()

    def get_dashboard(self, courier_id: str) -> Dict[str, Any]:
        assignments = self.assignments.get_my_assignments(courier_id)
        recent_limit = settings.COURIER_RECENT_ASSIGNMENTS

        return {
            'stats': count_by_status(assignments),
            'recent_assignments': [a.to_dict() for a in assignments[:recent_limit]],
            'has_more': len(assignments) > recent_limit,
        }

"""
COURIER App - Mobile REST API

Django REST Framework API endpoints for the FritoLay Repartidor app.
All endpoints except login/refresh require a Supabase access token
of an active courier (repartidor).
"""

import logging

from rest_framework import permissions
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BackendError, NotFound
from core.models import UserRole
from core.permissions import IsCourier
from core.serializers import LoginSerializer, RefreshTokenSerializer
from core.services import AccountService
from core.views import no_store
from logistics.serializers import (
    AssignmentListQuerySerializer, AssignmentStatusSerializer,
    DeliveryPhotoSerializer, LocationSerializer,
)
from logistics.services.assignments import AssignmentService

from .services import CourierStatsService

logger = logging.getLogger(__name__)


# ============================================
# AUTHENTICATION
# ============================================

class CourierLoginView(APIView):
    """
    Login endpoint for the courier mobile app.

    POST /api/mobile/auth/login/
    {
        "email": "repartidor@fritolay.pe",
        "password": "..."
    }
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = AccountService().login(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
            role=UserRole.COURIER,
        )
        return Response(payload)


class CourierRefreshTokenView(APIView):
    """Refresh the Supabase session."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AccountService().refresh(serializer.validated_data['refresh_token']))


# ============================================
# COURIER PROFILE & DASHBOARD
# ============================================

class CourierProfileView(APIView):
    """
    GET /api/mobile/profile/
    """
    permission_classes = [IsCourier]

    def get(self, request):
        return Response(request.user.profile.to_dict())


class CourierDashboardView(APIView):
    """
    Dashboard data for the courier mobile app.

    GET /api/mobile/dashboard/
    """
    permission_classes = [IsCourier]

    def get(self, request):
        dashboard = CourierStatsService().get_dashboard(request.user.id)
        dashboard['courier'] = {
            'id': request.user.id,
            'name': request.user.profile.name,
            'email': request.user.email,
        }
        return no_store(Response(dashboard))


# ============================================
# ASSIGNMENTS
# ============================================

class AssignmentListView(APIView):
    """
    List the courier's assignments.

    GET /api/mobile/assignments/?status=all|assigned|in_transit|delivered|failed
    """
    permission_classes = [IsCourier]

    def get(self, request):
        query = AssignmentListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        assignments = AssignmentService().get_my_assignments(
            request.user.id,
            status=query.validated_data['status'],
        )
        return no_store(Response({'assignments': [a.to_dict() for a in assignments]}))


class AssignmentDetailView(APIView):
    """
    GET /api/mobile/assignments/<id>/
    """
    permission_classes = [IsCourier]

    def get(self, request, assignment_id):
        assignment = AssignmentService().get_assignment(str(assignment_id), courier_id=request.user.id)
        if assignment is None:
            raise NotFound('Asignación no encontrada')
        return Response(assignment.to_dict())


class AssignmentStatusUpdateView(APIView):
    """
    Update assignment status.

    PATCH /api/mobile/assignments/<id>/status/
    { "status": "in_transit" | "delivered" | "failed", "notes": "optional" }
    """
    permission_classes = [IsCourier]

    def patch(self, request, assignment_id):
        serializer = AssignmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        assignment = AssignmentService().update_assignment_status(
            str(assignment_id),
            serializer.validated_data['status'],
            notes=serializer.validated_data.get('notes'),
            courier_id=request.user.id,
        )
        return Response({
            'success': True,
            'status': assignment.status,
            'assignment': assignment.to_dict(),
        })


class UploadDeliveryPhotoView(APIView):
    """
    Upload the proof-of-delivery photo.

    POST /api/mobile/assignments/<id>/photo/
    - photo: File
    """
    permission_classes = [IsCourier]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request, assignment_id):
        serializer = DeliveryPhotoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        photo = serializer.validated_data['photo']

        url = AssignmentService().upload_delivery_photo(
            str(assignment_id),
            photo.read(),
            filename=photo.name,
            courier_id=request.user.id,
        )
        if url is None:
            raise BackendError(message='No se pudo subir la foto')

        return Response({'success': True, 'url': url})


class TrackLocationView(APIView):
    """
    Record the courier position for an assignment.

    POST /api/mobile/assignments/<id>/location/
    { "latitude": -12.0464, "longitude": -77.0428, "accuracy": 12 }
    """
    permission_classes = [IsCourier]

    def post(self, request, assignment_id):
        serializer = LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        saved = AssignmentService().track_location(
            str(assignment_id),
            data['latitude'],
            data['longitude'],
            accuracy=data.get('accuracy'),
            courier_id=request.user.id,
        )
        return Response({'success': saved})

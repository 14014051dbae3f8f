"""
FLEET App - Views for Courier Management

Admin endpoints to list, register, update and remove repartidores.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdmin
from core.views import no_store

from .serializers import (
    CourierListQuerySerializer, CourierRegisterSerializer, CourierUpdateSerializer,
)
from .services import FleetService

logger = logging.getLogger(__name__)


class CourierListView(APIView):
    """
    GET /api/repartidores/?active_only=true
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        query = CourierListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        couriers = FleetService().list_couriers(active_only=query.validated_data['active_only'])
        return no_store(Response(couriers))


class CourierRegisterView(APIView):
    """
    Register a new courier.

    POST /api/repartidores/register/
    {
        "email": "repartidor@fritolay.pe",
        "password": "...",
        "name": "Juan Pérez",
        "phone": "987654321",
        "license_number": "Q12345678"
    }
    """
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = CourierRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = FleetService().register_courier(
            data['email'],
            data['password'],
            data['name'],
            phone=data.get('phone'),
            license_number=data.get('license_number'),
        )
        logger.info(f"[FLEET] Courier {result['user_id']} registered by {request.user.id}")
        return Response(
            {
                'message': 'Repartidor creado exitosamente',
                'userId': result['user_id'],
                'profileId': result['profile_id'],
            },
            status=status.HTTP_201_CREATED,
        )


class CourierDetailView(APIView):
    """
    PATCH  /api/repartidores/<id>/
    DELETE /api/repartidores/<id>/
    """
    permission_classes = [IsAdmin]

    def patch(self, request, courier_id):
        serializer = CourierUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        FleetService().update_courier(str(courier_id), serializer.validated_data)
        return Response({'message': 'Repartidor actualizado exitosamente'})

    def delete(self, request, courier_id):
        result = FleetService().delete_courier(str(courier_id))
        logger.info(f"[FLEET] Delete of courier {courier_id} requested by {request.user.id}")
        return Response(result)

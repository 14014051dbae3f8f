"""
Core App Views - Authentication & User Management API
"""

import logging

from django.utils.cache import add_never_cache_headers
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import UserRole
from .permissions import IsAdmin
from .serializers import (
    LoginSerializer, RefreshTokenSerializer, RegisterSerializer,
    UserListQuerySerializer, UserUpdateSerializer,
)
from .services import AccountService

logger = logging.getLogger(__name__)


def no_store(response: Response) -> Response:
    """Mark a list response as non-cacheable (the dashboard polls it)."""
    add_never_cache_headers(response)
    return response


# ============================================
# AUTHENTICATION
# ============================================

class AdminLoginView(APIView):
    """
    Login endpoint for the admin dashboard.

    POST /api/auth/login/
    {
        "email": "admin@fritolay.pe",
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
            role=UserRole.ADMIN,
        )
        return Response(payload)


class TokenRefreshView(APIView):
    """
    Exchange a refresh token for a new session.

    POST /api/auth/refresh/
    { "refresh_token": "..." }
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AccountService().refresh(serializer.validated_data['refresh_token']))


class AdminRegisterView(APIView):
    """
    Administrator registration.

    POST /api/auth/register/
    { "email": "...", "password": "...", "name": "..." }
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AccountService().register_user(
            data['email'], data['password'], data['name'], role=UserRole.ADMIN,
        )
        return Response(
            {
                'message': 'Administrador creado exitosamente',
                'userId': result['user_id'],
                'profileId': result['profile_id'],
            },
            status=status.HTTP_201_CREATED,
        )


class MeView(APIView):
    """
    Profile of the signed-in user.

    GET /api/auth/me/
    """

    def get(self, request):
        return Response(request.user.profile.to_dict())


# ============================================
# USER MANAGEMENT (admin)
# ============================================

class UserListView(APIView):
    """
    GET /api/users/?role=comerciante
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        query = UserListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        users = AccountService().list_profiles(role=query.validated_data.get('role'))
        return no_store(Response(users))


class UserDetailView(APIView):
    """
    PATCH  /api/users/<id>/   { "role": "repartidor", "isActive": false }
    DELETE /api/users/<id>/
    """
    permission_classes = [IsAdmin]

    def patch(self, request, user_id):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AccountService().update_user(
            str(user_id),
            role=serializer.validated_data.get('role'),
            is_active=serializer.validated_data.get('is_active'),
        )
        logger.info(f"[USERS] User {user_id} updated by {request.user.id}")
        return Response({'message': 'Usuario actualizado'})

    def delete(self, request, user_id):
        AccountService().delete_auth_user(str(user_id))
        logger.info(f"[USERS] User {user_id} deleted by {request.user.id}")
        return Response({'message': 'Usuario eliminado'})

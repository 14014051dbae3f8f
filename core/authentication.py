"""
CORE App - Supabase Session Authentication for DRF

Clients send the Supabase access token they got at login:

    Authorization: Bearer <access_token>

The token is verified by Supabase Auth (auth.get_user) and the caller's
row in user_profiles becomes request.user.
"""

import logging

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from supabase import AuthError

from . import supabase_client
from .gateway import fetch_first
from .models import UserProfile

logger = logging.getLogger(__name__)


class SupabaseUser:
    """Authenticated caller, backed by a user_profiles row."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, profile: UserProfile, access_token: str = ''):
        self.profile = profile
        self.access_token = access_token

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def pk(self) -> str:
        return self.profile.id

    @property
    def email(self) -> str:
        return self.profile.email

    @property
    def role(self) -> str:
        return self.profile.role

    @property
    def is_active(self) -> bool:
        return self.profile.can_sign_in

    def __str__(self):
        return f"{self.profile.name or self.profile.email} ({self.role})"


class SupabaseTokenAuthentication(BaseAuthentication):
    """Bearer-token authentication against Supabase Auth."""

    keyword = 'Bearer'

    def authenticate(self, request):
        auth = get_authorization_header(request).split()

        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise exceptions.AuthenticationFailed('Cabecera de autorización inválida')

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed('Token inválido')

        return self.authenticate_token(token)

    def authenticate_token(self, token: str):
        client = supabase_client.get_admin_client()

        try:
            response = client.auth.get_user(token)
        except AuthError as e:
            logger.info(f"[AUTH] Token rejected: {e}")
            raise exceptions.AuthenticationFailed('Sesión inválida o expirada')

        auth_user = getattr(response, 'user', None) if response else None
        if auth_user is None:
            raise exceptions.AuthenticationFailed('Sesión inválida o expirada')

        row = fetch_first(
            client.table('user_profiles').select('*').eq('id', auth_user.id),
            'fetching profile',
        )
        if row is None:
            logger.warning(f"[AUTH] No profile for auth user {auth_user.id}")
            raise exceptions.AuthenticationFailed('Perfil de usuario no encontrado')

        return SupabaseUser(UserProfile.from_row(row), token), token

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'

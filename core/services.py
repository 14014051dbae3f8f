"""
CORE App - Account Services

Sign-in, registration and profile management over Supabase Auth and the
user_profiles table.

Registration flow:
1. Reject emails that already have an auth user AND a profile
2. Create the auth user (email confirmed, name/role in metadata)
3. Update the profile if a database trigger already created it, else insert
4. If the profile cannot be saved, delete the auth user again
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import AuthError

from . import supabase_client
from .exceptions import (
    AuthenticationError, BackendError, Conflict, Forbidden, InvalidRequest,
)
from .gateway import fetch_first, fetch_rows
from .models import DEFAULT_PREFERENCES, UserProfile, UserRole

logger = logging.getLogger(__name__)

VALID_ROLES = [choice.value for choice in UserRole]

ROLE_REJECTED_MESSAGES = {
    UserRole.ADMIN.value: 'No tienes permisos de administrador',
    UserRole.COURIER.value: 'Este usuario no es un repartidor',
}


def normalize_email(email: str) -> str:
    return (email or '').lower().strip()


def session_payload(session) -> Dict[str, Any]:
    """Tokens handed back to the client after sign-in/refresh."""
    return {
        'access_token': session.access_token,
        'refresh_token': session.refresh_token,
        'expires_at': getattr(session, 'expires_at', None),
        'token_type': 'bearer',
    }


class AccountService:
    """
    Accounts and profiles.

    Uses the service-role client for every table/admin call and a fresh
    anon-key client for password sign-in.
    """

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()

    # ==========================================
    # Profiles
    # ==========================================

    def _profiles(self):
        return self.client.table('user_profiles')

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        row = fetch_first(
            self._profiles().select('*').eq('id', user_id),
            'fetching profile',
        )
        return UserProfile.from_row(row) if row else None

    def list_profiles(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """All profiles newest first, optionally for one role."""
        query = self._profiles().select('*')
        if role:
            query = query.eq('role', role)
        return fetch_rows(
            query.order('created_at', desc=True),
            'fetching users',
        )

    def update_user(
        self,
        user_id: str,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Update role and activation of a user.

        is_active defaults to True when omitted; role is only written when
        it is one of the valid roles.
        """
        update_data: Dict[str, Any] = {
            'is_active': True if is_active is None else is_active,
        }
        if role and role in VALID_ROLES:
            update_data['role'] = role
        elif role:
            logger.info(f"[ACCOUNTS] Ignoring invalid role '{role}' for user {user_id}")

        try:
            fetch_rows(
                self._profiles().update(update_data).eq('id', user_id),
                'updating user',
            )
        except BackendError as e:
            raise BackendError(
                message='No se pudo actualizar el usuario',
                error=e.error, code=e.code,
            ) from e
        return update_data

    def delete_auth_user(self, user_id: str):
        """Delete the Supabase Auth user (the profile row follows by cascade)."""
        try:
            self.client.auth.admin.delete_user(user_id)
        except AuthError as e:
            logger.error(f"[ACCOUNTS] Error deleting auth user {user_id}: {e}")
            raise BackendError(message='Error eliminando usuario', error=str(e)) from e
        logger.info(f"[ACCOUNTS] Auth user deleted: {user_id}")

    # ==========================================
    # Sign-in
    # ==========================================

    def login(self, email: str, password: str, role: str) -> Dict[str, Any]:
        """
        Password sign-in restricted to one role.

        Raises:
            InvalidRequest: missing email/password
            AuthenticationError: bad credentials or no profile
            Forbidden: wrong role or inactive account
        """
        if not email or not password:
            raise InvalidRequest('Email y contraseña son requeridos')

        public_client = supabase_client.get_public_client()
        try:
            auth = public_client.auth.sign_in_with_password({
                'email': normalize_email(email),
                'password': password,
            })
        except AuthError as e:
            logger.info(f"[ACCOUNTS] Sign-in rejected for {normalize_email(email)}: {e}")
            raise AuthenticationError('Credenciales inválidas', error=str(e))

        if not auth or not auth.user or not auth.session:
            raise AuthenticationError('Error al iniciar sesión')

        profile = self.get_profile(auth.user.id)
        if profile is None:
            self._sign_out(public_client)
            raise AuthenticationError('Perfil de usuario no encontrado')

        if profile.role != role:
            self._sign_out(public_client)
            raise Forbidden(ROLE_REJECTED_MESSAGES.get(str(role), 'Rol no autorizado'))

        if not profile.can_sign_in:
            self._sign_out(public_client)
            raise Forbidden('Tu cuenta está desactivada')

        logger.info(f"[ACCOUNTS] {role} signed in: {profile.id}")
        payload = session_payload(auth.session)
        payload['user'] = profile.to_dict()
        return payload

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        if not refresh_token:
            raise InvalidRequest('Refresh token requerido')

        public_client = supabase_client.get_public_client()
        try:
            auth = public_client.auth.refresh_session(refresh_token)
        except AuthError as e:
            raise AuthenticationError('Token inválido o expirado', error=str(e))

        if not auth or not auth.session:
            raise AuthenticationError('Token inválido o expirado')
        return session_payload(auth.session)

    @staticmethod
    def _sign_out(public_client):
        try:
            public_client.auth.sign_out()
        except AuthError as e:
            logger.warning(f"[ACCOUNTS] Sign-out failed: {e}")

    # ==========================================
    # Registration
    # ==========================================

    def register_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create an auth user and its profile.

        Args:
            email, password, name: required credentials
            role: profile role ('admin' or 'repartidor')
            extra_fields: additional profile columns (phone, license_number...)

        Returns:
            {'user_id': ..., 'profile_id': ...}
        """
        if not email or not password or not name:
            raise InvalidRequest('Email, contraseña y nombre son requeridos')

        role = str(role)
        normalized_email = normalize_email(email)
        normalized_name = name.strip()
        logger.info(f"[ACCOUNTS] Registration attempt: {normalized_email} as {role}")

        self._ensure_email_available(normalized_email)

        try:
            response = self.client.auth.admin.create_user({
                'email': normalized_email,
                'password': password,
                'email_confirm': True,
                'user_metadata': {'name': normalized_name, 'role': role},
            })
        except AuthError as e:
            logger.error(f"[ACCOUNTS] Error creating auth user: {e}")
            raise BackendError(
                message=f'Error al crear usuario: {e}',
                error=str(e),
                code=str(getattr(e, 'status', '') or '') or None,
            ) from e

        auth_user = getattr(response, 'user', None)
        if auth_user is None:
            raise BackendError(message='No se pudo crear el usuario')

        logger.info(f"[ACCOUNTS] Auth user created: {auth_user.id}")

        profile_fields = {
            'email': normalized_email,
            'name': normalized_name,
            'role': role,
            'is_active': True,
            'preferences': dict(DEFAULT_PREFERENCES),
        }
        profile_fields.update(extra_fields or {})

        try:
            row = self._save_profile(auth_user.id, profile_fields)
        except BackendError as e:
            self._delete_auth_user_after_failure(auth_user.id)
            raise BackendError(
                message=f'Error al crear perfil: {e.error}',
                error=e.error, code=e.code, hint=e.hint, details=e.details,
            ) from e

        logger.info(f"[ACCOUNTS] Profile saved: {row.get('id')}")
        return {'user_id': auth_user.id, 'profile_id': row.get('id', auth_user.id)}

    def _ensure_email_available(self, email: str):
        """
        Raise Conflict if the email already has an auth user with a profile.

        A failure while checking is logged and registration goes on;
        Supabase Auth still rejects true duplicates.
        """
        try:
            users = self.client.auth.admin.list_users()
            existing = next(
                (u for u in users if (getattr(u, 'email', '') or '').lower() == email),
                None,
            )
            if existing is None:
                return
            profile = fetch_first(
                self._profiles().select('id, email, role').eq('id', existing.id),
                'checking existing profile',
            )
        except (AuthError, BackendError) as e:
            logger.error(f"[ACCOUNTS] Error checking existing user: {e}")
            return

        if profile:
            raise Conflict('Este email ya está registrado')

    def _save_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update the trigger-created profile if any, else insert one."""
        existing = fetch_first(
            self._profiles().select('id').eq('id', user_id),
            'checking profile',
        )
        if existing:
            logger.info(f"[ACCOUNTS] Profile exists (from trigger), updating {user_id}")
            rows = fetch_rows(
                self._profiles().update(fields).eq('id', user_id),
                'updating profile',
            )
        else:
            rows = fetch_rows(
                self._profiles().insert({'id': user_id, **fields}),
                'creating profile',
            )
        return rows[0] if rows else {'id': user_id}

    def _delete_auth_user_after_failure(self, user_id: str):
        try:
            self.client.auth.admin.delete_user(user_id)
            logger.info(f"[ACCOUNTS] Auth user {user_id} deleted after profile failure")
        except AuthError as e:
            logger.error(f"[ACCOUNTS] Error deleting auth user {user_id}: {e}")

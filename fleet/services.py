"""
FLEET App - Services for Courier Management

Admin operations over the repartidor profiles:
- Listing (newest first, optionally only active ones)
- Registration through the shared account flow
- Profile updates restricted to repartidor rows
- Removal: assignments, profile, then the auth user
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import AuthError

from core import supabase_client
from core.exceptions import BackendError, InvalidRequest, NotFound
from core.gateway import fetch_first, fetch_rows
from core.models import UserRole
from core.services import AccountService

logger = logging.getLogger(__name__)


def build_courier_update(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map submitted fields to profile columns.

    Only the keys present in `changes` are written. The name is trimmed;
    an empty phone or license number is stored as null.
    """
    update_data: Dict[str, Any] = {}
    if 'name' in changes:
        update_data['name'] = (changes['name'] or '').strip()
    for key in ('phone', 'license_number'):
        if key in changes:
            update_data[key] = changes[key] or None
    for key in ('is_active', 'phone_verified'):
        if key in changes:
            update_data[key] = changes[key]
    return update_data


class FleetService:
    """Courier (repartidor) management for the admin dashboard."""

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()
        self.accounts = AccountService(self.client)

    def _profiles(self):
        return self.client.table('user_profiles')

    def list_couriers(self, active_only: bool = False) -> List[Dict[str, Any]]:
        query = self._profiles().select('*').eq('role', UserRole.COURIER.value)
        if active_only:
            query = query.or_('is_active.eq.true,is_active.is.null')

        try:
            couriers = fetch_rows(
                query.order('created_at', desc=True),
                'fetching couriers',
            )
        except BackendError as e:
            raise BackendError(
                message='Error al cargar repartidores',
                error=e.error, code=e.code,
            ) from e

        logger.info(f"[FLEET] Found {len(couriers)} couriers")
        return couriers

    def register_courier(
        self,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        license_number: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create the auth user and repartidor profile (phone not yet verified)."""
        return self.accounts.register_user(
            email,
            password,
            name,
            role=UserRole.COURIER,
            extra_fields={
                'phone': phone or None,
                'license_number': license_number or None,
                'phone_verified': False,
            },
        )

    def update_courier(self, courier_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a courier profile.

        Raises:
            InvalidRequest: nothing to update
            NotFound: no repartidor profile with this id
            BackendError: the update was rejected
        """
        update_data = build_courier_update(changes)
        if not update_data:
            raise InvalidRequest('No hay datos para actualizar')

        try:
            rows = fetch_rows(
                self._profiles()
                .update(update_data)
                .eq('id', courier_id)
                .eq('role', UserRole.COURIER.value),
                'updating courier',
            )
        except BackendError as e:
            raise BackendError(
                message='No se pudo actualizar el repartidor',
                error=e.error, code=e.code,
            ) from e

        if not rows:
            raise NotFound('Repartidor no encontrado')

        logger.info(f"[FLEET] Courier {courier_id} updated: {sorted(update_data)}")
        return rows[0]

    def delete_courier(self, courier_id: str) -> Dict[str, Any]:
        """
        Remove a courier completely.

        Assignment cleanup failures are logged and ignored. A failure to
        delete the auth user after the profile is gone is reported as a
        partial success carrying a warning.
        """
        profile = fetch_first(
            self._profiles().select('id, role').eq('id', courier_id),
            'fetching courier',
        )
        if not profile or profile.get('role') != UserRole.COURIER:
            raise NotFound('Usuario no encontrado o no es un repartidor')

        try:
            fetch_rows(
                self.client.table('delivery_assignments').delete().eq('repartidor_id', courier_id),
                'deleting courier assignments',
            )
        except BackendError as e:
            logger.warning(f"[FLEET] Assignments of {courier_id} not deleted: {e.error}")

        try:
            fetch_rows(
                self._profiles().delete().eq('id', courier_id),
                'deleting courier profile',
            )
        except BackendError as e:
            raise BackendError(
                message=f'Error eliminando perfil: {e.error}',
                error=e.error, code=e.code,
            ) from e

        try:
            self.client.auth.admin.delete_user(courier_id)
        except AuthError as e:
            logger.error(f"[FLEET] Auth user {courier_id} not deleted: {e}")
            return {
                'message': 'Perfil eliminado, pero hubo un error eliminando credenciales de autenticación',
                'warning': str(e),
            }

        logger.info(f"[FLEET] Courier removed: {courier_id}")
        return {'message': 'Repartidor eliminado exitosamente'}

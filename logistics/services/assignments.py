"""
LOGISTICS App - Delivery Assignment Service

Courier-side operations on delivery_assignments:
- list / detail with the order, items, address and customer attached
- status updates (assigned -> in_transit -> delivered | failed)
- proof-of-delivery photo upload
- location tracking points
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from django.conf import settings
from storage3.utils import StorageException

from core import supabase_client
from core.exceptions import BackendError, InvalidRequest, NotFound
from core.gateway import fetch_first, fetch_rows, unique
from core.models import now_iso
from logistics.models import (
    VALID_TRANSITIONS, AssignmentStatus, Customer, DeliveryAssignment,
    DeliveryOrder, OrderItem,
)
from logistics.services.addresses import AddressResolver, resolve_address
from logistics.services.orders import OrderLookup, mirror_delivery_status

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = 'all'


class AssignmentService:
    """
    Assignments of one courier.

    Usage:
        service = AssignmentService()
        assignments = service.get_my_assignments(courier_id, status='in_transit')
    """

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()
        self.orders = OrderLookup(self.client)
        self.addresses = AddressResolver(self.client)

    def _assignments(self):
        return self.client.table('delivery_assignments')

    # ==========================================
    # Read
    # ==========================================

    def get_my_assignments(self, courier_id: str, status: Optional[str] = None) -> List[DeliveryAssignment]:
        """
        Assignments of a courier, newest first, with their orders.

        Args:
            courier_id: user_profiles id of the courier
            status: 'all' or one assignment status to keep
        """
        rows = fetch_rows(
            self._assignments().select('*')
            .eq('repartidor_id', courier_id)
            .order('assigned_at', desc=True),
            'fetching assignments',
        )
        if not rows:
            logger.info(f"[ASSIGNMENTS] No assignments for courier {courier_id}")
            return []

        orders = self._load_orders(unique(row.get('order_id') for row in rows))
        assignments = [
            DeliveryAssignment.from_row(row, orders.get(row.get('order_id')))
            for row in rows
        ]

        if status and status != STATUS_FILTER_ALL:
            assignments = [a for a in assignments if a.status == status]
        return assignments

    def get_assignment(self, assignment_id: str, courier_id: Optional[str] = None) -> Optional[DeliveryAssignment]:
        """One assignment with its order; None if missing or owned by another courier."""
        row = self._get_row(assignment_id, courier_id)
        if row is None:
            return None

        order_id = row.get('order_id')
        orders = self._load_orders([order_id]) if order_id else {}
        if order_id and order_id not in orders:
            logger.warning(f"[ASSIGNMENTS] Order {order_id} of assignment {assignment_id} not found")
        return DeliveryAssignment.from_row(row, orders.get(order_id))

    def _get_row(self, assignment_id: str, courier_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        row = fetch_first(
            self._assignments().select('*').eq('id', assignment_id),
            'fetching assignment',
        )
        if row is None:
            return None
        if courier_id and row.get('repartidor_id') != courier_id:
            logger.warning(f"[ASSIGNMENTS] Courier {courier_id} tried to access assignment {assignment_id}")
            return None
        return row

    def _require_row(self, assignment_id: str, courier_id: Optional[str]) -> Dict[str, Any]:
        row = self._get_row(assignment_id, courier_id)
        if row is None:
            raise NotFound('Asignación no encontrada')
        return row

    # ==========================================
    # Order enrichment
    # ==========================================

    def _load_orders(self, order_ids: List[str]) -> Dict[str, DeliveryOrder]:
        """
        Orders (fallback chain), items, addresses and customers in batch.

        A failing order lookup leaves the assignments without order.
        """
        if not order_ids:
            return {}

        try:
            order_rows = self.orders.find_orders(order_ids)
        except BackendError as e:
            if e.is_permission_error:
                logger.error("[ASSIGNMENTS] Permission denied - check RLS policies for delivery_orders")
            logger.error(f"[ASSIGNMENTS] Orders unavailable, returning assignments without order: {e.error}")
            return {}

        items_by_order = self._load_items(order_ids)
        address_rows = self.addresses.load(row.get('delivery_address') for row in order_rows)
        customers = self._load_customers(unique(row.get('created_by') for row in order_rows))

        orders = {}
        for row in order_rows:
            orders[row.get('id')] = DeliveryOrder.from_row(
                row,
                items=items_by_order.get(row.get('id'), []),
                address=resolve_address(row.get('delivery_address'), address_rows),
                customer=customers.get(row.get('created_by')),
            )
        return orders

    def _load_items(self, order_ids: List[str]) -> Dict[str, List[OrderItem]]:
        try:
            rows = fetch_rows(
                self.client.table('order_items').select('*').in_('order_id', order_ids),
                'fetching order items',
            )
        except BackendError as e:
            logger.error(f"[ASSIGNMENTS] Order items unavailable: {e.error}")
            return {}

        items: Dict[str, List[OrderItem]] = {}
        for row in rows:
            items.setdefault(row.get('order_id'), []).append(OrderItem.from_row(row))
        return items

    def _load_customers(self, customer_ids: List[str]) -> Dict[str, Customer]:
        if not customer_ids:
            return {}
        try:
            rows = fetch_rows(
                self.client.table('user_profiles')
                .select('id, name, email, phone')
                .in_('id', customer_ids),
                'fetching customers',
            )
        except BackendError as e:
            logger.warning(f"[ASSIGNMENTS] Customers unavailable: {e.error}")
            return {}
        return {row['id']: Customer.from_row(row) for row in rows}

    # ==========================================
    # Write
    # ==========================================

    def update_assignment_status(
        self,
        assignment_id: str,
        status: str,
        notes: Optional[str] = None,
        courier_id: Optional[str] = None,
    ) -> DeliveryAssignment:
        """
        Move an assignment to a new status and mirror it on the order.

        Raises:
            InvalidRequest: unknown status or transition not allowed
            NotFound: assignment missing or owned by another courier
        """
        if status not in AssignmentStatus.values:
            raise InvalidRequest(f'Estado inválido: {status}')

        row = self._require_row(assignment_id, courier_id)
        current = row.get('status') or AssignmentStatus.ASSIGNED.value
        if status != current and status not in VALID_TRANSITIONS.get(current, []):
            raise InvalidRequest(f'Transición de estado inválida: {current} -> {status}')

        now = now_iso()
        update_data = {'status': status, 'updated_at': now}
        if notes:
            update_data['delivery_notes'] = notes
        if status != current:
            # Re-sending the current status keeps the original timestamps
            if status == AssignmentStatus.IN_TRANSIT:
                update_data['started_at'] = now
            if status in (AssignmentStatus.DELIVERED, AssignmentStatus.FAILED):
                update_data['completed_at'] = now

        try:
            fetch_rows(
                self._assignments().update(update_data).eq('id', assignment_id),
                'updating assignment',
            )
        except BackendError as e:
            raise BackendError(
                message='Error al actualizar la asignación', error=e.error, code=e.code,
            ) from e

        logger.info(f"[ASSIGNMENTS] Assignment {assignment_id}: {current} -> {status}")

        if row.get('order_id'):
            mirror_delivery_status(self.client, row['order_id'], {
                'delivery_status': status,
                'updated_at': now,
            })

        return DeliveryAssignment.from_row({**row, **update_data})

    def upload_delivery_photo(
        self,
        assignment_id: str,
        content: bytes,
        filename: str = '',
        courier_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Store a proof-of-delivery photo and link it to the assignment.

        Returns:
            The public URL, or None if the upload failed.
        """
        self._require_row(assignment_id, courier_id)

        extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'jpg'
        path = f"{settings.DELIVERY_PHOTOS_FOLDER}/{assignment_id}_{int(time.time() * 1000)}.{extension}"
        bucket = self.client.storage.from_(settings.DELIVERY_PHOTOS_BUCKET)

        try:
            bucket.upload(path, content, file_options={'content-type': f'image/{extension}'})
        except (StorageException, httpx.HTTPError) as e:
            logger.error(f"[ASSIGNMENTS] Error uploading photo for {assignment_id}: {e}")
            return None

        public_url = bucket.get_public_url(path)

        try:
            fetch_rows(
                self._assignments().update({'delivery_photo_url': public_url}).eq('id', assignment_id),
                'saving photo url',
            )
        except BackendError as e:
            logger.error(f"[ASSIGNMENTS] Photo stored but not linked to {assignment_id}: {e.error}")

        logger.info(f"[ASSIGNMENTS] Photo uploaded for {assignment_id}: {path}")
        return public_url

    def track_location(
        self,
        assignment_id: str,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
        courier_id: Optional[str] = None,
    ) -> bool:
        """Insert a delivery_tracking point. Returns False if it was not saved."""
        self._require_row(assignment_id, courier_id)

        try:
            fetch_rows(
                self.client.table('delivery_tracking').insert({
                    'assignment_id': assignment_id,
                    'latitude': latitude,
                    'longitude': longitude,
                    'accuracy': accuracy,
                    'timestamp': now_iso(),
                }),
                'tracking location',
            )
        except BackendError as e:
            logger.error(f"[TRACKING] Error tracking location for {assignment_id}: {e.error}")
            return False
        return True

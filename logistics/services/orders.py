"""
LOGISTICS App - Order Service for FRITOLAY

Handles order lookup and the admin side of courier assignment.

Order lookup (fallback chain):
1. delivery_orders
2. If that query fails, the failure is reported to the caller
3. If it returns nothing, the legacy `orders` table, normalised
   into the delivery_orders shape
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from core import supabase_client
from core.exceptions import BackendError, InvalidRequest, NotFound
from core.gateway import fetch_first, fetch_rows, unique
from core.models import UserRole, now_iso, to_decimal
from logistics.models import AssignmentStatus, DeliveryStatus, item_price, normalize_legacy_order
from logistics.services.addresses import AddressResolver, format_admin_address

logger = logging.getLogger(__name__)

ORDER_LIST_FIELDS = [
    'delivery_address', 'delivery_date', 'delivery_time_slot',
    'payment_method', 'notes', 'created_at', 'updated_at',
]


# ============================================
# TOTALS
# ============================================

def compute_item_totals(items: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Decimal]]:
    """
    Aggregate order_items per order.

    Returns:
        {order_id: {'total': Σ quantity × price, 'count': Σ quantity}}
    """
    totals: Dict[str, Dict[str, Decimal]] = {}
    for item in items:
        current = totals.setdefault(item.get('order_id'), {'total': Decimal('0'), 'count': Decimal('0')})
        quantity = to_decimal(item.get('quantity'))
        current['total'] += quantity * item_price(item)
        current['count'] += quantity
    return totals


def as_number(value: Decimal):
    """JSON number for a Decimal: int when integral."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# ============================================
# FALLBACK CHAIN
# ============================================

class OrderLookup:
    """Finds orders in delivery_orders, then in the legacy orders table."""

    def __init__(self, client):
        self.client = client

    def find_orders(self, order_ids: List[str]) -> List[Dict[str, Any]]:
        """
        Batch lookup.

        Raises:
            BackendError: if the delivery_orders (or legacy) query fails
        """
        if not order_ids:
            return []

        rows = fetch_rows(
            self.client.table('delivery_orders').select('*').in_('id', order_ids),
            'fetching delivery_orders',
        )
        if rows:
            return rows

        legacy = fetch_rows(
            self.client.table('orders').select('*').in_('id', order_ids),
            'fetching orders',
        )
        if legacy:
            logger.info(f"[ORDERS] {len(legacy)} orders found in legacy table")
        return [normalize_legacy_order(row) for row in legacy]

    def find_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Single lookup; None when neither table has the order."""
        row = fetch_first(
            self.client.table('delivery_orders').select('*').eq('id', order_id),
            'fetching delivery_order',
        )
        if row:
            return row

        legacy = fetch_first(
            self.client.table('orders').select('*').eq('id', order_id),
            'fetching order',
        )
        if legacy is None:
            logger.warning(f"[ORDERS] Order {order_id} not found in delivery_orders nor orders")
            return None
        return normalize_legacy_order(legacy)


def mirror_delivery_status(client, order_id: str, fields: Dict[str, Any]) -> bool:
    """
    Copy assignment state onto delivery_orders.

    Failures are logged only: the assignment change has already been saved.
    """
    try:
        fetch_rows(
            client.table('delivery_orders').update(fields).eq('id', order_id),
            'updating delivery_orders status',
        )
    except BackendError as e:
        logger.error(f"[ORDERS] Could not mirror status on order {order_id}: {e.error}")
        return False
    return True


# ============================================
# ADMIN ORDER SERVICE
# ============================================

class OrderService:
    """Admin dashboard order operations."""

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()
        self.lookup = OrderLookup(self.client)
        self.addresses = AddressResolver(self.client)

    def _load_items(self, order_ids: List[str], columns: str = '*') -> List[Dict[str, Any]]:
        try:
            return fetch_rows(
                self.client.table('order_items').select(columns).in_('order_id', order_ids),
                'fetching order items',
            )
        except BackendError as e:
            logger.warning(f"[ORDERS] Order items unavailable: {e.error}")
            return []

    def list_orders(self) -> List[Dict[str, Any]]:
        """All delivery_orders newest first, with totals computed from items."""
        rows = fetch_rows(
            self.client.table('delivery_orders').select('*').order('created_at', desc=True),
            'fetching orders',
        )

        orders = []
        for row in rows:
            order = {
                'id': row.get('id'),
                'user_id': row.get('created_by'),
                'status': row.get('status'),
                'delivery_status': row.get('delivery_status'),
                'total_amount': row.get('total') or 0,
            }
            order.update({name: row.get(name) for name in ORDER_LIST_FIELDS})
            orders.append(order)

        order_ids = [order['id'] for order in orders]
        if order_ids:
            totals = compute_item_totals(self._load_items(order_ids, 'order_id, quantity, price'))
            for order in orders:
                data = totals.get(order['id'])
                if data:
                    order['calculatedTotal'] = as_number(data['total'])
                    order['itemCount'] = as_number(data['count'])

        return orders

    def get_order_detail(self, order_id: str) -> Dict[str, Any]:
        """
        Order with items, products, customer, address and assignment.

        Raises:
            NotFound: the order is in neither table
        """
        row = self.lookup.find_order(order_id)
        if row is None:
            raise NotFound('Pedido no encontrado')

        order = dict(row)
        order.setdefault('user_id', row.get('created_by'))
        order.setdefault('total_amount', row.get('total'))

        items = self._load_items([order_id])
        products = self._load_products(unique(item.get('product_id') for item in items))

        detailed_items = []
        calculated_total = Decimal('0')
        for item in items:
            subtotal = to_decimal(item.get('quantity')) * item_price(item)
            calculated_total += subtotal
            detailed_items.append({
                **item,
                'product': products.get(item.get('product_id')),
                'subtotal': as_number(subtotal),
            })

        address_value = row.get('delivery_address')
        address_row = self.addresses.load_one(address_value).get(address_value)

        return {
            'order': order,
            'items': detailed_items,
            'calculatedTotal': as_number(calculated_total),
            'customer': self._load_profile(order.get('user_id'), 'name, email, phone'),
            'deliveryAddress': format_admin_address(address_value, address_row),
            'assignment': self._load_assignment(order_id),
        }

    def _load_products(self, product_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not product_ids:
            return {}
        try:
            rows = fetch_rows(
                self.client.table('products')
                .select('id, name, brand, image, category')
                .in_('id', product_ids),
                'fetching products',
            )
        except BackendError as e:
            logger.warning(f"[ORDERS] Products unavailable: {e.error}")
            return {}
        return {row['id']: row for row in rows}

    def _load_profile(self, user_id: Optional[str], columns: str) -> Optional[Dict[str, Any]]:
        if not user_id:
            return None
        try:
            return fetch_first(
                self.client.table('user_profiles').select(columns).eq('id', user_id),
                'fetching profile',
            )
        except BackendError as e:
            logger.warning(f"[ORDERS] Profile {user_id} unavailable: {e.error}")
            return None

    def _load_assignment(self, order_id: str) -> Optional[Dict[str, Any]]:
        try:
            assignment = fetch_first(
                self.client.table('delivery_assignments').select('*').eq('order_id', order_id),
                'fetching assignment',
            )
        except BackendError as e:
            logger.warning(f"[ORDERS] Assignment of order {order_id} unavailable: {e.error}")
            return None
        if not assignment or not assignment.get('repartidor_id'):
            return assignment

        courier = self._load_profile(assignment['repartidor_id'], 'id, name, email, phone')
        if courier:
            assignment['repartidor'] = courier
        return assignment

    # ==========================================
    # Assignment (admin)
    # ==========================================

    def assign(self, order_id: str, repartidor_id: str) -> Dict[str, Any]:
        """
        Assign (or re-assign) an order to a courier.

        Raises:
            InvalidRequest: missing ids, user is not an active courier
            NotFound: order or courier does not exist
        """
        if not order_id or not repartidor_id:
            raise InvalidRequest('order_id y repartidor_id son requeridos')

        order = fetch_first(
            self.client.table('delivery_orders').select('id, delivery_status').eq('id', order_id),
            'fetching order',
        )
        if order is None:
            raise NotFound('Pedido no encontrado')

        courier = fetch_first(
            self.client.table('user_profiles').select('id, role, is_active').eq('id', repartidor_id),
            'fetching courier',
        )
        if courier is None:
            raise NotFound('Repartidor no encontrado')
        if courier.get('role') != UserRole.COURIER:
            raise InvalidRequest('El usuario no es un repartidor')
        if not courier.get('is_active'):
            raise InvalidRequest('El repartidor está inactivo')

        existing = fetch_first(
            self.client.table('delivery_assignments').select('id, repartidor_id').eq('order_id', order_id),
            'fetching existing assignment',
        )

        now = now_iso()
        assignment_fields = {
            'repartidor_id': repartidor_id,
            'assigned_at': now,
            'status': AssignmentStatus.ASSIGNED.value,
            'updated_at': now,
        }
        table = self.client.table('delivery_assignments')
        try:
            if existing:
                fetch_rows(table.update(assignment_fields).eq('id', existing['id']), 'updating assignment')
                logger.info(
                    f"[ASSIGN] Order {order_id} re-assigned "
                    f"{existing.get('repartidor_id')} -> {repartidor_id}"
                )
            else:
                fetch_rows(
                    table.insert({'order_id': order_id, 'created_at': now, **assignment_fields}),
                    'creating assignment',
                )
                logger.info(f"[ASSIGN] Order {order_id} assigned to {repartidor_id}")
        except BackendError as e:
            message = 'Error al actualizar la asignación' if existing else 'Error al crear la asignación'
            raise BackendError(message=message, error=e.error, code=e.code) from e

        mirror_delivery_status(self.client, order_id, {
            'delivery_status': DeliveryStatus.ASSIGNED.value,
            'assigned_at': now,
            'updated_at': now,
        })

        return {
            'message': 'Pedido asignado exitosamente',
            'order_id': order_id,
            'repartidor_id': repartidor_id,
        }

    def unassign(self, order_id: str) -> Dict[str, Any]:
        """Remove the order's assignment and put the order back to pending."""
        if not order_id:
            raise InvalidRequest('order_id es requerido')

        try:
            fetch_rows(
                self.client.table('delivery_assignments').delete().eq('order_id', order_id),
                'deleting assignment',
            )
        except BackendError as e:
            raise BackendError(
                message='Error al eliminar la asignación', error=e.error, code=e.code,
            ) from e

        mirror_delivery_status(self.client, order_id, {
            'delivery_status': DeliveryStatus.PENDING.value,
            'assigned_at': None,
            'updated_at': now_iso(),
        })
        logger.info(f"[ASSIGN] Order {order_id} unassigned")
        return {'message': 'Asignación eliminada exitosamente'}

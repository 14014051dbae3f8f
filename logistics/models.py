"""
LOGISTICS App - Orders & Delivery Assignments for FRITOLAY

Records for rows of the Supabase tables:
- delivery_assignments: one courier assigned to one order
- delivery_orders (and the legacy `orders` table)
- order_items

Rows are coerced and null-guarded only; no business logic lives here.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import models

from core.models import to_decimal, to_optional_str


class AssignmentStatus(models.TextChoices):
    """Delivery assignment status enumeration."""
    ASSIGNED = 'assigned', 'Asignado'
    IN_TRANSIT = 'in_transit', 'En camino'
    DELIVERED = 'delivered', 'Entregado'
    FAILED = 'failed', 'Fallido'


class DeliveryStatus(models.TextChoices):
    """delivery_orders.delivery_status enumeration."""
    PENDING = 'pending', 'Pendiente'
    ASSIGNED = 'assigned', 'Asignado'
    IN_TRANSIT = 'in_transit', 'En camino'
    DELIVERED = 'delivered', 'Entregado'
    FAILED = 'failed', 'Fallido'
    CANCELLED = 'cancelled', 'Cancelado'


# Allowed assignment transitions, keyed by stored value.
# Re-sending the current status is accepted.
VALID_TRANSITIONS = {
    AssignmentStatus.ASSIGNED.value: [AssignmentStatus.IN_TRANSIT, AssignmentStatus.FAILED],
    AssignmentStatus.IN_TRANSIT.value: [AssignmentStatus.DELIVERED, AssignmentStatus.FAILED],
    AssignmentStatus.DELIVERED.value: [],
    AssignmentStatus.FAILED.value: [],
}

# Order statuses that count as completed revenue
COMPLETED_ORDER_STATUSES = ['completed', 'delivered']
CANCELLED_ORDER_STATUS = 'cancelled'

ADDRESS_ID_LENGTH = 36


def is_address_id(value: Any) -> bool:
    """delivery_address holds a delivery_addresses id when it is a 36-char string."""
    return isinstance(value, str) and len(value) == ADDRESS_ID_LENGTH


def short_order_number(order_id: Any) -> str:
    return str(order_id or '')[:8]


def item_price(row: Dict[str, Any]) -> Decimal:
    """Unit price of an order_items row; older rows only have unit_price."""
    return to_decimal(row.get('price') or row.get('unit_price'))


def normalize_legacy_order(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reshape a legacy `orders` row into the delivery_orders shape.

    total_amount becomes total, user_id becomes created_by and the
    delivery status is derived from the order status.
    """
    status = row.get('status')
    if status == DeliveryStatus.DELIVERED:
        delivery_status = DeliveryStatus.DELIVERED.value
    elif status == DeliveryStatus.CANCELLED:
        delivery_status = DeliveryStatus.CANCELLED.value
    else:
        delivery_status = DeliveryStatus.PENDING.value

    normalized = dict(row)
    normalized.update({
        'order_number': short_order_number(row.get('id')),
        'total': row.get('total_amount') or 0,
        'delivery_status': delivery_status,
        'created_by': row.get('user_id'),
    })
    return normalized


# ===========================================
# RECORDS
# ===========================================

@dataclass
class OrderItem:
    """A line of order_items."""

    id: str
    product_name: str = 'Producto'
    product_brand: Optional[str] = None
    quantity: Decimal = Decimal('0')
    price: Decimal = Decimal('0')
    subtotal: Decimal = Decimal('0')

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'OrderItem':
        quantity = to_decimal(row.get('quantity'))
        price = item_price(row)
        stored_subtotal = to_decimal(row.get('subtotal'))
        return cls(
            id=str(row.get('id')),
            product_name=row.get('product_name') or 'Producto',
            product_brand=to_optional_str(row.get('product_brand')),
            quantity=quantity,
            price=price,
            subtotal=stored_subtotal or quantity * price,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product_name': self.product_name,
            'product_brand': self.product_brand,
            'quantity': float(self.quantity),
            'price': float(self.price),
            'subtotal': float(self.subtotal),
        }


@dataclass
class Customer:
    name: str = ''
    email: str = ''
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Customer':
        return cls(
            name=row.get('name') or '',
            email=row.get('email') or '',
            phone=to_optional_str(row.get('phone')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'email': self.email, 'phone': self.phone}


@dataclass
class DeliveryOrder:
    """An order as seen by the courier app, address already resolved."""

    id: str
    order_number: str
    status: Optional[str] = None
    total: Decimal = Decimal('0')
    delivery_address: str = ''
    delivery_zone: str = ''
    delivery_reference: str = ''
    delivery_date: Optional[str] = None
    delivery_time_slot: Optional[str] = None
    notes: Optional[str] = None
    delivery_status: str = DeliveryStatus.PENDING.value
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)
    customer: Optional[Customer] = None

    @classmethod
    def from_row(
        cls,
        row: Dict[str, Any],
        items: Optional[List[OrderItem]] = None,
        address: Optional[Dict[str, str]] = None,
        customer: Optional[Customer] = None,
    ) -> 'DeliveryOrder':
        address = address or {}
        return cls(
            id=str(row.get('id')),
            order_number=row.get('order_number') or short_order_number(row.get('id')),
            status=row.get('status'),
            total=to_decimal(row.get('total')),
            delivery_address=address.get('address', ''),
            delivery_zone=address.get('zone', ''),
            delivery_reference=address.get('reference', ''),
            delivery_date=row.get('delivery_date'),
            delivery_time_slot=row.get('delivery_time_slot'),
            notes=row.get('notes'),
            delivery_status=row.get('delivery_status') or DeliveryStatus.PENDING.value,
            payment_method=row.get('payment_method'),
            payment_status=row.get('payment_status'),
            created_at=row.get('created_at'),
            items=items or [],
            customer=customer,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'order_number': self.order_number,
            'status': self.status,
            'total': float(self.total),
            'delivery_address': self.delivery_address,
            'delivery_zone': self.delivery_zone,
            'delivery_reference': self.delivery_reference,
            'delivery_date': self.delivery_date,
            'delivery_time_slot': self.delivery_time_slot,
            'notes': self.notes,
            'delivery_status': self.delivery_status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'created_at': self.created_at,
            'items': [item.to_dict() for item in self.items],
            'customer': self.customer.to_dict() if self.customer else None,
        }


@dataclass
class DeliveryAssignment:
    """A row of delivery_assignments, optionally with its order."""

    id: str
    order_id: str
    repartidor_id: str
    status: str = AssignmentStatus.ASSIGNED.value
    assigned_at: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    delivery_notes: Optional[str] = None
    delivery_photo_url: Optional[str] = None
    client_signature_url: Optional[str] = None
    rating: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    order: Optional[DeliveryOrder] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any], order: Optional[DeliveryOrder] = None) -> 'DeliveryAssignment':
        rating = row.get('rating')
        return cls(
            id=str(row.get('id')),
            order_id=str(row.get('order_id') or ''),
            repartidor_id=str(row.get('repartidor_id') or ''),
            status=row.get('status') or AssignmentStatus.ASSIGNED.value,
            assigned_at=row.get('assigned_at'),
            started_at=row.get('started_at'),
            completed_at=row.get('completed_at'),
            delivery_notes=row.get('delivery_notes'),
            delivery_photo_url=row.get('delivery_photo_url'),
            client_signature_url=row.get('client_signature_url'),
            rating=float(rating) if rating is not None else None,
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
            order=order,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'order_id': self.order_id,
            'repartidor_id': self.repartidor_id,
            'status': self.status,
            'assigned_at': self.assigned_at,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
            'delivery_notes': self.delivery_notes,
            'delivery_photo_url': self.delivery_photo_url,
            'client_signature_url': self.client_signature_url,
            'rating': self.rating,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'order': self.order.to_dict() if self.order else None,
        }

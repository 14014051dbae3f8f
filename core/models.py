"""
CORE App - User Roles & Profile Records

Rows live in the Supabase `user_profiles` table. This module only holds
the role enumeration, the profile record built from a row, and the
coercion helpers shared by every record type.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from django.db import models
from django.utils import timezone


class UserRole(models.TextChoices):
    """User role enumeration (values stored in user_profiles.role)."""
    ADMIN = 'admin', 'Administrador'
    COURIER = 'repartidor', 'Repartidor'
    MERCHANT = 'comerciante', 'Comerciante'


DEFAULT_PREFERENCES = {'notifications': True, 'theme': 'auto'}


# ===========================================
# COERCION HELPERS
# ===========================================

def to_decimal(value: Any) -> Decimal:
    """Numeric coercion for money/quantities; anything unparsable is 0."""
    if value is None or value == '' or isinstance(value, bool):
        return Decimal('0')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal('0')
    if not result.is_finite():
        return Decimal('0')
    return result


def to_optional_str(value: Any) -> Optional[str]:
    """Empty strings become None."""
    if value is None:
        return None
    text = str(value)
    return text if text else None


def is_active_flag(value: Any) -> bool:
    """is_active semantics of the dashboard: null counts as active."""
    return value is not False


def now_iso() -> str:
    """Current UTC time as the ISO string stored in timestamp columns."""
    return timezone.now().isoformat()


@dataclass
class UserProfile:
    """A row of user_profiles."""

    id: str
    email: str = ''
    name: str = ''
    role: str = ''
    is_active: Optional[bool] = True
    phone: Optional[str] = None
    license_number: Optional[str] = None
    phone_verified: bool = False
    profile_image_url: Optional[str] = None
    created_at: Optional[str] = None
    preferences: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'UserProfile':
        return cls(
            id=str(row.get('id')),
            email=row.get('email') or '',
            name=row.get('name') or '',
            role=row.get('role') or '',
            is_active=row.get('is_active'),
            phone=to_optional_str(row.get('phone')),
            license_number=to_optional_str(row.get('license_number')),
            phone_verified=bool(row.get('phone_verified')),
            profile_image_url=to_optional_str(row.get('profile_image_url')),
            created_at=row.get('created_at'),
            preferences=row.get('preferences') or {},
        )

    @property
    def can_sign_in(self) -> bool:
        """Sign-in requires an explicit is_active=true."""
        return self.is_active is True

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_courier(self) -> bool:
        return self.role == UserRole.COURIER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'is_active': self.is_active,
            'phone': self.phone,
            'license_number': self.license_number,
            'phone_verified': self.phone_verified,
            'profile_image_url': self.profile_image_url,
            'created_at': self.created_at,
        }

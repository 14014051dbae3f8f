"""
LOGISTICS App - Delivery Address Resolution

An order's delivery_address is either free text or the id of a
delivery_addresses row. Ids are resolved to address/zone/reference;
an id with no matching row is shown as-is.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from core.exceptions import BackendError
from core.gateway import fetch_first, fetch_rows, unique
from logistics.models import is_address_id

logger = logging.getLogger(__name__)

EMPTY_ADDRESS = {'address': '', 'zone': '', 'reference': ''}


def _from_row(row: Dict[str, Any]) -> Dict[str, str]:
    return {
        'address': row.get('address') or '',
        'zone': row.get('zone') or '',
        'reference': row.get('reference') or '',
    }


def resolve_address(value: Any, address_rows: Dict[str, Dict[str, Any]]) -> Dict[str, str]:
    """
    Resolve one delivery_address value against preloaded address rows.

    Returns:
        {'address', 'zone', 'reference'} (empty strings when unknown)
    """
    if not value:
        return dict(EMPTY_ADDRESS)
    if is_address_id(value) and value in address_rows:
        return _from_row(address_rows[value])
    return {'address': str(value), 'zone': '', 'reference': ''}


def format_admin_address(value: Any, row: Optional[Dict[str, Any]] = None) -> str:
    """Dashboard text: '<address> (Zona: <zone>) - <reference>'."""
    text = str(value or '')
    if not row:
        return text
    text = row.get('address') or text
    if row.get('zone'):
        text += f" (Zona: {row['zone']})"
    if row.get('reference'):
        text += f" - {row['reference']}"
    return text


class AddressResolver:
    """Looks up delivery_addresses rows for address ids."""

    def __init__(self, client):
        self.client = client

    def load(self, values: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
        """
        Load every distinct address id among values with a single query.

        Lookup failures are logged; the raw values are then shown instead.
        """
        address_ids = unique(value for value in values if is_address_id(value))
        if not address_ids:
            return {}

        try:
            rows = fetch_rows(
                self.client.table('delivery_addresses')
                .select('id, address, zone, reference')
                .in_('id', address_ids),
                'fetching delivery addresses',
            )
        except BackendError as e:
            logger.warning(f"[ADDRESSES] Could not resolve {len(address_ids)} address ids: {e.error}")
            return {}
        return {row['id']: row for row in rows}

    def load_one(self, value: Any) -> Dict[str, Dict[str, Any]]:
        if not is_address_id(value):
            return {}
        try:
            row = fetch_first(
                self.client.table('delivery_addresses')
                .select('id, address, zone, reference')
                .eq('id', value),
                'fetching delivery address',
            )
        except BackendError as e:
            logger.warning(f"[ADDRESSES] Could not resolve address {value}: {e.error}")
            return {}
        return {value: row} if row else {}

    def resolve(self, value: Any) -> Dict[str, str]:
        return resolve_address(value, self.load_one(value))

"""
CATALOG App - Product Services

Admin management of the `products` table. Search and category
filtering run over the fetched list, as the dashboard filters it.
"""

import logging
from typing import Any, Dict, List, Optional

from django.conf import settings

from core import supabase_client
from core.exceptions import BackendError, InvalidRequest, NotFound
from core.gateway import fetch_first, fetch_rows, unique
from core.models import to_decimal
from logistics.services.orders import as_number

logger = logging.getLogger(__name__)

PRODUCT_DEFAULTS = {
    'brand': 'Frito Lay',
    'stock': 0,
    'is_available': True,
    'min_order_quantity': 1,
    'max_order_quantity': 100,
}

MONEY_FIELDS = ['price', 'wholesale_price']


def matches_search(product: Dict[str, Any], term: str) -> bool:
    """Case-insensitive match on name, brand or category."""
    term = term.lower()
    return any(
        term in (product.get(key) or '').lower()
        for key in ('name', 'brand', 'category')
    )


def is_low_stock(product: Dict[str, Any], threshold: Optional[int] = None) -> bool:
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    return (product.get('stock') or 0) < threshold


def clean_tags(tags) -> List[str]:
    """Trimmed tags, blanks dropped."""
    return [str(tag).strip() for tag in tags or [] if str(tag).strip()]


class CatalogService:
    """Product CRUD for the admin dashboard."""

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()

    def _products(self):
        return self.client.table('products')

    # ==========================================
    # Queries
    # ==========================================

    def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Products newest first, optionally filtered."""
        try:
            products = fetch_rows(
                self._products().select('*').order('created_at', desc=True),
                'fetching products',
            )
        except BackendError as e:
            raise BackendError(message='Error al obtener productos', error=e.error, code=e.code) from e

        if search and search.strip():
            products = [p for p in products if matches_search(p, search.strip())]
        if category:
            products = [p for p in products if p.get('category') == category]
        return products

    def get_product(self, product_id: str) -> Dict[str, Any]:
        product = fetch_first(
            self._products().select('*').eq('id', product_id),
            'fetching product',
        )
        if product is None:
            raise NotFound('Producto no encontrado')
        return product

    def list_categories(self, products: Optional[List[Dict[str, Any]]] = None) -> List[str]:
        if products is None:
            products = self.list_products()
        return unique(p.get('category') for p in products)

    def low_stock(self, products: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        if products is None:
            products = self.list_products()
        return [p for p in products if is_low_stock(p)]

    # ==========================================
    # Mutations
    # ==========================================

    @staticmethod
    def _prepare(data: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        """
        Validate and normalise a product payload.

        On create the name and a positive price are required and the
        defaults fill the missing fields. On update only the given keys
        are validated.
        """
        payload = dict(data)
        payload.pop('id', None)

        if creating or 'name' in payload:
            name = (payload.get('name') or '').strip()
            if not name:
                raise InvalidRequest('El nombre del producto es requerido')
            payload['name'] = name

        if creating or 'price' in payload:
            if to_decimal(payload.get('price')) <= 0:
                raise InvalidRequest('El precio debe ser mayor a 0')

        for key in MONEY_FIELDS:
            if payload.get(key) is not None:
                payload[key] = as_number(to_decimal(payload[key]))

        if 'tags' in payload:
            payload['tags'] = clean_tags(payload['tags'])

        if creating:
            for key, value in PRODUCT_DEFAULTS.items():
                payload.setdefault(key, value)
            payload.setdefault('tags', [])
        return payload

    def create_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._prepare(data, creating=True)
        try:
            rows = fetch_rows(self._products().insert(payload), 'creating product')
        except BackendError as e:
            raise BackendError(message='Error al crear producto', error=e.error, code=e.code) from e

        product = rows[0] if rows else payload
        logger.info(f"[CATALOG] Product created: {product.get('id')} ({payload['name']})")
        return product

    def update_product(self, product_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        if not product_id:
            raise InvalidRequest('ID de producto requerido')

        payload = self._prepare(data, creating=False)
        if not payload:
            raise InvalidRequest('No hay datos para actualizar')

        try:
            rows = fetch_rows(
                self._products().update(payload).eq('id', product_id),
                'updating product',
            )
        except BackendError as e:
            raise BackendError(message='Error al actualizar producto', error=e.error, code=e.code) from e

        if not rows:
            raise NotFound('Producto no encontrado')
        logger.info(f"[CATALOG] Product updated: {product_id}")
        return rows[0]

    def delete_product(self, product_id: str):
        if not product_id:
            raise InvalidRequest('ID de producto requerido')

        try:
            fetch_rows(self._products().delete().eq('id', product_id), 'deleting product')
        except BackendError as e:
            raise BackendError(message='Error al eliminar producto', error=e.error, code=e.code) from e
        logger.info(f"[CATALOG] Product deleted: {product_id}")

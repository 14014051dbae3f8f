"""
REPORTS App - Dashboard Metrics & Period Reports

Figures for the admin dashboard home and the "Reportes" page, computed
from delivery_orders / order_items.

Report windows are built in local time (settings.TIME_ZONE):
- week: Monday 00:00 to Sunday 23:59:59
- month: calendar month
- year: calendar year
An offset of N moves the window N periods back.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from django.db import models
from django.utils import timezone

from catalog.services import is_low_stock
from core import supabase_client
from core.exceptions import BackendError
from core.gateway import count_rows, fetch_rows
from core.models import UserRole, to_decimal
from logistics.models import CANCELLED_ORDER_STATUS, COMPLETED_ORDER_STATUSES, item_price
from logistics.services.orders import as_number, compute_item_totals

logger = logging.getLogger(__name__)

ACTIVE_FILTER = 'is_active.eq.true,is_active.is.null'

MONTH_NAMES = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
]
MONTH_ABBREVIATIONS = ['Ene', 'Feb', 'Mar', 'Abr', 'May', 'Jun', 'Jul', 'Ago', 'Sep', 'Oct', 'Nov', 'Dic']


class ReportPeriod(models.TextChoices):
    WEEK = 'week', 'Semana'
    MONTH = 'month', 'Mes'
    YEAR = 'year', 'Año'


# ===========================================
# PERIOD WINDOWS
# ===========================================

@dataclass
class PeriodWindow:
    period: str
    offset: int
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        if self.period == ReportPeriod.WEEK:
            if self.offset == 0:
                return 'Esta semana'
            if self.offset == 1:
                return 'Semana pasada'
            return f'{self.start.day}/{self.start.month} - {self.end.day}/{self.end.month}'
        if self.period == ReportPeriod.MONTH:
            return f'{MONTH_NAMES[self.start.month - 1].capitalize()} de {self.start.year}'
        return str(self.start.year)

    def bucket_keys(self) -> List[str]:
        """Chart buckets in display order."""
        if self.period == ReportPeriod.WEEK:
            return [bucket_key(self.start + timedelta(days=i), self.period) for i in range(7)]
        if self.period == ReportPeriod.MONTH:
            return [str(day) for day in range(1, self.end.day + 1)]
        return list(MONTH_ABBREVIATIONS)

    def query_bounds(self):
        """Window bounds as UTC ISO strings for created_at filters."""
        return (
            self.start.astimezone(dt_timezone.utc).isoformat(),
            self.end.astimezone(dt_timezone.utc).isoformat(),
        )


def period_window(period: str, offset: int = 0, now: Optional[datetime] = None) -> PeriodWindow:
    # Bounds are built from local dates so each one gets its own UTC offset
    today = timezone.localtime(now).date()

    if period == ReportPeriod.WEEK:
        first_day = today - timedelta(days=today.weekday(), weeks=offset)
        last_day = first_day + timedelta(days=6)
    elif period == ReportPeriod.MONTH:
        first_day = today.replace(day=1) - relativedelta(months=offset)
        last_day = first_day + relativedelta(months=1, days=-1)
    else:
        first_day = date(today.year - offset, 1, 1)
        last_day = date(first_day.year, 12, 31)

    return PeriodWindow(
        period=str(period),
        offset=offset,
        start=timezone.make_aware(datetime.combine(first_day, time.min)),
        end=timezone.make_aware(datetime.combine(last_day, time.max)),
    )


def bucket_key(moment: datetime, period: str) -> str:
    if period == ReportPeriod.WEEK:
        return f'{moment.day}/{moment.month}'
    if period == ReportPeriod.MONTH:
        return str(moment.day)
    return MONTH_ABBREVIATIONS[moment.month - 1]


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Backend timestamp to local time; naive values are taken as UTC."""
    if not value:
        return None
    try:
        moment = date_parser.isoparse(str(value))
    except ValueError:
        logger.warning(f"[REPORTS] Unparsable timestamp: {value}")
        return None
    if timezone.is_naive(moment):
        moment = moment.replace(tzinfo=dt_timezone.utc)
    return timezone.localtime(moment)


def growth(current: Decimal, previous: Decimal) -> float:
    """Percentage change; 0 when there is no previous value."""
    if previous <= 0:
        return 0
    return round(float((current - previous) / previous * 100), 1)


# ===========================================
# DASHBOARD METRICS
# ===========================================

class DashboardMetricsService:
    """Headline numbers for the admin dashboard home."""

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()

    def _count(self, query, action: str) -> int:
        try:
            return count_rows(query, action)
        except BackendError:
            return 0

    def _order_counts(self, table: str):
        total = count_rows(
            self.client.table(table).select('id', count='exact').neq('status', CANCELLED_ORDER_STATUS),
            f'counting {table}',
        )
        completed = fetch_rows(
            self.client.table(table)
            .select('id')
            .in_('status', COMPLETED_ORDER_STATUSES)
            .neq('status', CANCELLED_ORDER_STATUS),
            f'fetching completed {table}',
        )
        return total, [row['id'] for row in completed]

    def _load_orders(self):
        """Order count and completed ids, falling back to the legacy table."""
        try:
            total, completed_ids = self._order_counts('delivery_orders')
            return total, completed_ids, 'delivery_orders'
        except BackendError as e:
            logger.warning(f"[REPORTS] delivery_orders unavailable, falling back to orders: {e.error}")

        try:
            total, completed_ids = self._order_counts('orders')
        except BackendError:
            return 0, [], 'orders'
        return total, completed_ids, 'orders'

    def _revenue(self, completed_ids: List[str]) -> Decimal:
        """Σ quantity × price over items of completed orders."""
        if not completed_ids:
            return Decimal('0')

        items = None
        for columns in ('quantity, price, unit_price', 'quantity, unit_price'):
            try:
                items = fetch_rows(
                    self.client.table('order_items').select(columns).in_('order_id', completed_ids),
                    'loading order items for revenue',
                )
                break
            except BackendError:
                continue
        if items is None:
            return Decimal('0')

        revenue = sum(
            (to_decimal(item.get('quantity')) * item_price(item) for item in items),
            Decimal('0'),
        )
        logger.info(f"[REPORTS] Revenue {revenue} from {len(items)} items of {len(completed_ids)} orders")
        return revenue

    def get_metrics(self) -> Dict[str, Any]:
        total_orders, completed_ids, source = self._load_orders()
        profiles = self.client.table('user_profiles')

        return {
            'total_users': self._count(
                profiles.select('id', count='exact').or_(ACTIVE_FILTER),
                'counting active users',
            ),
            'total_orders': total_orders,
            'completed_orders': len(completed_ids),
            'total_products': self._count(
                self.client.table('products').select('id', count='exact'),
                'counting products',
            ),
            'total_revenue': as_number(self._revenue(completed_ids)),
            'users_by_role': {
                UserRole.MERCHANT.value: self._count(
                    self.client.table('user_profiles')
                    .select('id', count='exact')
                    .or_('role.eq.comerciante,role.is.null')
                    .or_(ACTIVE_FILTER),
                    'counting merchants',
                ),
                UserRole.COURIER.value: self._count(
                    self.client.table('user_profiles')
                    .select('id', count='exact')
                    .eq('role', UserRole.COURIER.value)
                    .eq('is_active', True),
                    'counting couriers',
                ),
                UserRole.ADMIN.value: self._count(
                    self.client.table('user_profiles')
                    .select('id', count='exact')
                    .eq('role', UserRole.ADMIN.value)
                    .eq('is_active', True),
                    'counting admins',
                ),
            },
            'orders_source': source,
        }


# ===========================================
# PERIOD REPORTS
# ===========================================

class PeriodReportService:
    """
    Revenue and order-count report for a week, month or year.

    Each order counts with its stored total, or with the sum of its
    items when the total is empty.
    """

    def __init__(self, client=None):
        self.client = client or supabase_client.get_admin_client()

    def _orders_in(self, window: PeriodWindow) -> List[Dict[str, Any]]:
        start, end = window.query_bounds()
        try:
            return fetch_rows(
                self.client.table('delivery_orders')
                .select('id, total, created_at, status')
                .gte('created_at', start)
                .lte('created_at', end)
                .neq('status', CANCELLED_ORDER_STATUS),
                f'fetching orders for {window.label}',
            )
        except BackendError:
            return []

    def _item_totals(self, order_ids: List[str]) -> Dict[str, Dict[str, Decimal]]:
        if not order_ids:
            return {}
        try:
            items = fetch_rows(
                self.client.table('order_items').select('*').in_('order_id', order_ids),
                'fetching report order items',
            )
        except BackendError:
            return {}
        return compute_item_totals(items)

    def _series(self, window: PeriodWindow) -> Dict[str, Any]:
        """Per-bucket revenue and order counts for one window."""
        orders = [o for o in self._orders_in(window) if o.get('status') != CANCELLED_ORDER_STATUS]
        item_totals = self._item_totals([o['id'] for o in orders])

        revenue = {key: Decimal('0') for key in window.bucket_keys()}
        counts = {key: 0 for key in revenue}

        for order in orders:
            created = parse_timestamp(order.get('created_at'))
            if created is None:
                continue
            key = bucket_key(created, window.period)
            if key not in revenue:
                continue
            amount = to_decimal(order.get('total'))
            if not amount:
                amount = item_totals.get(order['id'], {}).get('total', Decimal('0'))
            revenue[key] += amount
            counts[key] += 1

        return {
            'revenue': revenue,
            'orders': counts,
            'total_revenue': sum(revenue.values(), Decimal('0')),
            'total_orders': sum(counts.values()),
        }

    def _active_users(self) -> int:
        try:
            return count_rows(
                self.client.table('user_profiles').select('id', count='exact').or_(ACTIVE_FILTER),
                'counting active users',
            )
        except BackendError:
            return 0

    def _low_stock_count(self) -> int:
        try:
            products = fetch_rows(
                self.client.table('products').select('id, stock'),
                'fetching product stock',
            )
        except BackendError:
            return 0
        return sum(1 for product in products if is_low_stock(product))

    def get_report(
        self,
        period: str = ReportPeriod.MONTH,
        offset: int = 0,
        compare: bool = False,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        window = period_window(period, offset, now=now)
        current = self._series(window)
        logger.info(
            f"[REPORTS] {window.period} report '{window.label}': "
            f"{current['total_orders']} orders, revenue {current['total_revenue']}"
        )

        previous = None
        if compare:
            previous_window = period_window(period, offset + 1, now=now)
            previous = self._series(previous_window)

        def series(metric):
            rows = []
            for index, key in enumerate(window.bucket_keys()):
                value = current[metric][key]
                row = {'period': key, 'current': as_number(Decimal(value))}
                if previous is not None:
                    previous_values = list(previous[metric].values())
                    row['previous'] = as_number(Decimal(previous_values[index])) if index < len(previous_values) else 0
                rows.append(row)
            return rows

        summary = {
            'revenue': as_number(current['total_revenue']),
            'orders': current['total_orders'],
            'active_users': self._active_users(),
            'low_stock_products': self._low_stock_count(),
        }
        if previous is not None:
            summary['previous_revenue'] = as_number(previous['total_revenue'])
            summary['previous_orders'] = previous['total_orders']
            summary['revenue_growth'] = growth(current['total_revenue'], previous['total_revenue'])
            summary['orders_growth'] = growth(
                Decimal(current['total_orders']), Decimal(previous['total_orders']),
            )

        return {
            'period': window.period,
            'offset': offset,
            'compare': compare,
            'label': window.label,
            'start': window.start.isoformat(),
            'end': window.end.isoformat(),
            'summary': summary,
            'revenue_series': series('revenue'),
            'orders_series': series('orders'),
        }

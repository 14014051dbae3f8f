"""
CORE App - Query Helpers over the Supabase table API

Every service goes through these helpers so backend errors are logged
the same way and always surface as BackendError (BackendUnavailable
when the request never reached Supabase).

Usage:
    rows = fetch_rows(
        client.table('delivery_assignments').select('*').eq('repartidor_id', courier_id),
        'fetching assignments',
    )
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError

from .exceptions import BackendError, BackendUnavailable

logger = logging.getLogger(__name__)


def execute(query, action: str):
    """
    Execute a PostgREST query builder.

    Args:
        query: A request builder (select/insert/update/delete + filters)
        action: Short description used in log lines

    Returns:
        The vendor API response (has .data and .count)

    Raises:
        BackendError: when the backend rejects the request
        BackendUnavailable: on connection errors and timeouts
    """
    try:
        return query.execute()
    except APIError as e:
        logger.error(f"[SUPABASE] Error {action}: {e.message} (code={e.code})")
        raise BackendError(
            message=f'Error {action}',
            error=e.message,
            code=e.code,
            hint=e.hint,
            details=e.details,
        ) from e
    except httpx.HTTPError as e:
        logger.error(f"[SUPABASE] Unreachable while {action}: {e}")
        raise BackendUnavailable(error=str(e) or e.__class__.__name__) from e


def fetch_rows(query, action: str) -> List[Dict[str, Any]]:
    """Execute and return the list of rows (never None)."""
    response = execute(query, action)
    return list(response.data or [])


def fetch_first(query, action: str) -> Optional[Dict[str, Any]]:
    """
    Execute with limit(1) and return the first row or None.

    Used instead of single()/maybe_single(), whose "no rows" behaviour
    differs between client versions.
    """
    rows = fetch_rows(query.limit(1), action)
    return rows[0] if rows else None


def count_rows(query, action: str) -> int:
    """Execute a select(..., count='exact') query and return the count."""
    response = execute(query.limit(1), action)
    return response.count or 0


def unique(values) -> List[Any]:
    """Distinct truthy values, first-seen order kept."""
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen

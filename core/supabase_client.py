"""
CORE App - Supabase Client Factory

Builds the vendor SDK clients from settings:

- Admin client (service role key): used by every service, created once.
- Public client (anon key): created per sign-in so user sessions are
  never shared between requests.
"""

import logging
import re
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from django.conf import settings
from supabase import Client, create_client
from supabase.client import ClientOptions

from .exceptions import BackendUnavailable

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKERS = ('TU_SUPABASE', 'AQUI')
PLACEHOLDER_VALUES = ('undefined', 'null')


def clean_setting(value: Optional[str]) -> Optional[str]:
    """
    Normalize a Supabase setting.

    Strips every whitespace character (values pasted from dashboards often
    carry line breaks) and discards placeholders.

    Returns:
        The cleaned value, or None if it is empty or a placeholder.
    """
    if not value:
        return None

    cleaned = re.sub(r'\s+', '', str(value))
    if not cleaned:
        return None
    if cleaned in PLACEHOLDER_VALUES:
        return None
    if any(marker in cleaned for marker in PLACEHOLDER_MARKERS):
        return None
    return cleaned


def is_valid_url(url: Optional[str]) -> bool:
    """True for http(s) URLs with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.hostname)


def get_supabase_url() -> Optional[str]:
    url = clean_setting(getattr(settings, 'SUPABASE_URL', ''))
    return url if is_valid_url(url) else None


def is_supabase_available() -> bool:
    """Check whether the admin client can be built from settings."""
    return bool(
        get_supabase_url()
        and clean_setting(getattr(settings, 'SUPABASE_SERVICE_ROLE_KEY', ''))
    )


def _client_options() -> ClientOptions:
    return ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=settings.SUPABASE_POSTGREST_TIMEOUT,
        storage_client_timeout=settings.SUPABASE_STORAGE_TIMEOUT,
    )


@lru_cache(maxsize=1)
def get_admin_client() -> Client:
    """
    Get the service-role Supabase client.

    Raises:
        BackendUnavailable: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY
            is missing or invalid.
    """
    url = get_supabase_url()
    key = clean_setting(getattr(settings, 'SUPABASE_SERVICE_ROLE_KEY', ''))

    if not url:
        logger.error("[SUPABASE] Missing or invalid SUPABASE_URL")
        raise BackendUnavailable(error='Missing env.SUPABASE_URL')
    if not key:
        logger.error("[SUPABASE] Missing SUPABASE_SERVICE_ROLE_KEY")
        raise BackendUnavailable(error='Missing env.SUPABASE_SERVICE_ROLE_KEY')

    logger.info(f"[SUPABASE] Admin client created for {urlparse(url).hostname}")
    return create_client(url, key, options=_client_options())


def get_public_client() -> Client:
    """
    Create a fresh anon-key client (one per sign-in).

    Raises:
        BackendUnavailable: if SUPABASE_URL or SUPABASE_ANON_KEY is missing.
    """
    url = get_supabase_url()
    key = clean_setting(getattr(settings, 'SUPABASE_ANON_KEY', ''))

    if not url or not key:
        logger.warning(
            "[SUPABASE] Supabase no está configurado correctamente "
            "(SUPABASE_URL / SUPABASE_ANON_KEY)"
        )
        raise BackendUnavailable()

    return create_client(url, key, options=_client_options())


def reset_clients():
    """Forget the cached admin client (settings changed, tests)."""
    get_admin_client.cache_clear()

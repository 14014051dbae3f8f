"""
FRITOLAY Delivery Health Check Endpoints
=========================================

Provides:
1. /health/ - Basic liveness check (for load balancers/Docker)
2. /health/ready/ - Readiness check (Supabase configured and reachable)
"""

import logging
import time

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

from . import supabase_client
from .exceptions import ServiceError
from .gateway import count_rows

logger = logging.getLogger('fritolay.monitoring')

SERVICE_NAME = 'fritolay-delivery'


@csrf_exempt
@require_GET
def health_check(request):
    """
    Basic liveness probe.
    Returns 200 if the Django process is alive.
    """
    return JsonResponse({
        'status': 'ok',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """
    Readiness probe.
    Returns 503 when Supabase is not configured or the user_profiles
    table cannot be queried.
    """
    checks = {}
    healthy = True

    if not supabase_client.is_supabase_available():
        checks['supabase'] = {
            'status': 'unconfigured',
            'error': 'Supabase no está disponible',
        }
        healthy = False
        logger.error("Health check - Supabase not configured")
    else:
        try:
            start = time.time()
            client = supabase_client.get_admin_client()
            count_rows(
                client.table('user_profiles').select('id', count='exact'),
                'pinging user_profiles',
            )
            checks['supabase'] = {
                'status': 'healthy',
                'response_time_ms': round((time.time() - start) * 1000, 2),
            }
        except ServiceError as e:
            checks['supabase'] = {
                'status': 'unhealthy',
                'error': e.error or e.message,
            }
            healthy = False
            logger.error(f"Health check - Supabase unhealthy: {e.error or e.message}")

    return JsonResponse({
        'status': 'healthy' if healthy else 'unhealthy',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
        'checks': checks,
    }, status=200 if healthy else 503)

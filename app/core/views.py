"""
Infrastructure endpoints.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        return False
    return True


def _cache_ok() -> bool:
    try:
        cache.set("health_check", "ok", timeout=1)
        return cache.get("health_check") == "ok"
    except Exception:
        logger.warning("Health check: cache unreachable", exc_info=True)
        return False


def health_check(request):
    """
    Health check for load balancers and container probes.

    Returns 200 while the database answers, 503 otherwise. The cache is
    reported but never fails the check: throttling degrades gracefully
    without it.
    """
    database_ok = _database_ok()
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "disconnected",
        "cache": "connected" if _cache_ok() else "disconnected",
    }
    return JsonResponse(body, status=200 if database_ok else 503)

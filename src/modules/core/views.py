import time
from typing import Any, Callable, Dict

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _check_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _check_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


def _timed_check(name: str, check: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        check()
    except Exception:
        logger.exception("health_check_failure", service=name)
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Liveness check for the database and cache.

    The payment gateway is reported as ``configured``/``unconfigured``
    only; calling Paystack on every health check would spend API quota.
    """
    services: Dict[str, Dict[str, Any]] = {
        "database": _timed_check("database", _check_database),
        "cache": _timed_check("cache", _check_cache),
        "payment_gateway": {
            "status": "configured" if settings.PAYSTACK_SECRET_KEY else "unconfigured"
        },
    }
    overall_healthy = all(
        services[name]["status"] == "up" for name in ("database", "cache")
    )
    status_label = "healthy" if overall_healthy else "unhealthy"

    logger.info("health_check_completed", status=status_label)

    return JsonResponse(
        {
            "status": status_label,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if overall_healthy else 503,
    )

"""
Rate limiting configuration for the tracker API.

Limits are per patient when the path carries a patient id, per client IP
otherwise. Values are configurable via environment variables.
"""
import os
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from api.utils import hash_user_id_for_logging

logger = logging.getLogger("myayu-api.rate_limiter")

# Format: "number/period" where period can be: second, minute, hour, day
DEFAULT_RATE_LIMIT = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")
DATA_ACCESS_RATE_LIMIT = os.getenv("RATE_LIMIT_DATA_ACCESS", "30/minute")
WRITE_RATE_LIMIT = os.getenv("RATE_LIMIT_WRITES", "30/minute")

logger.info("Rate limits: default=%s data=%s writes=%s",
            DEFAULT_RATE_LIMIT, DATA_ACCESS_RATE_LIMIT, WRITE_RATE_LIMIT)


def get_patient_key_from_request(request: Request) -> str:
    """
    Rate limit key for a request.

    The segment following /patients/ identifies the patient; requests
    without one fall back to the client address.
    """
    path_parts = [p for p in request.url.path.split('/') if p]
    for i, part in enumerate(path_parts[:-1]):
        if part == "patients":
            return f"patient:{path_parts[i + 1]}"

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_patient_key_from_request,
    default_limits=[DEFAULT_RATE_LIMIT],
    # memory:// by default; redis://host:port/db for shared counters
    storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    429 with the limit that tripped and a Retry-After hint.
    """
    key = get_patient_key_from_request(request)
    if key.startswith("patient:"):
        key = f"patient:{hash_user_id_for_logging(key.split(':', 1)[1])}"
    route = getattr(request.scope.get("route"), "path", "unknown")
    logger.warning("Rate limit exceeded: key=%s route=%s", key, route)

    retry_after = getattr(exc, 'retry_after', 60)
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down and try again later.",
            "detail": str(exc.detail) if hasattr(exc, 'detail') else "Rate limit exceeded",
            "retry_after": retry_after
        },
        headers={"Retry-After": str(retry_after)}
    )

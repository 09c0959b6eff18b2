# api/middleware.py
"""
Request tracking middleware.
"""
import time
import uuid
import logging
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from api.utils import hash_user_id_for_logging

logger = logging.getLogger("myayu-api.middleware")


def _patient_hash_from_path(path: str) -> Optional[str]:
    parts = [p for p in path.split('/') if p]
    for i, part in enumerate(parts[:-1]):
        if part == "patients":
            return hash_user_id_for_logging(parts[i + 1])
    return None


def _masked_path(path: str, patient_hash: Optional[str]) -> str:
    """Path with the patient id segment replaced by its hash."""
    if patient_hash is None:
        return path
    parts = path.split('/')
    for i, part in enumerate(parts[:-1]):
        if part == "patients":
            parts[i + 1] = patient_hash
            break
    return '/'.join(parts)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id and a duration.

    Response headers: X-Request-ID, X-Response-Time. Log lines carry the
    hashed patient id and the declared viewer role, never the raw id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        patient_hash = _patient_hash_from_path(request.url.path)
        patient = patient_hash or "none"
        viewer_role = request.headers.get("X-Viewer-Role", "patient")

        request.state.request_id = request_id
        request.state.patient_hash = patient
        started = time.perf_counter()

        logger.info(
            "Request started: request_id=%s method=%s route=%s patient=%s viewer=%s",
            request_id,
            request.method,
            _masked_path(request.url.path, patient_hash),
            patient,
            viewer_role,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed: request_id=%s patient=%s duration=%.2fms error=%s",
                request_id, patient, _elapsed_ms(started), e,
                exc_info=True
            )
            raise

        duration_ms = _elapsed_ms(started)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        logger.info(
            "Request completed: request_id=%s status=%d duration=%.2fms patient=%s",
            request_id, response.status_code, duration_ms, patient
        )
        return response


def get_request_id(request: Request) -> str:
    """Request ID assigned by the middleware, or "unknown"."""
    return getattr(request.state, 'request_id', 'unknown')

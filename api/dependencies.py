import asyncio
import logging
import os
from typing import Optional

from fastapi import Header, HTTPException
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from api.utils import validate_uuid_or_400
from services.context import VIEWER_ROLES, PatientContext

logger = logging.getLogger("myayu-api.dependencies")

__all__ = [
    "get_supabase_client",
    "get_patient_context",
    "reset_caches_for_testing",
]

_cached_client: Optional[AsyncClient] = None
_client_initialization_lock = asyncio.Lock()


def reset_caches_for_testing():
    """
    Reset the cached client between tests.
    NOT for production code.
    """
    global _cached_client
    _cached_client = None


def _resolve_key() -> str:
    """Service key when configured, anon key otherwise."""
    service_key = os.getenv("SUPABASE_SERVICE_KEY", "").strip()
    if service_key:
        return service_key
    return os.getenv("SUPABASE_ANON_KEY", "").strip()


async def get_supabase_client() -> AsyncClient:
    """
    Process-wide async Supabase client, created on first use.

    Double-checked under an asyncio lock so concurrent first requests create
    a single client.
    """
    global _cached_client
    if _cached_client is None:
        async with _client_initialization_lock:
            if _cached_client is None:  # Double-check
                url = os.getenv("SUPABASE_URL")
                key = _resolve_key()

                if not url or not key:
                    logger.error("SUPABASE_URL or Supabase key missing.")
                    raise HTTPException(status_code=500, detail="Supabase configuration incomplete.")

                logger.info("Initializing Supabase client key=%s...%s", key[:5], key[-5:])
                options = AsyncClientOptions(persist_session=False)
                _cached_client = await acreate_client(url, key, options=options)
                logger.debug("Supabase client cached.")
    return _cached_client


async def get_patient_context(
    patient_id: str,
    x_viewer_role: Optional[str] = Header(None),
) -> PatientContext:
    """
    Build the PatientContext for a /patients/{patient_id}/... request.

    The viewer role is whatever the client declares in X-Viewer-Role
    (patient by default). It is not an access check: it only decides
    whether the daily page is offered as editable.
    """
    validate_uuid_or_400(patient_id, "patient_id")

    role = (x_viewer_role or "patient").strip().lower()
    if role not in VIEWER_ROLES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid X-Viewer-Role: {x_viewer_role}. Expected one of {', '.join(VIEWER_ROLES)}",
        )
    return PatientContext(patient_id=patient_id, viewer_role=role)

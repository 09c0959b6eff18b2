"""
Tests for api/dependencies.py
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from api.dependencies import get_patient_context, get_supabase_client, reset_caches_for_testing
from conftest import PATIENT_ID


@pytest.fixture(autouse=True)
def reset_dependency_caches():
    """Fixture to reset the cached client before and after each test."""
    reset_caches_for_testing()
    yield
    reset_caches_for_testing()


@pytest.mark.asyncio
async def test_client_created_once_under_concurrency(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key-12345")
    fake_client = MagicMock()

    async def slow_create(url, key, options=None):
        await asyncio.sleep(0.01)
        return fake_client

    with patch("api.dependencies.acreate_client", side_effect=slow_create) as mock_create:
        clients = await asyncio.gather(*[get_supabase_client() for _ in range(5)])

    assert all(c is fake_client for c in clients)
    assert mock_create.call_count == 1


@pytest.mark.asyncio
async def test_service_key_preferred_over_anon_key(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key-12345")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key-67890")

    with patch("api.dependencies.acreate_client", new=AsyncMock(return_value=MagicMock())) as mock_create:
        await get_supabase_client()

    assert mock_create.call_args[0][1] == "service-key-12345"


@pytest.mark.asyncio
async def test_anon_key_used_without_service_key(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key-67890")

    with patch("api.dependencies.acreate_client", new=AsyncMock(return_value=MagicMock())) as mock_create:
        await get_supabase_client()

    assert mock_create.call_args[0][1] == "anon-key-67890"


@pytest.mark.asyncio
async def test_missing_configuration_raises_500(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)

    with pytest.raises(HTTPException) as exc_info:
        await get_supabase_client()

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_patient_context_defaults_to_patient_view():
    ctx = await get_patient_context(PATIENT_ID, None)

    assert ctx.patient_id == PATIENT_ID
    assert ctx.viewer_role == "patient"
    assert ctx.read_only is False


@pytest.mark.asyncio
async def test_patient_context_clinician_is_read_only():
    ctx = await get_patient_context(PATIENT_ID, " Clinician ")

    assert ctx.viewer_role == "clinician"
    assert ctx.read_only is True


@pytest.mark.asyncio
async def test_patient_context_rejects_bad_input():
    with pytest.raises(HTTPException) as exc_info:
        await get_patient_context("not-a-uuid", None)
    assert exc_info.value.status_code == 400

    with pytest.raises(HTTPException) as exc_info:
        await get_patient_context(PATIENT_ID, "admin")
    assert exc_info.value.status_code == 400

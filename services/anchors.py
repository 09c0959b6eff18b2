"""
Anchor record resolver.

A daily entry is the one-per-patient-per-date row every other daily record
hangs off; a cycle log is the optional one-per-entry row cycle comments hang
off. Both are created on first access.
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

from services.context import PatientContext
from services.db import Row, fetch_first, fetch_rows
from services.errors import DataAccessError, is_unique_violation

logger = logging.getLogger("myayu-api.anchors")

DAILY_ENTRY_FIELDS = (
    "energy_physical",
    "energy_mental",
    "energy_emotional",
    "energy_drive",
    "overall_mood",
    "reflection",
    "cycle_day",
)


async def _find_daily_entry(supabase, patient_id: str, day: date, operation: str) -> Optional[Row]:
    query = (
        supabase.table("daily_entries")
        .select("*")
        .eq("patient_id", patient_id)
        .eq("date", day.isoformat())
        .limit(1)
    )
    return await fetch_first(query, operation)


async def get_or_create_daily_entry(supabase, ctx: PatientContext, day: date) -> Row:
    """
    Return the daily entry for (patient, day), creating it if needed.

    Two concurrent first accesses may both try to insert; the loser hits the
    (patient_id, date) unique constraint and returns the winner's row.

    Raises:
        DataAccessError: on any failure other than the uniqueness race
    """
    existing = await _find_daily_entry(
        supabase, ctx.patient_id, day, "get_or_create_daily_entry - fetch"
    )
    if existing:
        return existing

    try:
        response = await (
            supabase.table("daily_entries")
            .insert({"patient_id": ctx.patient_id, "date": day.isoformat()})
            .execute()
        )
    except Exception as e:
        if not is_unique_violation(e):
            logger.error("Query failed: operation=get_or_create_daily_entry - insert error=%s", e)
            raise DataAccessError("get_or_create_daily_entry - insert", e) from e

        logger.info("Daily entry for %s created concurrently, reloading", day.isoformat())
        existing = await _find_daily_entry(
            supabase, ctx.patient_id, day, "get_or_create_daily_entry - reload"
        )
        if existing is None:
            raise DataAccessError("get_or_create_daily_entry - reload", e) from e
        return existing

    if not response.data:
        raise DataAccessError("get_or_create_daily_entry - insert")
    logger.debug("Created daily entry for %s", day.isoformat())
    return response.data[0]


async def update_daily_entry(
    supabase, ctx: PatientContext, entry_id: str, fields: Dict[str, Any]
) -> Optional[Row]:
    """
    Update energy, mood, reflection or cycle day on one of the patient's
    daily entries.

    Only keys present in ``fields`` are written; unknown keys are ignored.
    Returns the updated row, or None if the patient has no entry with that id.
    """
    payload = {k: v for k, v in fields.items() if k in DAILY_ENTRY_FIELDS}
    if not payload:
        return await fetch_first(
            supabase.table("daily_entries")
            .select("*")
            .eq("id", entry_id)
            .eq("patient_id", ctx.patient_id)
            .limit(1),
            "update_daily_entry - fetch",
        )
    rows = await fetch_rows(
        supabase.table("daily_entries")
        .update(payload)
        .eq("id", entry_id)
        .eq("patient_id", ctx.patient_id),
        "update_daily_entry",
    )
    return rows[0] if rows else None


async def _find_cycle_log(supabase, daily_entry_id: str, operation: str) -> Optional[Row]:
    query = (
        supabase.table("cycle_logs")
        .select("*")
        .eq("daily_entry_id", daily_entry_id)
        .order("created_at", desc=True)
        .limit(1)
    )
    return await fetch_first(query, operation)


async def get_or_create_cycle_log(supabase, ctx: PatientContext, daily_entry_id: str) -> Row:
    """
    Return the cycle log for a daily entry, creating an empty one if needed.

    When duplicates exist the most recently created one wins.
    """
    existing = await _find_cycle_log(supabase, daily_entry_id, "get_or_create_cycle_log - fetch")
    if existing:
        return existing

    try:
        response = await (
            supabase.table("cycle_logs")
            .insert({"daily_entry_id": daily_entry_id, "patient_id": ctx.patient_id})
            .execute()
        )
    except Exception as e:
        logger.warning("Cycle log insert failed, reloading: %s", e)
        existing = await _find_cycle_log(supabase, daily_entry_id, "get_or_create_cycle_log - reload")
        if existing is None:
            raise DataAccessError("get_or_create_cycle_log - insert", e) from e
        return existing

    if not response.data:
        raise DataAccessError("get_or_create_cycle_log - insert")
    return response.data[0]


__all__ = [
    "DAILY_ENTRY_FIELDS",
    "get_or_create_daily_entry",
    "update_daily_entry",
    "get_or_create_cycle_log",
]

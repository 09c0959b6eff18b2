"""
Single-day bundle assembly.

Gathers every record attached to one patient's daily entry, plus the regimen
catalog and saved-item lookup lists, into one DailyEntryBundle.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from api.schemas.daily import DailyEntryBundle
from services.anchors import get_or_create_daily_entry
from services.context import PatientContext
from services.db import Row, fetch_first, fetch_rows, gather_all

logger = logging.getLogger("myayu-api.bundle")

OPERATION = "get_daily_entry_bundle"

# bundle field -> table, for the plain "all rows of this entry" fetches
ENTRY_LISTS = {
    "sleep_blocks": "sleep_blocks",
    "food_events": "food_events",
    "bowel_movements": "bowel_movements",
    "exercise_events": "exercise_events",
    "vital_readings": "vital_readings",
    "medication_intakes": "medication_intakes",
    "symptom_logs": "symptom_logs",
    "formulation_intakes": "regimen_formulation_intakes",
    "treatment_completions": "regimen_treatment_completions",
}

# bundle field -> table, for patient-scoped catalogs and saved items
PATIENT_LISTS = {
    "regimen_formulations": "regimen_formulations",
    "regimen_treatments": "regimen_treatments",
    "saved_foods": "saved_foods",
    "saved_exercises": "saved_exercises",
    "saved_meds": "saved_meds",
    "saved_symptoms": "saved_symptoms",
}

# bundle field -> table, for at-most-one-per-entry records (latest wins)
ENTRY_SINGLES = {
    "early_morning": "early_morning_entries",
    "fluid_totals": "daily_fluid_totals",
    "cycle_log": "cycle_logs",
    "regimen_notes": "regimen_notes",
}


def _entry_rows(supabase, table: str, entry_id: str):
    query = supabase.table(table).select("*").eq("daily_entry_id", entry_id)
    return fetch_rows(query, f"{OPERATION} - {table}")


def _patient_rows(supabase, table: str, patient_id: str):
    query = supabase.table(table).select("*").eq("patient_id", patient_id)
    return fetch_rows(query, f"{OPERATION} - {table}")


def _entry_single(supabase, table: str, entry_id: str):
    query = (
        supabase.table(table)
        .select("*")
        .eq("daily_entry_id", entry_id)
        .order("created_at", desc=True)
        .limit(1)
    )
    return fetch_first(query, f"{OPERATION} - {table}")


async def _cycle_comments(supabase, cycle_log: Optional[Row]) -> List[Row]:
    if not cycle_log:
        return []
    query = (
        supabase.table("cycle_comments")
        .select("*")
        .eq("cycle_log_id", cycle_log["id"])
        .order("created_at")
    )
    return await fetch_rows(query, f"{OPERATION} - cycle_comments")


async def get_daily_entry_bundle(supabase, ctx: PatientContext, day: date) -> DailyEntryBundle:
    """
    Assemble everything recorded for ``ctx.patient_id`` on ``day``.

    The daily entry is resolved (or created) first. All other fetches key off
    its id or the patient id and run concurrently; cycle comments need the
    cycle log id and are fetched afterwards, only if a cycle log exists.

    Regimen formulations and treatments are the patient's full catalog, not
    only the items active on ``day``.

    Raises:
        DataAccessError: naming the failed sub-fetch (the first in field order
            if several failed). No partial bundle is ever returned.
    """
    entry = await get_or_create_daily_entry(supabase, ctx, day)
    entry_id = entry["id"]

    fetches: Dict[str, Any] = {}
    for field, table in ENTRY_LISTS.items():
        fetches[field] = _entry_rows(supabase, table, entry_id)
    for field, table in PATIENT_LISTS.items():
        fetches[field] = _patient_rows(supabase, table, ctx.patient_id)
    for field, table in ENTRY_SINGLES.items():
        fetches[field] = _entry_single(supabase, table, entry_id)

    results = await gather_all(*fetches.values())
    data = dict(zip(fetches.keys(), results))

    data["cycle_comments"] = await _cycle_comments(supabase, data["cycle_log"])

    logger.debug(
        "Bundle assembled for %s: %d food, %d exercise, cycle_log=%s",
        day.isoformat(),
        len(data["food_events"]),
        len(data["exercise_events"]),
        data["cycle_log"] is not None,
    )
    return DailyEntryBundle(daily_entry=entry, **data)


__all__ = ["get_daily_entry_bundle"]

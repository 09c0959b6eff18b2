"""
Writes to the per-day satellite tables, plus the small lookups the daily
entry form needs (regimen for a date, saved cycle symptoms).
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from services.adherence import is_active_on
from services.context import PatientContext
from services.db import Row, fetch_first, fetch_rows
from services.errors import DataAccessError

logger = logging.getLogger("myayu-api.records")

# Singular-per-day records, written with upsert on id
UPSERT_TABLES = {
    "sleep_block": "sleep_blocks",
    "early_morning": "early_morning_entries",
    "fluid_totals": "daily_fluid_totals",
    "cycle_log": "cycle_logs",
    "formulation_intake": "regimen_formulation_intakes",
    "treatment_completion": "regimen_treatment_completions",
    "regimen_note": "regimen_notes",
}

# Per-item regimen records: one row per (regimen item, daily entry)
REGIMEN_ITEM_KEYS = {
    "formulation_intake": "regimen_formulation_id",
    "treatment_completion": "regimen_treatment_id",
}

# Event records, appended and deleted individually
EVENT_TABLES = {
    "food_event": "food_events",
    "bowel_movement": "bowel_movements",
    "exercise_event": "exercise_events",
    "vital_reading": "vital_readings",
    "medication_intake": "medication_intakes",
    "symptom_log": "symptom_logs",
}

CYCLE_SYMPTOM_CATEGORIES = ("cycle_physical", "cycle_emotional")


def _single(rows: List[Row], operation: str) -> Row:
    if not rows:
        raise DataAccessError(operation)
    return rows[0]


async def upsert_record(
    supabase, ctx: PatientContext, kind: str, daily_entry_id: str, payload: Dict[str, Any]
) -> Row:
    """
    Create or update a singular record of ``kind`` on a daily entry.

    An ``id`` in the payload updates that row. Without one, intake and
    completion records update the day's existing row for the same regimen
    item; anything else gets a new row.
    """
    table = UPSERT_TABLES[kind]
    row = {**payload, "daily_entry_id": daily_entry_id, "patient_id": ctx.patient_id}
    operation = f"upsert_{kind}"

    item_key = REGIMEN_ITEM_KEYS.get(kind)
    if item_key and "id" not in row and row.get(item_key):
        existing = await fetch_first(
            supabase.table(table)
            .select("id")
            .eq("daily_entry_id", daily_entry_id)
            .eq(item_key, row[item_key])
            .order("created_at", desc=True)
            .limit(1),
            f"{operation} - lookup",
        )
        if existing:
            row["id"] = existing["id"]

    rows = await fetch_rows(supabase.table(table).upsert(row, on_conflict="id"), operation)
    return _single(rows, operation)


async def add_record(
    supabase, ctx: PatientContext, kind: str, daily_entry_id: str, payload: Dict[str, Any]
) -> Row:
    table = EVENT_TABLES[kind]
    row = {**payload, "daily_entry_id": daily_entry_id, "patient_id": ctx.patient_id}
    operation = f"add_{kind}"
    rows = await fetch_rows(supabase.table(table).insert(row), operation)
    return _single(rows, operation)


async def delete_record(supabase, ctx: PatientContext, kind: str, record_id: str) -> bool:
    """
    Delete one event record belonging to the patient.

    Returns False when nothing matched.
    """
    table = EVENT_TABLES[kind]
    rows = await fetch_rows(
        supabase.table(table).delete().eq("id", record_id).eq("patient_id", ctx.patient_id),
        f"delete_{kind}",
    )
    return bool(rows)


async def add_cycle_comment(
    supabase, ctx: PatientContext, cycle_log_id: str, author_type: str, author_id: str, text: str
) -> Optional[Row]:
    """
    Attach a comment to one of the patient's cycle logs.

    Returns None when the log does not belong to the patient.
    """
    log = await fetch_first(
        supabase.table("cycle_logs")
        .select("id")
        .eq("id", cycle_log_id)
        .eq("patient_id", ctx.patient_id)
        .limit(1),
        "add_cycle_comment - fetch log",
    )
    if log is None:
        return None

    rows = await fetch_rows(
        supabase.table("cycle_comments").insert(
            {
                "cycle_log_id": cycle_log_id,
                "author_type": author_type,
                "author_id": author_id,
                "text": text,
            }
        ),
        "add_cycle_comment",
    )
    return _single(rows, "add_cycle_comment")


async def get_regimen_for_date(supabase, ctx: PatientContext, day: date) -> Dict[str, List[Row]]:
    """
    Formulations and treatments active on ``day``, oldest first.

    The active filter is applied in memory with the same rule the adherence
    percentages use.
    """
    formulations = await fetch_rows(
        supabase.table("regimen_formulations")
        .select("*")
        .eq("patient_id", ctx.patient_id)
        .order("created_at"),
        "get_regimen_for_date - formulations",
    )
    treatments = await fetch_rows(
        supabase.table("regimen_treatments")
        .select("*")
        .eq("patient_id", ctx.patient_id)
        .order("created_at"),
        "get_regimen_for_date - treatments",
    )
    return {
        "formulations": [f for f in formulations if is_active_on(f, day)],
        "treatments": [t for t in treatments if is_active_on(t, day)],
    }


async def get_cycle_saved_symptoms(
    supabase, ctx: PatientContext, category: Optional[str] = None
) -> List[Row]:
    """Saved cycle symptoms, optionally limited to one category, by label."""
    query = supabase.table("saved_symptoms").select("*").eq("patient_id", ctx.patient_id)
    if category:
        query = query.eq("category", category)
    else:
        query = query.in_("category", list(CYCLE_SYMPTOM_CATEGORIES))
    return await fetch_rows(query.order("label"), "get_cycle_saved_symptoms")


async def add_cycle_symptom(supabase, ctx: PatientContext, category: str, label: str) -> Row:
    rows = await fetch_rows(
        supabase.table("saved_symptoms").insert(
            {"patient_id": ctx.patient_id, "category": category, "label": label}
        ),
        "add_cycle_symptom",
    )
    return _single(rows, "add_cycle_symptom")


__all__ = [
    "UPSERT_TABLES",
    "EVENT_TABLES",
    "CYCLE_SYMPTOM_CATEGORIES",
    "upsert_record",
    "add_record",
    "delete_record",
    "add_cycle_comment",
    "get_regimen_for_date",
    "get_cycle_saved_symptoms",
    "add_cycle_symptom",
]

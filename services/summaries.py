"""
Date-range summaries for the tracker dashboard.

Both functions load the daily entries in range first, then fetch every
related table in bulk by entry id and join in memory. No query is issued per
day.
"""
import logging
from collections import Counter, defaultdict
from datetime import date
from typing import Dict, List

from api.schemas.summaries import CycleDaySummary, DailySummary
from services.adherence import (
    FORMULATION_COUNTED_STATUSES,
    TREATMENT_COUNTED_STATUSES,
    adherence_by_entry,
)
from services.context import PatientContext
from services.db import Row, fetch_rows, gather_all

logger = logging.getLogger("myayu-api.summaries")

ENERGY_FIELDS = (
    "energy_physical",
    "energy_mental",
    "energy_emotional",
    "energy_drive",
    "overall_mood",
)

CYCLE_FIELDS = (
    "physical_symptom_keys",
    "emotional_symptom_keys",
    "bleeding_quantity",
    "blood_color",
    "blood_volume",
    "clots",
    "mucus",
)


async def _entries_in_range(
    supabase, ctx: PatientContext, from_date: date, to_date: date, operation: str
) -> List[Row]:
    query = (
        supabase.table("daily_entries")
        .select("*")
        .eq("patient_id", ctx.patient_id)
        .gte("date", from_date.isoformat())
        .lte("date", to_date.isoformat())
        .order("date", desc=True)
    )
    return await fetch_rows(query, f"{operation} - daily_entries")


def _by_entry(supabase, table: str, columns: str, entry_ids: List[str], operation: str):
    query = supabase.table(table).select(columns).in_("daily_entry_id", entry_ids)
    return fetch_rows(query, f"{operation} - {table}")


def _catalog(supabase, table: str, patient_id: str, operation: str):
    query = supabase.table(table).select("id, start_date, stop_date").eq("patient_id", patient_id)
    return fetch_rows(query, f"{operation} - {table}")


async def _adherence_maps(
    supabase, ctx: PatientContext, entries: List[Row], entry_ids: List[str], operation: str, *extra
):
    """
    Fetch the adherence inputs (plus any ``extra`` fetches) concurrently.

    Returns (formulation map, treatment map, *extra results).
    """
    (
        intakes,
        completions,
        formulations,
        treatments,
        *extra_results,
    ) = await gather_all(
        _by_entry(
            supabase,
            "regimen_formulation_intakes",
            "daily_entry_id, status, regimen_formulation_id",
            entry_ids,
            operation,
        ),
        _by_entry(
            supabase,
            "regimen_treatment_completions",
            "daily_entry_id, status, regimen_treatment_id",
            entry_ids,
            operation,
        ),
        _catalog(supabase, "regimen_formulations", ctx.patient_id, operation),
        _catalog(supabase, "regimen_treatments", ctx.patient_id, operation),
        *extra,
    )
    formulation_pct = adherence_by_entry(
        entries, formulations, intakes, "regimen_formulation_id", FORMULATION_COUNTED_STATUSES
    )
    treatment_pct = adherence_by_entry(
        entries, treatments, completions, "regimen_treatment_id", TREATMENT_COUNTED_STATUSES
    )
    return (formulation_pct, treatment_pct, *extra_results)


async def get_daily_summary_range(
    supabase, ctx: PatientContext, from_date: date, to_date: date
) -> List[DailySummary]:
    """
    Per-day activity and adherence summaries, newest first.

    Args:
        supabase: Async Supabase client
        ctx: Patient being viewed
        from_date: First day of the range (inclusive)
        to_date: Last day of the range (inclusive)

    Returns:
        One DailySummary per existing daily entry in range. Days without a
        daily entry are not synthesized.
    """
    operation = "get_daily_summary_range"
    entries = await _entries_in_range(supabase, ctx, from_date, to_date, operation)
    if not entries:
        return []

    entry_ids = [e["id"] for e in entries]
    formulation_pct, treatment_pct, foods, bowels, exercises, cycle_logs = await _adherence_maps(
        supabase,
        ctx,
        entries,
        entry_ids,
        operation,
        _by_entry(supabase, "food_events", "daily_entry_id", entry_ids, operation),
        _by_entry(supabase, "bowel_movements", "daily_entry_id", entry_ids, operation),
        _by_entry(
            supabase, "exercise_events", "daily_entry_id, duration_minutes", entry_ids, operation
        ),
        _by_entry(supabase, "cycle_logs", "daily_entry_id", entry_ids, operation),
    )

    food_counts = Counter(row["daily_entry_id"] for row in foods)
    bowel_counts = Counter(row["daily_entry_id"] for row in bowels)
    exercise_minutes: Dict[str, int] = defaultdict(int)
    for row in exercises:
        exercise_minutes[row["daily_entry_id"]] += row.get("duration_minutes") or 0
    logged_cycle = {row["daily_entry_id"] for row in cycle_logs}

    summaries = []
    for entry in entries:
        entry_id = entry["id"]
        summaries.append(
            DailySummary(
                date=entry["date"],
                **{field: entry.get(field) for field in ENERGY_FIELDS},
                food_count=food_counts[entry_id],
                bowel_movement_count=bowel_counts[entry_id],
                exercise_minutes=exercise_minutes[entry_id],
                formulation_adherence_percent=formulation_pct[entry_id],
                treatment_adherence_percent=treatment_pct[entry_id],
                has_cycle_log=entry_id in logged_cycle,
            )
        )

    logger.debug(
        "Built %d daily summaries for %s..%s", len(summaries), from_date, to_date
    )
    return summaries


async def get_cycle_range(
    supabase, ctx: PatientContext, from_date: date, to_date: date
) -> List[CycleDaySummary]:
    """
    Cycle-log projection with energy and adherence per day, newest first.

    Used by the cycle and combined dashboard lenses. ``cycle_day`` comes from
    the cycle log when it has one, otherwise from the daily entry; 0 is a
    valid cycle day on either side.
    """
    operation = "get_cycle_range"
    entries = await _entries_in_range(supabase, ctx, from_date, to_date, operation)
    if not entries:
        return []

    entry_ids = [e["id"] for e in entries]
    formulation_pct, treatment_pct, cycle_logs = await _adherence_maps(
        supabase,
        ctx,
        entries,
        entry_ids,
        operation,
        _by_entry(supabase, "cycle_logs", "*", entry_ids, operation),
    )

    log_by_entry: Dict[str, Row] = {}
    for log in cycle_logs:
        log_by_entry.setdefault(log["daily_entry_id"], log)

    summaries = []
    for entry in entries:
        entry_id = entry["id"]
        log = log_by_entry.get(entry_id) or {}
        cycle_day = log.get("cycle_day")
        if cycle_day is None:
            cycle_day = entry.get("cycle_day")
        summaries.append(
            CycleDaySummary(
                date=entry["date"],
                cycle_day=cycle_day,
                **{field: log.get(field) for field in CYCLE_FIELDS},
                **{field: entry.get(field) for field in ENERGY_FIELDS},
                formulation_adherence_percent=formulation_pct[entry_id],
                treatment_adherence_percent=treatment_pct[entry_id],
            )
        )
    return summaries


__all__ = ["get_daily_summary_range", "get_cycle_range"]

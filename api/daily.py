# api/daily.py
"""
Daily entry endpoints: the single-day bundle and writes to its records.

Writes are addressed by date; the daily entry for that date is resolved (or
created) before the record is written.
"""
import logging
from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from supabase import AsyncClient

from api.dependencies import get_patient_context, get_supabase_client
from api.rate_limiter import limiter, DATA_ACCESS_RATE_LIMIT, WRITE_RATE_LIMIT
from api.schemas.daily import DailyEntry, DailyEntryView
from api.schemas.requests import (
    BowelMovementIn,
    CycleLogIn,
    DailyEntryUpdate,
    EarlyMorningIn,
    ExerciseEventIn,
    FluidTotalsIn,
    FoodEventIn,
    FormulationIntakeIn,
    MedicationIntakeIn,
    RegimenNoteIn,
    SleepBlockIn,
    SymptomLogIn,
    TreatmentCompletionIn,
    VitalReadingIn,
)
from api.utils import (
    handle_data_access_error,
    hash_user_id_for_logging,
    parse_date_or_400,
    validate_uuid_or_400,
)
from services.anchors import get_or_create_cycle_log, get_or_create_daily_entry, update_daily_entry
from services.bundle import get_daily_entry_bundle
from services.context import PatientContext
from services.errors import DataAccessError
from services.patient_config import get_patient_config, is_within_edit_window
from services.records import add_record, delete_record, upsert_record

logger = logging.getLogger("myayu-api.daily")

router = APIRouter(prefix="/patients/{patient_id}", tags=["Daily Entry"])

# URL collection name -> record kind, for deletes
DELETABLE_COLLECTIONS = {
    "food-events": "food_event",
    "bowel-movements": "bowel_movement",
    "exercise-events": "exercise_event",
    "vitals": "vital_reading",
    "medications": "medication_intake",
    "symptoms": "symptom_log",
}


def _payload(body: BaseModel) -> Dict[str, Any]:
    # JSON mode so datetimes reach PostgREST as ISO strings
    return body.model_dump(mode="json", exclude_none=True)


async def _upsert_for_day(
    supabase: AsyncClient, ctx: PatientContext, day_str: str, kind: str, body: BaseModel
) -> Dict[str, Any]:
    day = parse_date_or_400(day_str, "day")
    try:
        entry = await get_or_create_daily_entry(supabase, ctx, day)
        return await upsert_record(supabase, ctx, kind, entry["id"], _payload(body))
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)


async def _add_for_day(
    supabase: AsyncClient, ctx: PatientContext, day_str: str, kind: str, body: BaseModel
) -> Dict[str, Any]:
    day = parse_date_or_400(day_str, "day")
    try:
        entry = await get_or_create_daily_entry(supabase, ctx, day)
        record = await add_record(supabase, ctx, kind, entry["id"], _payload(body))
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)
    logger.debug("Added %s for patient=%s on %s", kind, hash_user_id_for_logging(ctx.patient_id), day)
    return record


@router.get("/daily/{day}", response_model=DailyEntryView)
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def read_daily_entry(
    request: Request,
    day: str,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """
    Everything recorded on ``day``, creating the daily entry on first view.

    ``editable`` is true only for the patient themself, within their edit
    window. It is advisory: writes are not refused outside the window.
    """
    target = parse_date_or_400(day, "day")
    try:
        config = await get_patient_config(supabase, ctx)
        bundle = await get_daily_entry_bundle(supabase, ctx, target)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)

    editable = not ctx.read_only and is_within_edit_window(config, target, date.today())
    return DailyEntryView(bundle=bundle, editable=editable, viewer_role=ctx.viewer_role)


@router.patch("/daily-entries/{entry_id}", response_model=DailyEntry)
@limiter.limit(WRITE_RATE_LIMIT)
async def patch_daily_entry(
    request: Request,
    entry_id: str,
    body: DailyEntryUpdate,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Update energy, mood, reflection or cycle day. Only sent fields change."""
    validate_uuid_or_400(entry_id, "entry_id")
    try:
        row = await update_daily_entry(supabase, ctx, entry_id, body.model_dump(exclude_unset=True))
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Daily entry not found: {entry_id}")
    return row


@router.put("/daily/{day}/sleep-block")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_sleep_block(
    request: Request, day: str, body: SleepBlockIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "sleep_block", body)


@router.put("/daily/{day}/early-morning")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_early_morning(
    request: Request, day: str, body: EarlyMorningIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "early_morning", body)


@router.put("/daily/{day}/fluid-totals")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_fluid_totals(
    request: Request, day: str, body: FluidTotalsIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "fluid_totals", body)


@router.put("/daily/{day}/regimen-note")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_regimen_note(
    request: Request, day: str, body: RegimenNoteIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "regimen_note", body)


@router.put("/daily/{day}/formulation-intakes")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_formulation_intake(
    request: Request, day: str, body: FormulationIntakeIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "formulation_intake", body)


@router.put("/daily/{day}/treatment-completions")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_treatment_completion(
    request: Request, day: str, body: TreatmentCompletionIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _upsert_for_day(supabase, ctx, day, "treatment_completion", body)


@router.put("/daily/{day}/cycle-log")
@limiter.limit(WRITE_RATE_LIMIT)
async def put_cycle_log(
    request: Request, day: str, body: CycleLogIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """
    Write the day's cycle log. Without an explicit id the existing log for
    the day is updated, so a day never gains a second cycle log this way.
    """
    target = parse_date_or_400(day, "day")
    payload = _payload(body)
    try:
        entry = await get_or_create_daily_entry(supabase, ctx, target)
        if "id" not in payload:
            log = await get_or_create_cycle_log(supabase, ctx, entry["id"])
            payload["id"] = log["id"]
        return await upsert_record(supabase, ctx, "cycle_log", entry["id"], payload)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)


@router.post("/daily/{day}/food-events", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_food_event(
    request: Request, day: str, body: FoodEventIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "food_event", body)


@router.post("/daily/{day}/bowel-movements", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_bowel_movement(
    request: Request, day: str, body: BowelMovementIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "bowel_movement", body)


@router.post("/daily/{day}/exercise-events", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_exercise_event(
    request: Request, day: str, body: ExerciseEventIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "exercise_event", body)


@router.post("/daily/{day}/vitals", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_vital_reading(
    request: Request, day: str, body: VitalReadingIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "vital_reading", body)


@router.post("/daily/{day}/medications", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_medication_intake(
    request: Request, day: str, body: MedicationIntakeIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "medication_intake", body)


@router.post("/daily/{day}/symptoms", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def post_symptom_log(
    request: Request, day: str, body: SymptomLogIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    return await _add_for_day(supabase, ctx, day, "symptom_log", body)


@router.delete("/{collection}/{record_id}", status_code=204)
@limiter.limit(WRITE_RATE_LIMIT)
async def delete_event_record(
    request: Request,
    collection: str,
    record_id: str,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Delete one food, bowel, exercise, vital, medication or symptom record."""
    kind = DELETABLE_COLLECTIONS.get(collection)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    validate_uuid_or_400(record_id, "record_id")

    try:
        deleted = await delete_record(supabase, ctx, kind, record_id)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    logger.info("Deleted %s for patient=%s", kind, hash_user_id_for_logging(ctx.patient_id))

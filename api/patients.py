# api/patients.py
"""
Patient-scoped lookups: configuration, regimen for a date, saved cycle
symptoms and cycle log comments.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from supabase import AsyncClient

from api.dependencies import get_patient_context, get_supabase_client
from api.rate_limiter import limiter, DATA_ACCESS_RATE_LIMIT, WRITE_RATE_LIMIT
from api.schemas.daily import PatientConfig
from api.schemas.requests import CycleCommentIn, CycleSymptomIn
from api.utils import handle_data_access_error, parse_date_or_400, validate_uuid_or_400
from services.context import PatientContext
from services.errors import DataAccessError
from services.patient_config import get_patient_config
from services.records import (
    CYCLE_SYMPTOM_CATEGORIES,
    add_cycle_comment,
    add_cycle_symptom,
    get_cycle_saved_symptoms,
    get_regimen_for_date,
)

logger = logging.getLogger("myayu-api.patients")

router = APIRouter(prefix="/patients/{patient_id}", tags=["Patients"])


@router.get("/config", response_model=PatientConfig)
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def read_patient_config(
    request: Request,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Tracking window, edit window and cycle tracking flag."""
    try:
        return await get_patient_config(supabase, ctx)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)


@router.get("/regimen/{day}")
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def read_regimen_for_date(
    request: Request,
    day: str,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Formulations and treatments active on ``day``."""
    target = parse_date_or_400(day, "day")
    try:
        regimen = await get_regimen_for_date(supabase, ctx, target)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)
    return {"date": target.isoformat(), **regimen}


@router.get("/cycle-symptoms")
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def list_cycle_symptoms(
    request: Request,
    category: Optional[str] = Query(None, description="cycle_physical or cycle_emotional"),
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    if category is not None and category not in CYCLE_SYMPTOM_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Invalid category: {category}")
    try:
        return await get_cycle_saved_symptoms(supabase, ctx, category)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)


@router.post("/cycle-symptoms", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_cycle_symptom(
    request: Request,
    body: CycleSymptomIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    try:
        return await add_cycle_symptom(supabase, ctx, body.category, body.label)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)


@router.post("/cycle-logs/{cycle_log_id}/comments", status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_cycle_comment(
    request: Request,
    cycle_log_id: str,
    body: CycleCommentIn,
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Attach a patient or clinician comment to a cycle log."""
    validate_uuid_or_400(cycle_log_id, "cycle_log_id")
    validate_uuid_or_400(body.author_id, "author_id")
    try:
        comment = await add_cycle_comment(
            supabase, ctx, cycle_log_id, body.author_type, body.author_id, body.text
        )
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)
    if comment is None:
        raise HTTPException(status_code=404, detail=f"Cycle log not found: {cycle_log_id}")
    logger.info("Cycle comment added by %s", body.author_type)
    return comment

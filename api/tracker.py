# api/tracker.py
"""
Tracker dashboard endpoints: daily lens and cycle/combined lens ranges.
"""
import logging
from datetime import date
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request
from supabase import AsyncClient

from api.dependencies import get_patient_context, get_supabase_client
from api.rate_limiter import limiter, DATA_ACCESS_RATE_LIMIT
from api.schemas.summaries import CycleRangeResponse, RangeResponse
from api.utils import (
    handle_data_access_error,
    hash_user_id_for_logging,
    parse_date_or_400,
    validate_range_or_400,
)
from services.context import PatientContext
from services.errors import DataAccessError
from services.patient_config import default_range, get_patient_config
from services.summaries import get_cycle_range, get_daily_summary_range

logger = logging.getLogger("myayu-api.tracker")

router = APIRouter(prefix="/patients/{patient_id}/tracker", tags=["Tracker"])


async def _resolve_range(
    supabase: AsyncClient,
    ctx: PatientContext,
    from_date: Optional[str],
    to_date: Optional[str],
) -> Tuple[date, date]:
    """
    Explicit dates win. A missing bound is filled from the patient's
    tracking window ending today.
    """
    if from_date and to_date:
        start = parse_date_or_400(from_date, "from_date")
        end = parse_date_or_400(to_date, "to_date")
    else:
        config = await get_patient_config(supabase, ctx)
        default_start, default_end = default_range(config, date.today())
        start = parse_date_or_400(from_date, "from_date") if from_date else default_start
        end = parse_date_or_400(to_date, "to_date") if to_date else default_end
    validate_range_or_400(start, end)
    return start, end


@router.get("/summary", response_model=RangeResponse)
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def read_daily_summaries(
    request: Request,
    from_date: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    to_date: Optional[str] = Query(None, description="Last day, YYYY-MM-DD"),
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """
    Daily lens: one summary per logged day in range, newest first.

    Without explicit dates the range is the patient's tracking window
    ending today.
    """
    try:
        start, end = await _resolve_range(supabase, ctx, from_date, to_date)
        days = await get_daily_summary_range(supabase, ctx, start, end)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)

    logger.info(
        "Daily summaries patient=%s range=%s..%s days=%d",
        hash_user_id_for_logging(ctx.patient_id), start, end, len(days)
    )
    return RangeResponse(
        patientId=ctx.patient_id, fromDate=start, toDate=end, count=len(days), days=days
    )


@router.get("/cycle", response_model=CycleRangeResponse)
@limiter.limit(DATA_ACCESS_RATE_LIMIT)
async def read_cycle_range(
    request: Request,
    from_date: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    to_date: Optional[str] = Query(None, description="Last day, YYYY-MM-DD"),
    ctx: PatientContext = Depends(get_patient_context),
    supabase: AsyncClient = Depends(get_supabase_client),
):
    """Cycle and combined lenses: cycle log projection per logged day."""
    try:
        start, end = await _resolve_range(supabase, ctx, from_date, to_date)
        days = await get_cycle_range(supabase, ctx, start, end)
    except DataAccessError as e:
        handle_data_access_error(e, ctx.patient_id)

    logger.info(
        "Cycle range patient=%s range=%s..%s days=%d",
        hash_user_id_for_logging(ctx.patient_id), start, end, len(days)
    )
    return CycleRangeResponse(
        patientId=ctx.patient_id, fromDate=start, toDate=end, count=len(days), days=days
    )

"""
Patient configuration: tracking window and edit window.
"""
import logging
from datetime import date, timedelta
from typing import Tuple

from api.schemas.daily import PatientConfig
from services.context import PatientContext
from services.db import fetch_first

logger = logging.getLogger("myayu-api.patient_config")


async def get_patient_config(supabase, ctx: PatientContext) -> PatientConfig:
    """
    Load the patient's config row, falling back to the column defaults
    (30-day tracking window, 7-day edit window) when none exists.
    """
    row = await fetch_first(
        supabase.table("patient_configs").select("*").eq("patient_id", ctx.patient_id).limit(1),
        "get_patient_config",
    )
    if row is None:
        logger.info("No patient_configs row, using defaults")
        return PatientConfig(patient_id=ctx.patient_id)
    return PatientConfig(**row)


def default_range(config: PatientConfig, today: date) -> Tuple[date, date]:
    """Dashboard range ending today, ``tracking_window_days`` long."""
    return today - timedelta(days=config.tracking_window_days), today


def is_within_edit_window(config: PatientConfig, day: date, today: date) -> bool:
    """
    Whether the patient may still edit ``day``.

    Future days and days older than ``edit_window_days`` are not editable.
    Informational only: nothing in the data layer enforces it.
    """
    age = (today - day).days
    return 0 <= age <= config.edit_window_days


__all__ = ["get_patient_config", "default_range", "is_within_edit_window"]

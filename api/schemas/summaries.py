"""
Pydantic schemas for the tracker dashboard projections.
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class DailySummary(BaseModel):
    """
    One day in the daily lens.

    Energy and mood pass through from the daily entry; counts and adherence
    are computed from that day's records.
    """

    date: date
    energy_physical: Optional[int] = None
    energy_mental: Optional[int] = None
    energy_emotional: Optional[int] = None
    energy_drive: Optional[int] = None
    overall_mood: Optional[int] = None
    food_count: int = Field(0, ge=0)
    bowel_movement_count: int = Field(0, ge=0)
    exercise_minutes: int = Field(0, ge=0)
    formulation_adherence_percent: int = Field(0, ge=0, le=100)
    treatment_adherence_percent: int = Field(0, ge=0, le=100)
    has_cycle_log: bool = False


class CycleDaySummary(BaseModel):
    """One day in the cycle and combined lenses."""

    date: date
    cycle_day: Optional[int] = None
    physical_symptom_keys: Optional[List[str]] = None
    emotional_symptom_keys: Optional[List[str]] = None
    bleeding_quantity: Optional[str] = None
    blood_color: Optional[str] = None
    blood_volume: Optional[str] = None
    clots: Optional[bool] = None
    mucus: Optional[bool] = None
    energy_physical: Optional[int] = None
    energy_mental: Optional[int] = None
    energy_emotional: Optional[int] = None
    energy_drive: Optional[int] = None
    overall_mood: Optional[int] = None
    formulation_adherence_percent: int = Field(0, ge=0, le=100)
    treatment_adherence_percent: int = Field(0, ge=0, le=100)


class RangeResponse(BaseModel):
    """Envelope for range endpoints: the resolved range plus the rows."""

    patientId: str
    fromDate: date
    toDate: date
    count: int
    days: List[DailySummary]


class CycleRangeResponse(BaseModel):
    patientId: str
    fromDate: date
    toDate: date
    count: int
    days: List[CycleDaySummary]

"""
Request bodies for the write endpoints.

Only basic constraints are checked here (score ranges, enumerations); the
database column checks remain the source of truth.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from api.schemas.daily import (
    AuthorType,
    FormulationStatus,
    MealType,
    TreatmentStatus,
    VitalType,
)

Score = Optional[int]


def _score():
    return Field(None, ge=0, le=10)


class DailyEntryUpdate(BaseModel):
    energy_physical: Score = _score()
    energy_mental: Score = _score()
    energy_emotional: Score = _score()
    energy_drive: Score = _score()
    overall_mood: Score = _score()
    reflection: Optional[str] = None
    cycle_day: Optional[int] = Field(None, ge=0)


class UpsertBody(BaseModel):
    """Base for singular records: pass ``id`` to update an existing row."""

    id: Optional[str] = None


class SleepBlockIn(UpsertBody):
    fell_asleep_at: Optional[datetime] = None
    woke_up_at: Optional[datetime] = None
    got_up_at: Optional[datetime] = None
    quality: Optional[str] = None
    details: Optional[str] = None
    feeling_on_waking: Optional[str] = None


class EarlyMorningIn(UpsertBody):
    hygiene_routine: Optional[str] = None
    first_drink: Optional[str] = None
    first_drink_time: Optional[datetime] = None


class FluidTotalsIn(UpsertBody):
    total_water_oz: Optional[float] = Field(None, ge=0)
    total_caffeine_oz: Optional[float] = Field(None, ge=0)
    total_other_oz: Optional[float] = Field(None, ge=0)


class CycleLogIn(UpsertBody):
    cycle_day: Optional[int] = Field(None, ge=0)
    physical_symptom_keys: Optional[List[str]] = None
    emotional_symptom_keys: Optional[List[str]] = None
    bleeding_quantity: Optional[str] = None
    blood_color: Optional[str] = None
    blood_volume: Optional[str] = None
    clots: Optional[bool] = None
    mucus: Optional[bool] = None


class FormulationIntakeIn(UpsertBody):
    regimen_formulation_id: str
    status: Optional[FormulationStatus] = None
    notes: Optional[str] = None


class TreatmentCompletionIn(UpsertBody):
    regimen_treatment_id: str
    status: Optional[TreatmentStatus] = None
    notes: Optional[str] = None


class RegimenNoteIn(UpsertBody):
    note: Optional[str] = None
    reply: Optional[str] = None
    reply_from: Optional[str] = None


class FoodEventIn(BaseModel):
    time: Optional[datetime] = None
    meal_type: Optional[MealType] = None
    description: Optional[str] = None
    saved_food_id: Optional[str] = None


class BowelMovementIn(BaseModel):
    time: Optional[datetime] = None
    details: Optional[str] = None


class ExerciseEventIn(BaseModel):
    start_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    exercise_type: Optional[str] = None
    saved_exercise_id: Optional[str] = None
    felt_physical: Score = _score()
    felt_mental: Score = _score()
    felt_emotional: Score = _score()


class VitalReadingIn(BaseModel):
    type: VitalType
    value: float
    aux_value: Optional[float] = None
    unit: Optional[str] = None
    measured_at: Optional[datetime] = None


class MedicationIntakeIn(BaseModel):
    time: Optional[datetime] = None
    name: Optional[str] = None
    saved_med_id: Optional[str] = None
    dose: Optional[str] = None
    notes: Optional[str] = None


class SymptomLogIn(BaseModel):
    time: Optional[datetime] = None
    label: Optional[str] = None
    saved_symptom_id: Optional[str] = None
    severity: Score = _score()
    notes: Optional[str] = None


class CycleCommentIn(BaseModel):
    author_type: AuthorType
    author_id: str
    text: str = Field(..., min_length=1)


class CycleSymptomIn(BaseModel):
    category: str = Field(..., pattern="^(cycle_physical|cycle_emotional)$")
    label: str = Field(..., min_length=1)

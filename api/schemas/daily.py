"""
Pydantic models for the daily tracking tables.

Each model mirrors one table. Columns not listed here are kept (extra="allow")
so a select('*') never loses data the UI may want.
"""
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Score = Optional[int]

MealType = Literal["breakfast", "lunch", "dinner", "snack", "other"]
VitalType = Literal["blood_glucose", "blood_pressure", "early_am_temp", "pm_temp", "weight"]
SymptomCategory = Literal["general", "cycle_physical", "cycle_emotional"]
AuthorType = Literal["patient", "clinician"]
FormulationStatus = Literal["taken", "skipped", "partial"]
TreatmentStatus = Literal["completed", "skipped", "partial"]


class Record(BaseModel):
    """Common columns of every tracking table."""

    model_config = ConfigDict(extra="allow")

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DayRecord(Record):
    """A record hanging off a daily entry."""

    daily_entry_id: str
    patient_id: str


class PatientConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    patient_id: str
    tracking_window_days: int = Field(30, ge=1)
    edit_window_days: int = Field(7, ge=0)
    cycle_tracking_enabled: bool = True


class DailyEntry(Record):
    patient_id: str
    date: date
    energy_physical: Score = None
    energy_mental: Score = None
    energy_emotional: Score = None
    energy_drive: Score = None
    overall_mood: Score = None
    reflection: Optional[str] = None
    cycle_day: Optional[int] = None


class SleepBlock(DayRecord):
    fell_asleep_at: Optional[datetime] = None
    woke_up_at: Optional[datetime] = None
    got_up_at: Optional[datetime] = None
    quality: Optional[str] = None
    details: Optional[str] = None
    feeling_on_waking: Optional[str] = None


class EarlyMorningEntry(DayRecord):
    hygiene_routine: Optional[str] = None
    first_drink: Optional[str] = None
    first_drink_time: Optional[datetime] = None


class FoodEvent(DayRecord):
    time: Optional[datetime] = None
    meal_type: Optional[MealType] = None
    description: Optional[str] = None
    saved_food_id: Optional[str] = None


class DailyFluidTotals(DayRecord):
    total_water_oz: Optional[float] = None
    total_caffeine_oz: Optional[float] = None
    total_other_oz: Optional[float] = None


class BowelMovement(DayRecord):
    time: Optional[datetime] = None
    details: Optional[str] = None


class ExerciseEvent(DayRecord):
    start_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    exercise_type: Optional[str] = None
    saved_exercise_id: Optional[str] = None
    felt_physical: Score = None
    felt_mental: Score = None
    felt_emotional: Score = None


class VitalReading(DayRecord):
    type: VitalType
    value: float
    aux_value: Optional[float] = None
    unit: Optional[str] = None
    measured_at: Optional[datetime] = None


class MedicationIntake(DayRecord):
    time: Optional[datetime] = None
    name: Optional[str] = None
    saved_med_id: Optional[str] = None
    dose: Optional[str] = None
    notes: Optional[str] = None


class SymptomLog(DayRecord):
    time: Optional[datetime] = None
    label: Optional[str] = None
    saved_symptom_id: Optional[str] = None
    severity: Score = None
    notes: Optional[str] = None


class CycleLog(DayRecord):
    cycle_day: Optional[int] = None
    physical_symptom_keys: Optional[List[str]] = None
    emotional_symptom_keys: Optional[List[str]] = None
    bleeding_quantity: Optional[str] = None
    blood_color: Optional[str] = None
    blood_volume: Optional[str] = None
    clots: Optional[bool] = None
    mucus: Optional[bool] = None


class CycleComment(Record):
    cycle_log_id: str
    author_type: AuthorType
    author_id: str
    text: str


class RegimenFormulation(Record):
    patient_id: str
    name: str
    when_label: Optional[str] = None
    dose: Optional[str] = None
    with_text: Optional[str] = None
    start_date: Optional[date] = None
    stop_date: Optional[date] = None
    instructions: Optional[str] = None


class RegimenTreatment(Record):
    patient_id: str
    name: str
    when_label: Optional[str] = None
    body_region: Optional[str] = None
    instructions: Optional[str] = None
    start_date: Optional[date] = None
    stop_date: Optional[date] = None


class RegimenFormulationIntake(DayRecord):
    regimen_formulation_id: str
    status: Optional[FormulationStatus] = None
    notes: Optional[str] = None


class RegimenTreatmentCompletion(DayRecord):
    regimen_treatment_id: str
    status: Optional[TreatmentStatus] = None
    notes: Optional[str] = None


class RegimenNote(DayRecord):
    note: Optional[str] = None
    reply: Optional[str] = None
    reply_from: Optional[str] = None


class SavedItem(Record):
    """Row of saved_foods, saved_exercises or saved_meds."""

    patient_id: str
    label: str
    notes: Optional[str] = None


class SavedSymptom(Record):
    patient_id: str
    label: str
    category: SymptomCategory


class DailyEntryBundle(BaseModel):
    """
    Everything recorded for one patient on one date.

    List fields are always lists (possibly empty); singular records are None
    when absent.
    """

    daily_entry: DailyEntry
    sleep_blocks: List[SleepBlock] = []
    early_morning: Optional[EarlyMorningEntry] = None
    fluid_totals: Optional[DailyFluidTotals] = None
    food_events: List[FoodEvent] = []
    bowel_movements: List[BowelMovement] = []
    exercise_events: List[ExerciseEvent] = []
    vital_readings: List[VitalReading] = []
    medication_intakes: List[MedicationIntake] = []
    symptom_logs: List[SymptomLog] = []
    cycle_log: Optional[CycleLog] = None
    cycle_comments: List[CycleComment] = []
    regimen_formulations: List[RegimenFormulation] = []
    formulation_intakes: List[RegimenFormulationIntake] = []
    regimen_treatments: List[RegimenTreatment] = []
    treatment_completions: List[RegimenTreatmentCompletion] = []
    regimen_notes: Optional[RegimenNote] = None
    saved_foods: List[SavedItem] = []
    saved_exercises: List[SavedItem] = []
    saved_meds: List[SavedItem] = []
    saved_symptoms: List[SavedSymptom] = []


class DailyEntryView(BaseModel):
    """Bundle as served to the daily entry page."""

    bundle: DailyEntryBundle
    editable: bool
    viewer_role: str

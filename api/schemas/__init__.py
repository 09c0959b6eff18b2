"""Pydantic schemas for API models."""
from .daily import (
    CycleComment,
    CycleLog,
    DailyEntry,
    DailyEntryBundle,
    DailyEntryView,
    PatientConfig,
)
from .summaries import (
    CycleDaySummary,
    CycleRangeResponse,
    DailySummary,
    RangeResponse,
)

__all__ = [
    "CycleComment",
    "CycleLog",
    "DailyEntry",
    "DailyEntryBundle",
    "DailyEntryView",
    "PatientConfig",
    "CycleDaySummary",
    "CycleRangeResponse",
    "DailySummary",
    "RangeResponse",
]

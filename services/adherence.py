"""
Regimen adherence calculations.

Pure functions shared by the daily summary and the cycle projection so both
dashboard lenses always report the same percentages.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from services.db import as_date

FORMULATION_COUNTED_STATUSES = frozenset({"taken", "partial"})
TREATMENT_COUNTED_STATUSES = frozenset({"completed", "partial"})


def is_active_on(item: Mapping[str, Any], day: date) -> bool:
    """
    Whether a regimen item's validity interval contains ``day``.

    Both bounds are inclusive; a missing start or stop date leaves that side
    of the interval open.
    """
    start = as_date(item.get("start_date"))
    stop = as_date(item.get("stop_date"))
    if start is not None and start > day:
        return False
    if stop is not None and stop < day:
        return False
    return True


def active_item_ids(catalog: Iterable[Mapping[str, Any]], day: date) -> Set[str]:
    return {item["id"] for item in catalog if is_active_on(item, day)}


def adherence_percent(counted: int, active: int) -> int:
    """
    Percentage of active items counted as done, rounded half up.

    Integer arithmetic keeps .5 cases exact (1/8 -> 13). Zero active items
    yields 0.
    """
    if active <= 0:
        return 0
    return (200 * counted + active) // (2 * active)


def day_adherence(
    day: date,
    catalog: Iterable[Mapping[str, Any]],
    day_rows: Iterable[Mapping[str, Any]],
    item_key: str,
    counted_statuses: frozenset,
) -> int:
    """
    Adherence for one day.

    Args:
        day: The probed date
        catalog: Regimen definitions with id, start_date, stop_date
        day_rows: That day's intake/completion rows
        item_key: Foreign key column pointing at the catalog
            (regimen_formulation_id or regimen_treatment_id)
        counted_statuses: Statuses that count as adherent
    """
    active_ids = active_item_ids(catalog, day)
    # Each active item counts at most once, even if a day holds duplicate rows
    counted = {
        row.get(item_key)
        for row in day_rows
        if row.get(item_key) in active_ids and row.get("status") in counted_statuses
    }
    return adherence_percent(len(counted), len(active_ids))


def adherence_by_entry(
    entries: Iterable[Mapping[str, Any]],
    catalog: List[Mapping[str, Any]],
    rows: Iterable[Mapping[str, Any]],
    item_key: str,
    counted_statuses: frozenset,
) -> Dict[str, int]:
    """
    Map each daily entry id to its adherence percentage.

    Rows are matched to entries by daily_entry_id; each entry is evaluated
    against the items active on that entry's own date.
    """
    rows_by_entry: Dict[str, List[Mapping[str, Any]]] = {}
    for row in rows:
        rows_by_entry.setdefault(row.get("daily_entry_id"), []).append(row)

    result: Dict[str, int] = {}
    for entry in entries:
        day: Optional[date] = as_date(entry.get("date"))
        result[entry["id"]] = day_adherence(
            day,
            catalog,
            rows_by_entry.get(entry["id"], []),
            item_key,
            counted_statuses,
        )
    return result


__all__ = [
    "FORMULATION_COUNTED_STATUSES",
    "TREATMENT_COUNTED_STATUSES",
    "is_active_on",
    "active_item_ids",
    "adherence_percent",
    "day_adherence",
    "adherence_by_entry",
]

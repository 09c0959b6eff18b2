"""
Thin helpers around the Supabase query builder.

All services go through these so that every failed query is logged with the
operation that issued it and surfaces as a DataAccessError.
"""
import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from services.errors import DataAccessError

logger = logging.getLogger("myayu-api.db")

Row = Dict[str, Any]


async def fetch_rows(query, operation: str) -> List[Row]:
    """
    Execute a query builder chain and return its rows.

    Args:
        query: Supabase query builder, not yet executed
        operation: Operation name used in logs and in the raised error

    Returns:
        List of row dicts (empty when the query matched nothing)

    Raises:
        DataAccessError: if the query fails for any reason
    """
    try:
        response = await query.execute()
    except Exception as e:
        logger.error("Query failed: operation=%s error=%s", operation, e)
        raise DataAccessError(operation, e) from e
    return list(response.data or [])


async def fetch_first(query, operation: str) -> Optional[Row]:
    """Like fetch_rows, but returns only the first row or None."""
    rows = await fetch_rows(query, operation)
    return rows[0] if rows else None


async def gather_all(*awaitables) -> List[Any]:
    """
    Run independent fetches concurrently and wait for all of them.

    If any failed, the first failure in argument order is raised after every
    fetch has settled, so no result is half-used.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def as_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Coerce a PostgREST date value ("YYYY-MM-DD") into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


__all__ = ["Row", "fetch_rows", "fetch_first", "gather_all", "as_date"]

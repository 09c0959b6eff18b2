# api/utils.py
"""
Utility functions for the API.
"""
import uuid
import hashlib
import logging
from datetime import date
from typing import NoReturn, Optional

from fastapi import HTTPException

from services.errors import DataAccessError

logger = logging.getLogger("myayu-api.utils")

# PostgREST error codes
POSTGREST_UUID_SYNTAX_ERROR = '22P02'  # invalid_text_representation


def hash_user_id_for_logging(user_id: str) -> str:
    """
    Hash a patient ID for privacy-preserving logging.

    Args:
        user_id: The ID to hash

    Returns:
        First 8 characters of SHA-256 hash
    """
    return hashlib.sha256(user_id.encode()).hexdigest()[:8]


def validate_uuid_or_400(value: str, param_name: str = "id") -> str:
    """
    Validates that a string is a valid UUID format.

    Raises:
        HTTPException: 400 Bad Request if the value is not a valid UUID
    """
    try:
        uuid.UUID(value)
        return value
    except (ValueError, TypeError, AttributeError):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid UUID format for {param_name}: {value}"
        )


def parse_date_or_400(value: Optional[str], param_name: str = "date") -> date:
    """
    Parse a calendar date in YYYY-MM-DD form.

    Raises:
        HTTPException: 400 Bad Request if the value is missing or malformed
    """
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid date for {param_name}: {value}. Expected YYYY-MM-DD"
        )


def validate_range_or_400(from_date: date, to_date: date) -> None:
    if from_date > to_date:
        raise HTTPException(
            status_code=400,
            detail=f"from_date ({from_date}) must not be after to_date ({to_date})"
        )


def handle_data_access_error(e: DataAccessError, patient_id: str) -> NoReturn:
    """
    Translate a failed data access into an HTTPException.

    Maps PostgREST syntax errors (22P02, e.g. a malformed id reaching the
    database) to 400 and auth failures to 401/403. Everything else becomes
    500 naming the failed operation, never the raw database message.

    Raises:
        HTTPException: always
    """
    user_hash = hash_user_id_for_logging(patient_id)
    error_code = e.code

    if error_code == POSTGREST_UUID_SYNTAX_ERROR:
        logger.warning(f"PostgREST syntax error in {e.operation} for patient={user_hash}: {e}")
        raise HTTPException(
            status_code=400,
            detail="Invalid identifier format in database query"
        )

    if error_code == '401':
        logger.error(f"PostgREST Auth Error (401) in {e.operation} for patient={user_hash}: {e}")
        raise HTTPException(
            status_code=401,
            detail="Unauthorized: Database access denied. Check API configuration."
        )

    if error_code == '403':
        logger.error(f"PostgREST Permission Error (403) in {e.operation} for patient={user_hash}: {e}")
        raise HTTPException(
            status_code=403,
            detail="Forbidden: Insufficient permissions for this operation."
        )

    logger.error(f"Data access failed in {e.operation} for patient={user_hash}: {e}")
    raise HTTPException(status_code=500, detail=f"Database error: {e.operation}")

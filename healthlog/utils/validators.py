"""
Validation utilities
"""
import calendar
from datetime import date, datetime
from typing import Any, Optional
from fastapi import HTTPException


def require_fields(message: str, *values: Any) -> None:
    """
    Reject the request when any of the values is missing or blank

    Raises:
        HTTPException: 400 with the given message
    """
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise HTTPException(status_code=400, detail=message)


def parse_date(value: Optional[str], field: str = "date") -> date:
    """
    Parse a YYYY-MM-DD string

    Raises:
        HTTPException: If the value is missing or malformed
    """
    if not value:
        raise HTTPException(status_code=400, detail=f"Missing {field}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} format (use YYYY-MM-DD)")


def parse_datetime(value: Optional[str], field: str = "datetime") -> datetime:
    """Parse an ISO-8601 date-time string ("YYYY-MM-DD HH:MM[:SS]" or with a T)"""
    if not value:
        raise HTTPException(status_code=400, detail=f"Missing {field}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} format")


def validate_choice(value: Optional[str], choices: tuple, field: str) -> str:
    """
    Validate an enumerated value

    Raises:
        HTTPException: If the value is not one of the choices
    """
    if value not in choices:
        allowed = ", ".join(f"'{c}'" for c in choices)
        raise HTTPException(status_code=400, detail=f"Invalid {field}. Must be one of {allowed}")
    return value


def validate_year_month(year: int, month: int) -> tuple:
    """
    Validate a calendar month

    Returns:
        (first_day, last_day) of the month
    """
    if month < 1 or month > 12 or year < 1900 or year > 9999:
        raise HTTPException(status_code=400, detail="Invalid year or month")

    _, days_in_month = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, days_in_month)


def like_pattern(term: str) -> str:
    """Wrap a search term for a LIKE comparison, escaping wildcards"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

from __future__ import annotations

from datetime import date

import pytest
from fastapi import HTTPException

from healthlog.utils.validators import (
    like_pattern,
    parse_date,
    require_fields,
    validate_choice,
    validate_year_month,
)


def test_require_fields_rejects_blank_values():
    require_fields("ok", "a", 0, False)
    with pytest.raises(HTTPException) as exc:
        require_fields("Name is required", "a", "   ")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Name is required"


def test_parse_date_accepts_datetime_prefix():
    assert parse_date("2024-03-05") == date(2024, 3, 5)
    assert parse_date("2024-03-05T10:00:00.000Z") == date(2024, 3, 5)
    with pytest.raises(HTTPException):
        parse_date("05/03/2024")


def test_validate_choice():
    assert validate_choice("lend", ("lend", "borrow"), "loan_type") == "lend"
    with pytest.raises(HTTPException) as exc:
        validate_choice("gift", ("lend", "borrow"), "loan_type")
    assert exc.value.status_code == 400


def test_validate_year_month_bounds():
    assert validate_year_month(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert validate_year_month(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))
    assert validate_year_month(9999, 12) == (date(9999, 12, 1), date(9999, 12, 31))
    with pytest.raises(HTTPException):
        validate_year_month(2024, 13)


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"

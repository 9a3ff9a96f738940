"""
Menstrual cycle prediction - average-and-offset over the recorded history
"""
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Sequence

DEFAULT_PERIOD_LENGTH = 5
LUTEAL_PHASE_DAYS = 14
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1

INSUFFICIENT_HISTORY_MESSAGE = (
    "Not enough history to predict yet. Please record at least two cycles."
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() would go to even)"""
    return int(math.floor(value + 0.5))


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def empty_prediction() -> Dict[str, Any]:
    return {
        "averageCycleLength": 0,
        "averagePeriodLength": 0,
        "nextPeriodStartDate": None,
        "ovulationDate": None,
        "fertileWindow": None,
        "message": INSUFFICIENT_HISTORY_MESSAGE,
    }


def cycle_lengths(starts: Sequence[date]) -> List[int]:
    """Days between consecutive period starts"""
    return [abs((starts[i + 1] - starts[i]).days) for i in range(len(starts) - 1)]


def period_lengths(records: Sequence[Dict[str, Any]]) -> List[int]:
    """Inclusive length of every record that has an end date"""
    lengths = []
    for record in records:
        if not record.get("end_date"):
            continue
        start = _as_date(record["start_date"])
        end = _as_date(record["end_date"])
        lengths.append(abs((end - start).days) + 1)
    return lengths


def predict_cycle(records: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Predict the next period, ovulation day and fertile window.

    Args:
        records: dicts with start_date and optional end_date, any order

    Returns:
        Response payload; see empty_prediction() for the insufficient-data shape
    """
    if len(records) < 2:
        return empty_prediction()

    ordered = sorted(records, key=lambda r: _as_date(r["start_date"]))
    starts = [_as_date(r["start_date"]) for r in ordered]

    cycles = cycle_lengths(starts)
    if not cycles:
        return empty_prediction()

    average_cycle = round_half_up(sum(cycles) / len(cycles))

    periods = period_lengths(ordered)
    if periods:
        average_period = round_half_up(sum(periods) / len(periods))
    else:
        average_period = DEFAULT_PERIOD_LENGTH

    next_start = starts[-1] + timedelta(days=average_cycle)
    ovulation = next_start - timedelta(days=LUTEAL_PHASE_DAYS)
    fertile_start = ovulation - timedelta(days=FERTILE_DAYS_BEFORE_OVULATION)
    fertile_end = ovulation + timedelta(days=FERTILE_DAYS_AFTER_OVULATION)

    return {
        "averageCycleLength": average_cycle,
        "averagePeriodLength": average_period,
        "nextPeriodStartDate": next_start.isoformat(),
        "ovulationDate": ovulation.isoformat(),
        "fertileWindow": {
            "start": fertile_start.isoformat(),
            "end": fertile_end.isoformat(),
        },
    }

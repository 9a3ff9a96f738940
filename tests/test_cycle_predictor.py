from __future__ import annotations

from datetime import date

from healthlog.services.cycle_predictor import (
    DEFAULT_PERIOD_LENGTH,
    cycle_lengths,
    period_lengths,
    predict_cycle,
    round_half_up,
)


def test_fewer_than_two_records_returns_empty_prediction():
    for records in ([], [{"start_date": date(2024, 1, 1), "end_date": None}]):
        prediction = predict_cycle(records)
        assert prediction["averageCycleLength"] == 0
        assert prediction["averagePeriodLength"] == 0
        assert prediction["nextPeriodStartDate"] is None
        assert prediction["ovulationDate"] is None
        assert prediction["fertileWindow"] is None
        assert prediction["message"]


def test_prediction_from_three_cycles():
    records = [
        {"start_date": date(2024, 1, 1), "end_date": date(2024, 1, 5)},
        {"start_date": date(2024, 1, 29), "end_date": date(2024, 2, 2)},
        {"start_date": date(2024, 2, 26), "end_date": date(2024, 3, 1)},
    ]

    prediction = predict_cycle(records)

    assert prediction["averageCycleLength"] == 28
    assert prediction["averagePeriodLength"] == 5
    assert prediction["nextPeriodStartDate"] == "2024-03-25"
    assert prediction["ovulationDate"] == "2024-03-11"
    assert prediction["fertileWindow"] == {"start": "2024-03-06", "end": "2024-03-12"}
    assert "message" not in prediction


def test_unsorted_input_and_string_dates_are_accepted():
    records = [
        {"start_date": "2024-02-01", "end_date": None},
        {"start_date": "2024-01-01", "end_date": None},
    ]

    prediction = predict_cycle(records)

    assert prediction["averageCycleLength"] == 31
    assert prediction["nextPeriodStartDate"] == "2024-03-03"


def test_period_length_defaults_when_no_record_has_an_end():
    records = [
        {"start_date": date(2024, 1, 1), "end_date": None},
        {"start_date": date(2024, 1, 30), "end_date": None},
    ]
    assert predict_cycle(records)["averagePeriodLength"] == DEFAULT_PERIOD_LENGTH


def test_averages_round_half_up():
    assert round_half_up(28.5) == 29
    assert round_half_up(27.5) == 28
    assert round_half_up(28.49) == 28

    # cycles of 28 and 29 days average to 28.5
    records = [
        {"start_date": date(2024, 1, 1), "end_date": None},
        {"start_date": date(2024, 1, 29), "end_date": None},
        {"start_date": date(2024, 2, 27), "end_date": None},
    ]
    assert predict_cycle(records)["averageCycleLength"] == 29


def test_lengths_are_inclusive_for_periods():
    starts = [date(2024, 1, 1), date(2024, 1, 29)]
    assert cycle_lengths(starts) == [28]
    assert period_lengths([{"start_date": date(2024, 1, 1), "end_date": date(2024, 1, 1)}]) == [1]
    assert period_lengths([{"start_date": date(2024, 1, 1), "end_date": None}]) == []

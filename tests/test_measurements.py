from __future__ import annotations

import logging

import pytest

from rollout_analysis.models import Measurement
from rollout_analysis.transforms.measurements import transform_measurements
from rollout_analysis.transforms.values import MeasurementValueError


def _measurements(*values: str | None) -> list[Measurement]:
    return [
        Measurement(
            phase="Successful",
            value=value,
            started_at=f"2026-01-01T00:0{index}:00Z",
            finished_at=f"2026-01-01T00:0{index}:30Z",
        )
        for index, value in enumerate(values)
    ]


def test_empty_measurements() -> None:
    for measurements in ([], None):
        info = transform_measurements([], measurements)
        assert info.chartable is False
        assert info.min == 0
        assert info.max is None
        assert info.measurements == []


def test_scalar_measurements_track_min_and_max() -> None:
    info = transform_measurements([], _measurements("4", "-2.5", "10.123", ""))

    assert info.chartable is True
    assert info.min == -2.5
    assert info.max == 10.12
    assert [item.chart_value for item in info.measurements] == [4, -2.5, 10.12, None]


def test_first_contribution_sets_max_even_when_negative() -> None:
    info = transform_measurements([], _measurements("-3", "-1"))
    assert info.max == -1
    assert info.min == -3


def test_min_never_rises_above_zero() -> None:
    info = transform_measurements([], _measurements("5", "7"))
    assert info.min == 0
    assert info.max == 7


def test_unchartable_measurement_clears_chartable_but_keeps_all_rows() -> None:
    info = transform_measurements([], _measurements("1", '"text"', "3"))

    assert info.chartable is False
    assert len(info.measurements) == 3
    assert [item.table_value for item in info.measurements] == [1, "text", 3]
    assert info.max == 3


def test_keyed_chart_values_do_not_move_bounds() -> None:
    info = transform_measurements(["0"], _measurements("[4]", "[8]"))

    assert info.chartable is True
    assert info.min == 0
    assert info.max is None
    assert [item.chart_value for item in info.measurements] == [{"0": 4}, {"0": 8}]


def test_output_preserves_order_and_measurement_fields() -> None:
    measurements = _measurements("3", "1", "2")
    info = transform_measurements([], measurements)

    assert [item.measurement for item in info.measurements] == measurements
    payload = info.measurements[0].to_dict()
    assert payload["phase"] == "Successful"
    assert payload["started_at"] == "2026-01-01T00:00:00Z"
    assert payload["value"] == "3"
    assert payload["chart_value"] == 3
    assert payload["table_value"] == 3


def test_invalid_value_propagates_by_default() -> None:
    with pytest.raises(MeasurementValueError):
        transform_measurements([], _measurements("1", "{oops"))


def test_invalid_value_becomes_table_placeholder_when_not_strict(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        info = transform_measurements([], _measurements("1", "{oops", "2"), strict=False)

    assert info.chartable is False
    assert len(info.measurements) == 3
    assert info.measurements[1].table_value == "{oops"
    assert info.measurements[1].chart_value is None
    assert info.max == 2
    assert "could not be decoded" in caplog.text


def test_extreme_numbers_do_not_abort_the_set() -> None:
    huge = "1" + "0" * 400
    info = transform_measurements([], _measurements("1e307", huge, "2"))

    assert info.chartable is False
    assert len(info.measurements) == 3
    assert info.max == 1e307
    assert info.measurements[1].table_value == huge


def test_non_standard_constant_is_table_only_when_not_strict() -> None:
    info = transform_measurements([], _measurements("NaN", "3"), strict=False)

    assert info.measurements[0].table_value == "NaN"
    assert info.max == 3

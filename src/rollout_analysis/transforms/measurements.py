from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from rollout_analysis.models import Measurement
from rollout_analysis.transforms.values import (
    ChartValue,
    MeasurementValueError,
    TransformedValue,
    is_finite_number,
    transform_measurement_value,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformedMeasurement:
    measurement: Measurement
    chart_value: ChartValue
    table_value: ChartValue

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.measurement.to_dict(),
            "chart_value": self.chart_value,
            "table_value": self.table_value,
        }


@dataclass(frozen=True, slots=True)
class MeasurementInfo:
    chartable: bool = False
    min: float = 0
    max: float | None = None
    measurements: list[TransformedMeasurement] = field(default_factory=list)


def _transform_value(
    condition_keys: Sequence[str],
    measurement: Measurement,
    strict: bool,
) -> TransformedValue:
    try:
        return transform_measurement_value(condition_keys, measurement.value)
    except MeasurementValueError:
        if strict:
            raise
        LOGGER.warning(
            "Measurement value could not be decoded; showing it as table-only: %r",
            measurement.value,
        )
        return TransformedValue(can_chart=False, table_value=measurement.value)


def transform_measurements(
    condition_keys: Sequence[str],
    measurements: Sequence[Measurement] | None = None,
    *,
    strict: bool = True,
) -> MeasurementInfo:
    if not measurements:
        return MeasurementInfo(chartable=False, min=0, max=None, measurements=[])

    chartable = True
    value_min: float = 0
    value_max: float | None = None
    transformed: list[TransformedMeasurement] = []

    for measurement in measurements:
        value = _transform_value(condition_keys, measurement, strict)
        chartable = chartable and value.can_chart
        if value.can_chart and is_finite_number(value.chart_value):
            chart_number = float(value.chart_value)  # type: ignore[arg-type]
            value_min = min(value_min, chart_number)
            value_max = chart_number if value_max is None else max(value_max, chart_number)
        transformed.append(
            TransformedMeasurement(
                measurement=measurement,
                chart_value=value.chart_value,
                table_value=value.table_value,
            )
        )

    return MeasurementInfo(
        chartable=chartable,
        min=value_min,
        max=value_max,
        measurements=transformed,
    )

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

ValueObject = dict[str, Union[float, str, None]]
ChartValue = Union[ValueObject, float, str, None]


class MeasurementValueError(ValueError):
    """Raised when a measurement value is not valid JSON."""


class ValueShape(str, Enum):
    number = "number"
    string = "string"
    null = "null"
    array = "array"
    object = "object"
    unsupported = "unsupported"


@dataclass(frozen=True, slots=True)
class TransformedValue:
    can_chart: bool
    table_value: ChartValue
    chart_value: ChartValue = None


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def round_number(value: float) -> float:
    # half-up at two decimals; values too large to scale are already whole
    scaled = value * 100
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / 100


def is_chartable(value: Any) -> bool:
    return value is None or is_finite_number(value)


def stringify(value: Any) -> str:
    """Default display string for a decoded JSON value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return ",".join("" if item is None else stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def formatted_value(value: Any) -> float | str | None:
    if is_finite_number(value):
        return round_number(float(value))
    if value is None:
        return None
    return stringify(value)


def classify_value(value: Any) -> ValueShape:
    if is_finite_number(value):
        return ValueShape.number
    if value is None:
        return ValueShape.null
    if isinstance(value, str):
        return ValueShape.string
    if isinstance(value, list):
        return ValueShape.array if value else ValueShape.unsupported
    if isinstance(value, dict):
        return ValueShape.object
    return ValueShape.unsupported


def _reject_constant(constant: str) -> Any:
    raise MeasurementValueError(f"measurement value is not valid JSON: {constant!r}")


def decode_value(raw_value: str) -> Any:
    try:
        return json.loads(raw_value, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise MeasurementValueError(f"measurement value is not valid JSON: {raw_value!r}") from exc
    except RecursionError as exc:
        raise MeasurementValueError("measurement value is nested too deeply to decode") from exc


def _index_key(condition_key: str) -> int | None:
    if condition_key.isdecimal():
        return int(condition_key)
    return None


def _array_value(condition_keys: Sequence[str], values: list[Any]) -> TransformedValue:
    if len(condition_keys) == 1:
        key = condition_keys[0]
        index = _index_key(key)
        if index is None:
            return TransformedValue(can_chart=False, table_value=stringify(values))
        element = values[index] if index < len(values) else None
        # numbers, strings and nulls are shown as-is; anything else only in the table
        if classify_value(element) in (ValueShape.number, ValueShape.string, ValueShape.null):
            display = {key: formatted_value(element)}
            return TransformedValue(
                can_chart=is_chartable(element),
                chart_value=display,
                table_value=dict(display),
            )
        return TransformedValue(can_chart=False, table_value={key: stringify(element)})

    first = values[0]
    can_chart = is_chartable(first)
    return TransformedValue(
        can_chart=can_chart,
        chart_value=formatted_value(first) if can_chart else None,
        table_value=stringify(values),
    )


def _object_value(condition_keys: Sequence[str], values: dict[str, Any]) -> TransformedValue:
    display: ValueObject = {}
    can_chart = True
    for key in condition_keys:
        if key in values:
            can_chart = can_chart and is_chartable(values[key])
            display[key] = formatted_value(values[key])
        else:
            display[key] = None
    all_null = all(item is None for item in display.values())
    return TransformedValue(
        can_chart=can_chart and not all_null,
        chart_value=display,
        table_value=dict(display),
    )


def transform_measurement_value(
    condition_keys: Sequence[str],
    raw_value: str | None = None,
) -> TransformedValue:
    """Split a raw provider value into chart and table representations.

    ``condition_keys`` are the indexes or field names referenced by the metric's
    conditions; they select which parts of array and object results are shown.
    """
    if raw_value is None or raw_value == "":
        return TransformedValue(can_chart=True, chart_value=None, table_value=None)

    parsed = decode_value(raw_value)
    shape = classify_value(parsed)

    if shape is ValueShape.null:
        return TransformedValue(can_chart=True, chart_value=None, table_value=None)
    if shape is ValueShape.number:
        display = round_number(float(parsed))
        return TransformedValue(can_chart=True, chart_value=display, table_value=display)
    if shape is ValueShape.array:
        return _array_value(condition_keys, parsed)
    if shape is ValueShape.object and condition_keys:
        return _object_value(condition_keys, parsed)
    return TransformedValue(can_chart=False, table_value=stringify(parsed))

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from rollout_analysis.models import Argument
from rollout_analysis.providers import Provider, UnsupportedProvider, accessor_support
from rollout_analysis.transforms.interpolate import interpolate_query

SUBCONDITION_SPLIT = re.compile(r" && | \|\| ")


@dataclass(frozen=True, slots=True)
class ConditionDetails:
    label: str | None = None
    thresholds: list[float] = field(default_factory=list)
    condition_keys: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "thresholds": list(self.thresholds),
            "condition_keys": list(self.condition_keys),
        }


def _tokenize(subcondition: str) -> list[str]:
    # Split on single spaces, keeping parenthesised accessors such as
    # `default(result, 0)` together.
    tokens: list[str] = []
    depth = 0
    for piece in subcondition.split(" "):
        if depth > 0 and tokens:
            tokens[-1] = f"{tokens[-1]} {piece}"
        else:
            tokens.append(piece)
        depth = max(0, depth + piece.count("(") - piece.count(")"))
    return tokens


def _parse_threshold(token: str) -> float | None:
    # float() also reads digit separators like 1_000
    if "_" in token:
        return None
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def condition_details(
    condition: str | None,
    args: Sequence[Argument] = (),
    provider: Provider | None = None,
) -> ConditionDetails:
    """Extract a label, chartable thresholds and result keys from a condition.

    Conditions look like ``<result accessor> <operator> <value>`` where the value
    may be a ``{{ args.<name> }}`` placeholder, joined with ``&&`` or ``||``.
    """
    if not condition or provider is None or isinstance(provider, UnsupportedProvider):
        return ConditionDetails()

    interpolated = interpolate_query(condition, args) or ""
    thresholds: list[float] = []
    condition_keys: list[str] = []

    for subcondition in SUBCONDITION_SPLIT.split(interpolated):
        parts = _tokenize(subcondition)
        if len(parts) != 3:
            continue
        accessor, operator, literal = parts
        support = accessor_support(provider, accessor)
        is_under_over = "<" in operator or ">" in operator
        threshold = _parse_threshold(literal)

        if support.is_format_supported and is_under_over and threshold is not None:
            if support.condition_key is not None:
                condition_keys.append(support.condition_key)
            thresholds.append(threshold)

    return ConditionDetails(
        label=interpolated,
        thresholds=thresholds,
        condition_keys=condition_keys,
    )

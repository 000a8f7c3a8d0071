from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence

from rollout_analysis.config import DEFAULT_CHART_HEADROOM, AppConfig
from rollout_analysis.models import AnalysisSnapshot, FunctionalStatus, MetricResult, MetricSpec
from rollout_analysis.providers import metric_queries, provider_kind
from rollout_analysis.transforms.conditions import condition_details
from rollout_analysis.transforms.measurements import TransformedMeasurement, transform_measurements
from rollout_analysis.transforms.status import metric_status_label, metric_substatus
from rollout_analysis.transforms.values import round_number

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformedMetricSpec:
    metric: MetricSpec
    queries: list[str] | None
    fail_condition_label: str | None
    fail_thresholds: list[float] | None
    success_condition_label: str | None
    success_thresholds: list[float] | None
    condition_keys: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.metric.name,
            "provider": provider_kind(self.metric.provider),
            "success_condition": self.metric.success_condition,
            "failure_condition": self.metric.failure_condition,
            "consecutive_error_limit": self.metric.consecutive_error_limit,
            "failure_limit": self.metric.failure_limit,
            "inconclusive_limit": self.metric.inconclusive_limit,
            "queries": None if self.queries is None else list(self.queries),
            "fail_condition_label": self.fail_condition_label,
            "fail_thresholds": _copy_or_none(self.fail_thresholds),
            "success_condition_label": self.success_condition_label,
            "success_thresholds": _copy_or_none(self.success_thresholds),
            "condition_keys": list(self.condition_keys),
        }


@dataclass(frozen=True, slots=True)
class TransformedMetricStatus:
    result: MetricResult
    status_label: str
    substatus: FunctionalStatus | None
    transformed_measurements: list[TransformedMeasurement]
    chartable: bool
    chart_min: float
    chart_max: float | None

    @property
    def can_chart(self) -> bool:
        return self.chartable and self.chart_max is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.result.name,
            "phase": self.result.phase,
            "message": self.result.message,
            "count": self.result.count,
            "successful": self.result.successful,
            "failed": self.result.failed,
            "error": self.result.error,
            "inconclusive": self.result.inconclusive,
            "consecutive_error": self.result.consecutive_error,
            "status_label": self.status_label,
            "substatus": None if self.substatus is None else self.substatus.value,
            "transformed_measurements": [
                measurement.to_dict() for measurement in self.transformed_measurements
            ],
            "chartable": self.chartable,
            "chart_min": self.chart_min,
            "chart_max": self.chart_max,
        }


@dataclass(frozen=True, slots=True)
class TransformedMetric:
    name: str
    spec: TransformedMetricSpec
    status: TransformedMetricStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }


def _copy_or_none(values: list[float] | None) -> list[float] | None:
    return None if values is None else list(values)


def format_thresholds_for_chart(thresholds: Sequence[float]) -> list[float]:
    return [round_number(threshold) for threshold in thresholds]


def chart_max(
    value_max: float | None,
    fail_thresholds: Sequence[float] | None,
    success_thresholds: Sequence[float] | None,
    headroom: float = DEFAULT_CHART_HEADROOM,
) -> float | None:
    """120% (by default) of the largest data point or threshold; None if there are none."""
    fail_max = max(fail_thresholds) if fail_thresholds else -math.inf
    success_max = max(success_thresholds) if success_thresholds else -math.inf
    top = max(-math.inf if value_max is None else value_max, fail_max, success_max)
    if not math.isfinite(top):
        return None
    return round_number(top * headroom)


def _display_name(result: MetricResult, index: int) -> str:
    return result.name if result.name is not None else f"Unknown metric {index}"


def _unique(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(values))


def transform_metrics(
    snapshot: AnalysisSnapshot | None,
    *,
    config: AppConfig | None = None,
) -> dict[str, TransformedMetric]:
    """Merge metric specs with their results into chart/table-ready records."""
    if snapshot is None or snapshot.spec is None or snapshot.status is None:
        return {}

    cfg = config or AppConfig()
    spec = snapshot.spec
    transformed: dict[str, TransformedMetric] = {}

    for index, result in enumerate(snapshot.status.metric_results):
        metric_name = _display_name(result, index)
        metric_spec = spec.metric(metric_name)
        if metric_spec is None:
            LOGGER.debug("Skipping metric result without a matching spec: %s", metric_name)
            continue

        fail_info = condition_details(
            metric_spec.failure_condition, spec.args, metric_spec.provider
        )
        fail_thresholds = (
            format_thresholds_for_chart(fail_info.thresholds) if fail_info.thresholds else None
        )
        success_info = condition_details(
            metric_spec.success_condition, spec.args, metric_spec.provider
        )
        success_thresholds = (
            format_thresholds_for_chart(success_info.thresholds)
            if success_info.thresholds
            else None
        )
        # keyed measurement values ({key1: value1, ...}) are read through these keys
        condition_keys = _unique([*fail_info.condition_keys, *success_info.condition_keys])

        measurement_info = transform_measurements(
            condition_keys,
            result.measurements,
            strict=cfg.transform.strict_values,
        )
        transformed[metric_name] = TransformedMetric(
            name=metric_name,
            spec=TransformedMetricSpec(
                metric=metric_spec,
                queries=metric_queries(metric_spec.provider, spec.args),
                fail_condition_label=fail_info.label,
                fail_thresholds=fail_thresholds,
                success_condition_label=success_info.label,
                success_thresholds=success_thresholds,
                condition_keys=condition_keys,
            ),
            status=TransformedMetricStatus(
                result=result,
                status_label=metric_status_label(
                    result.phase, result.failed, result.error, result.inconclusive
                ),
                substatus=metric_substatus(
                    result.phase, result.failed, result.error, result.inconclusive
                ),
                transformed_measurements=measurement_info.measurements,
                chartable=measurement_info.chartable,
                chart_min=measurement_info.min,
                chart_max=chart_max(
                    measurement_info.max,
                    fail_thresholds,
                    success_thresholds,
                    headroom=cfg.chart.headroom,
                ),
            ),
        )

    return transformed


def sorted_metrics(metrics: dict[str, TransformedMetric]) -> list[TransformedMetric]:
    return sorted(metrics.values(), key=lambda metric: metric.name)

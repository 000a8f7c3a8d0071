from __future__ import annotations

import re
from typing import Any

import pandas as pd

from rollout_analysis.config import AppConfig
from rollout_analysis.models import AnalysisRunInfo
from rollout_analysis.transforms.metrics import TransformedMetric, sorted_metrics, transform_metrics
from rollout_analysis.transforms.summary import build_analysis_summary
from rollout_analysis.transforms.values import stringify

MEASUREMENT_TABLE_COLUMNS = [
    "metric",
    "phase",
    "started_at",
    "finished_at",
    "value",
    "chart_value",
    "message",
]
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def _table_cell(value: Any) -> Any:
    if isinstance(value, dict):
        return ", ".join(f"{key}: {stringify(item)}" for key, item in value.items())
    return value


def measurement_table(metric: TransformedMetric) -> pd.DataFrame:
    rows = [
        {
            "metric": metric.name,
            "phase": measurement.measurement.phase,
            "started_at": measurement.measurement.started_at,
            "finished_at": measurement.measurement.finished_at,
            "value": _table_cell(measurement.table_value),
            "chart_value": _table_cell(measurement.chart_value),
            "message": measurement.measurement.message,
        }
        for measurement in metric.status.transformed_measurements
    ]
    return pd.DataFrame(rows, columns=MEASUREMENT_TABLE_COLUMNS)


def table_file_stem(metric_name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", metric_name).strip("_") or "metric"


def build_view_payload(info: AnalysisRunInfo, config: AppConfig | None = None) -> dict[str, Any]:
    metrics = transform_metrics(info.snapshot, config=config)
    return {
        "name": info.name,
        "summary": build_analysis_summary(info).to_dict(),
        "metrics": [metric.to_dict() for metric in sorted_metrics(metrics)],
    }

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml

from rollout_analysis.models import (
    AnalysisPhase,
    AnalysisRunInfo,
    AnalysisRunSpec,
    AnalysisRunStatus,
    AnalysisSnapshot,
    Argument,
    Measurement,
    MetricResult,
    MetricSpec,
    RunSummary,
)
from rollout_analysis.providers import parse_provider


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _items(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _count(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _raw_value(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    # Providers always report strings; re-encode values that were inlined as YAML/JSON.
    return json.dumps(value)


def parse_measurement(payload: Mapping[str, Any]) -> Measurement:
    return Measurement(
        phase=str(payload.get("phase") or AnalysisPhase.Unknown.value),
        value=_raw_value(payload.get("value")),
        started_at=_optional_str(payload.get("startedAt")),
        finished_at=_optional_str(payload.get("finishedAt")),
        message=_optional_str(payload.get("message")),
    )


def parse_metric_result(payload: Mapping[str, Any]) -> MetricResult:
    return MetricResult(
        name=_optional_str(payload.get("name")),
        phase=str(payload.get("phase") or AnalysisPhase.Unknown.value),
        failed=_count(payload.get("failed")),
        error=_count(payload.get("error")),
        inconclusive=_count(payload.get("inconclusive")),
        successful=_count(payload.get("successful")),
        consecutive_error=_count(payload.get("consecutiveError")),
        count=_count(payload.get("count")),
        message=_optional_str(payload.get("message")),
        measurements=tuple(parse_measurement(item) for item in _items(payload.get("measurements"))),
    )


def parse_metric_spec(payload: Mapping[str, Any]) -> MetricSpec:
    return MetricSpec(
        name=str(payload.get("name") or ""),
        provider=parse_provider(payload.get("provider")),
        success_condition=_optional_str(payload.get("successCondition")),
        failure_condition=_optional_str(payload.get("failureCondition")),
        consecutive_error_limit=_optional_int(payload.get("consecutiveErrorLimit")),
        failure_limit=_optional_int(payload.get("failureLimit")),
        inconclusive_limit=_optional_int(payload.get("inconclusiveLimit")),
    )


def parse_run_spec(payload: Mapping[str, Any]) -> AnalysisRunSpec:
    return AnalysisRunSpec(
        metrics=tuple(parse_metric_spec(item) for item in _items(payload.get("metrics"))),
        args=tuple(
            Argument(name=str(item.get("name") or ""), value=_optional_str(item.get("value")))
            for item in _items(payload.get("args"))
        ),
    )


def parse_run_status(payload: Mapping[str, Any]) -> AnalysisRunStatus:
    summary = _mapping(payload.get("runSummary"))
    return AnalysisRunStatus(
        phase=str(payload.get("phase") or AnalysisPhase.Unknown.value),
        message=_optional_str(payload.get("message")),
        metric_results=tuple(
            parse_metric_result(item) for item in _items(payload.get("metricResults"))
        ),
        run_summary=RunSummary(
            count=_count(summary.get("count")),
            successful=_count(summary.get("successful")),
            failed=_count(summary.get("failed")),
            inconclusive=_count(summary.get("inconclusive")),
            error=_count(summary.get("error")),
        ),
        started_at=_optional_str(payload.get("startedAt")),
    )


def parse_snapshot(payload: Mapping[str, Any]) -> AnalysisSnapshot:
    spec = payload.get("spec")
    status = payload.get("status")
    return AnalysisSnapshot(
        spec=parse_run_spec(spec) if isinstance(spec, Mapping) else None,
        status=parse_run_status(status) if isinstance(status, Mapping) else None,
    )


def parse_analysis_run(payload: Mapping[str, Any]) -> AnalysisRunInfo:
    """Build an analysis run from either a run-info object or a bare spec/status pair."""
    if not isinstance(payload, Mapping):
        raise ValueError("analysis run payload must be a mapping/object")

    metadata = _mapping(payload.get("objectMeta") or payload.get("metadata"))
    spec_and_status = payload.get("specAndStatus")
    snapshot_payload = spec_and_status if isinstance(spec_and_status, Mapping) else payload
    return AnalysisRunInfo(
        name=_optional_str(metadata.get("name")),
        created_at=_optional_str(metadata.get("creationTimestamp")),
        snapshot=parse_snapshot(snapshot_payload),
    )


def load_analysis_run(path: str | Path) -> AnalysisRunInfo:
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as handle:
        if source_path.suffix == ".json":
            payload = json.load(handle)
        elif source_path.suffix in (".yaml", ".yml"):
            payload = yaml.safe_load(handle) or {}
        else:
            raise ValueError(f"Unsupported analysis run file type: {source_path.suffix}")
    if not isinstance(payload, Mapping):
        raise ValueError("analysis run file must contain a mapping/object")
    return parse_analysis_run(payload)

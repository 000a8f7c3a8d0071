from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import pandas as pd

from rollout_analysis.models import AnalysisPhase, AnalysisRunInfo, FunctionalStatus, MetricResult
from rollout_analysis.transforms.status import metric_status_label, metric_substatus


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    phase: str
    title: str
    substatus: FunctionalStatus | None
    message: str | None
    start_time: int | None
    end_time: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "title": self.title,
            "substatus": None if self.substatus is None else self.substatus.value,
            "message": self.message,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


def timestamp_millis(value: str | None) -> int | None:
    """Epoch milliseconds for an ISO timestamp, or None if it cannot be parsed."""
    if not value:
        return None
    try:
        parsed = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(parsed):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.tz_localize("UTC")
    return int(parsed.value // 1_000_000)


def analysis_start_time(start_time: str | None) -> int | None:
    return timestamp_millis(start_time)


def analysis_end_time(metric_results: Sequence[MetricResult]) -> int | None:
    end_times: list[int] = []
    for result in metric_results:
        for measurement in result.measurements:
            millis = timestamp_millis(measurement.finished_at)
            if millis is not None:
                end_times.append(millis)
    return max(end_times) if end_times else None


def build_analysis_summary(info: AnalysisRunInfo) -> AnalysisSummary:
    status = info.snapshot.status
    if status is None:
        phase = AnalysisPhase.Unknown.value
        return AnalysisSummary(
            phase=phase,
            title=metric_status_label(phase, 0, 0, 0),
            substatus=None,
            message=None,
            start_time=analysis_start_time(info.created_at),
            end_time=None,
        )

    run_summary = status.run_summary
    return AnalysisSummary(
        phase=status.phase,
        title=metric_status_label(
            status.phase, run_summary.failed, run_summary.error, run_summary.inconclusive
        ),
        substatus=metric_substatus(
            status.phase, run_summary.failed, run_summary.error, run_summary.inconclusive
        ),
        message=status.message,
        start_time=analysis_start_time(info.created_at or status.started_at),
        end_time=analysis_end_time(status.metric_results),
    )

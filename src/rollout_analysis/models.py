from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rollout_analysis.providers import Provider


class AnalysisPhase(str, Enum):
    Unknown = "Unknown"
    Pending = "Pending"
    Running = "Running"
    Successful = "Successful"
    Failed = "Failed"
    Error = "Error"
    Inconclusive = "Inconclusive"


class FunctionalStatus(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    IN_PROGRESS = "in_progress"
    INACTIVE = "inactive"


@dataclass(frozen=True, slots=True)
class Argument:
    name: str
    value: str | None = None


@dataclass(frozen=True, slots=True)
class Measurement:
    phase: str
    value: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "value": self.value,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class MetricSpec:
    name: str
    provider: Provider | None = None
    success_condition: str | None = None
    failure_condition: str | None = None
    consecutive_error_limit: int | None = None
    failure_limit: int | None = None
    inconclusive_limit: int | None = None


@dataclass(frozen=True, slots=True)
class MetricResult:
    name: str | None
    phase: str = AnalysisPhase.Unknown.value
    failed: int = 0
    error: int = 0
    inconclusive: int = 0
    successful: int = 0
    consecutive_error: int = 0
    count: int = 0
    message: str | None = None
    measurements: tuple[Measurement, ...] = ()


@dataclass(frozen=True, slots=True)
class RunSummary:
    count: int = 0
    successful: int = 0
    failed: int = 0
    inconclusive: int = 0
    error: int = 0


@dataclass(frozen=True, slots=True)
class AnalysisRunSpec:
    metrics: tuple[MetricSpec, ...] = ()
    args: tuple[Argument, ...] = ()

    def metric(self, name: str) -> MetricSpec | None:
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None


@dataclass(frozen=True, slots=True)
class AnalysisRunStatus:
    phase: str = AnalysisPhase.Unknown.value
    message: str | None = None
    metric_results: tuple[MetricResult, ...] = ()
    run_summary: RunSummary = RunSummary()
    started_at: str | None = None


@dataclass(frozen=True, slots=True)
class AnalysisSnapshot:
    spec: AnalysisRunSpec | None = None
    status: AnalysisRunStatus | None = None


@dataclass(frozen=True, slots=True)
class AnalysisRunInfo:
    name: str | None = None
    created_at: str | None = None
    snapshot: AnalysisSnapshot = AnalysisSnapshot()

from __future__ import annotations

from rollout_analysis.models import AnalysisPhase, FunctionalStatus

_PHASE_LABELS: dict[str, str] = {
    AnalysisPhase.Unknown.value: "Analysis status unknown",
    AnalysisPhase.Pending.value: "Analysis pending",
    AnalysisPhase.Running.value: "Analysis in progress",
    AnalysisPhase.Failed.value: "Analysis failed",
    AnalysisPhase.Inconclusive.value: "Analysis inconclusive",
    AnalysisPhase.Error.value: "Analysis errored",
}

_SUBSTATUS_PHASES = frozenset({AnalysisPhase.Running.value, AnalysisPhase.Successful.value})


def _phase_value(phase: str | AnalysisPhase | None) -> str:
    if isinstance(phase, AnalysisPhase):
        return phase.value
    return str(phase or AnalysisPhase.Unknown.value)


def metric_substatus(
    phase: str | AnalysisPhase | None,
    failures: int,
    errors: int,
    inconclusives: int,
) -> FunctionalStatus | None:
    """Secondary flag for running or passed analyses that saw bad measurements."""
    if _phase_value(phase) not in _SUBSTATUS_PHASES:
        return None
    if failures > 0:
        return FunctionalStatus.ERROR
    if errors > 0 or inconclusives > 0:
        return FunctionalStatus.WARNING
    return None


def _successful_qualifier(failures: int, errors: int, inconclusives: int) -> str:
    issues = [
        label
        for count, label in (
            (failures, "with measurement failures"),
            (errors, "with measurement errors"),
            (inconclusives, "with inconclusive measurements"),
        )
        if count > 0
    ]
    if not issues:
        return ""
    if len(issues) == 1:
        return issues[0]
    return "with multiple issues"


def metric_status_label(
    phase: str | AnalysisPhase | None,
    failures: int,
    errors: int,
    inconclusives: int,
) -> str:
    phase_value = _phase_value(phase)
    if phase_value == AnalysisPhase.Successful.value:
        return f"Analysis passed {_successful_qualifier(failures, errors, inconclusives)}".strip()
    return _PHASE_LABELS.get(phase_value, "")

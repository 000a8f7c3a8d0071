from __future__ import annotations

import json
from typing import Any

import pytest


def _measurement(phase: str, value: Any, minute: int) -> dict[str, Any]:
    return {
        "phase": phase,
        "value": value,
        "startedAt": f"2026-01-01T00:{minute:02d}:00Z",
        "finishedAt": f"2026-01-01T00:{minute:02d}:30Z",
    }


@pytest.fixture()
def analysis_run_payload() -> dict[str, Any]:
    return {
        "objectMeta": {
            "name": "checkout-6f7d9-2",
            "creationTimestamp": "2026-01-01T00:00:00Z",
        },
        "specAndStatus": {
            "spec": {
                "args": [
                    {"name": "service", "value": "checkout"},
                    {"name": "max-error-rate", "value": "0.05"},
                ],
                "metrics": [
                    {
                        "name": "error-rate",
                        "provider": {
                            "prometheus": {
                                "address": "http://prometheus:9090",
                                "query": 'sum(rate(errors{service="{{args.service}}"}[5m]))',
                            }
                        },
                        "successCondition": "result[0] <= {{args.max-error-rate}}",
                        "failureCondition": "result[0] > 0.1",
                        "failureLimit": 2,
                    },
                    {
                        "name": "latency",
                        "provider": {"newRelic": {"query": "SELECT percentile(duration)"}},
                        "successCondition": "result.p95 < 250 && result.p99 < 400",
                    },
                    {
                        "name": "smoke",
                        "provider": {"web": {"url": "http://checkout/health"}},
                        "successCondition": "result == true",
                    },
                ],
            },
            "status": {
                "phase": "Successful",
                "message": "Metric assessed Successful",
                "startedAt": "2026-01-01T00:00:05Z",
                "runSummary": {"count": 3, "successful": 2, "failed": 1},
                "metricResults": [
                    {
                        "name": "error-rate",
                        "phase": "Successful",
                        "count": 3,
                        "successful": 2,
                        "failed": 1,
                        "measurements": [
                            _measurement("Successful", "[0.01]", 1),
                            _measurement("Failed", "[0.2]", 2),
                            _measurement("Successful", "[0.03]", 3),
                        ],
                    },
                    {
                        "name": "latency",
                        "phase": "Successful",
                        "count": 1,
                        "successful": 1,
                        "measurements": [
                            _measurement(
                                "Successful", json.dumps({"p95": 180.456, "p99": 390}), 4
                            ),
                        ],
                    },
                    {
                        "name": "smoke",
                        "phase": "Successful",
                        "count": 1,
                        "successful": 1,
                        "measurements": [_measurement("Successful", "true", 0)],
                    },
                    {"name": "orphan", "phase": "Running", "measurements": []},
                ],
            },
        },
    }

from __future__ import annotations

from rollout_analysis.models import Argument
from rollout_analysis.providers import (
    CloudWatchProvider,
    DatadogProvider,
    NewRelicProvider,
    PrometheusProvider,
    UnsupportedProvider,
    accessor_support,
    metric_queries,
    parse_provider,
    provider_kind,
)

ARGS = [Argument(name="service", value="checkout")]


def test_parse_provider_tags_known_variants() -> None:
    provider = parse_provider({"prometheus": {"address": "http://prom", "query": "up"}})
    assert provider == PrometheusProvider(query="up")
    assert provider_kind(provider) == "prometheus"

    datadog = parse_provider({"datadog": {"apiVersion": "v2", "queries": {"a": "q1"}}})
    assert datadog == DatadogProvider(api_version="v2", queries={"a": "q1"})

    relic = parse_provider({"newRelic": {"profile": "prod", "query": "SELECT 1"}})
    assert relic == NewRelicProvider(query="SELECT 1", profile="prod")


def test_parse_provider_defaults_datadog_api_version() -> None:
    provider = parse_provider({"datadog": {"query": "avg:latency{*}"}})
    assert isinstance(provider, DatadogProvider)
    assert provider.api_version == "v1"


def test_parse_provider_keeps_unknown_providers_as_unsupported() -> None:
    provider = parse_provider({"web": {"url": "http://example"}})
    assert provider == UnsupportedProvider(kind="web", raw={"url": "http://example"})
    assert provider_kind(provider) == "web"
    assert not accessor_support(provider, "result").is_format_supported


def test_parse_provider_rejects_empty_payloads() -> None:
    assert parse_provider(None) is None
    assert parse_provider({}) is None
    assert parse_provider("prometheus") is None
    assert provider_kind(None) == "unsupported provider"


def test_single_query_providers_interpolate_query() -> None:
    provider = PrometheusProvider(query='up{service="{{args.service}}"}')
    assert metric_queries(provider, ARGS) == ['up{service="checkout"}']
    assert metric_queries(NewRelicProvider(query="SELECT {{args.service}}"), ARGS) == [
        "SELECT checkout"
    ]


def test_metric_queries_for_missing_or_unsupported_providers() -> None:
    assert metric_queries(None, ARGS) is None
    assert metric_queries(UnsupportedProvider(kind="job"), ARGS) is None
    assert metric_queries(PrometheusProvider(query=None), ARGS) is None


def test_datadog_queries_by_api_version() -> None:
    v1 = DatadogProvider(api_version="V1", query="avg:{{args.service}}")
    assert metric_queries(v1, ARGS) == ["avg:checkout"]

    v2_single = DatadogProvider(api_version="v2", query="avg:{{args.service}}")
    assert metric_queries(v2_single, ARGS) == ["avg:checkout"]

    v2_formula = DatadogProvider(api_version="v2", query="avg:{{args.service}}", formula="a / 2")
    assert metric_queries(v2_formula, ARGS) == ["query: avg:checkout, formula: a / 2"]

    v2_named = DatadogProvider(
        api_version="v2",
        queries={"a": "sum:errors{service:{{args.service}}}", "b": "sum:hits"},
    )
    assert metric_queries(v2_named, ARGS) == ["sum:errors{service:checkout}", "sum:hits"]

    v2_named_formula = DatadogProvider(
        api_version="v2",
        queries={"a": "sum:errors", "b": "sum:hits"},
        formula="a / b",
    )
    assert metric_queries(v2_named_formula, ARGS) == [
        'queries: {"a": "sum:errors", "b": "sum:hits"}, formula: a / b'
    ]

    assert metric_queries(DatadogProvider(api_version="v3", query="x"), ARGS) is None
    assert metric_queries(DatadogProvider(api_version="v2"), ARGS) is None


def test_cloud_watch_queries_are_json_encoded() -> None:
    provider = CloudWatchProvider(
        metric_data_queries=[{"id": "rate", "expression": "errors / requests"}]
    )
    assert metric_queries(provider, ARGS) == ['{"id":"rate","expression":"errors / requests"}']
    assert metric_queries(CloudWatchProvider(metric_data_queries=None), ARGS) is None


def test_accessor_support_strips_whitespace() -> None:
    support = accessor_support(PrometheusProvider(query="q"), " result[0] ")
    assert support.is_format_supported
    assert support.condition_key == "0"

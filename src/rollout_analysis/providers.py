from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping, Sequence, Union

from rollout_analysis.models import Argument
from rollout_analysis.transforms.interpolate import interpolate_query


class ProviderKind(str, Enum):
    prometheus = "prometheus"
    datadog = "datadog"
    wavefront = "wavefront"
    newRelic = "newRelic"
    cloudWatch = "cloudWatch"
    graphite = "graphite"
    influxdb = "influxdb"
    skywalking = "skywalking"


@dataclass(frozen=True, slots=True)
class PrometheusProvider:
    kind: ClassVar[str] = ProviderKind.prometheus.value
    query: str | None = None


@dataclass(frozen=True, slots=True)
class DatadogProvider:
    kind: ClassVar[str] = ProviderKind.datadog.value
    api_version: str = "v1"
    query: str | None = None
    queries: dict[str, str] | None = None
    formula: str | None = None


@dataclass(frozen=True, slots=True)
class WavefrontProvider:
    kind: ClassVar[str] = ProviderKind.wavefront.value
    query: str | None = None


@dataclass(frozen=True, slots=True)
class NewRelicProvider:
    kind: ClassVar[str] = ProviderKind.newRelic.value
    query: str | None = None
    profile: str | None = None


@dataclass(frozen=True, slots=True)
class CloudWatchProvider:
    kind: ClassVar[str] = ProviderKind.cloudWatch.value
    metric_data_queries: Any = None


@dataclass(frozen=True, slots=True)
class GraphiteProvider:
    kind: ClassVar[str] = ProviderKind.graphite.value
    query: str | None = None


@dataclass(frozen=True, slots=True)
class InfluxdbProvider:
    kind: ClassVar[str] = ProviderKind.influxdb.value
    query: str | None = None


@dataclass(frozen=True, slots=True)
class SkywalkingProvider:
    kind: ClassVar[str] = ProviderKind.skywalking.value
    query: str | None = None


@dataclass(frozen=True, slots=True)
class UnsupportedProvider:
    # kayenta, web, job, plugin and anything newer than this module
    kind: str
    raw: dict[str, Any] = field(default_factory=dict)


Provider = Union[
    PrometheusProvider,
    DatadogProvider,
    WavefrontProvider,
    NewRelicProvider,
    CloudWatchProvider,
    GraphiteProvider,
    InfluxdbProvider,
    SkywalkingProvider,
    UnsupportedProvider,
]

UNSUPPORTED_PROVIDER = "unsupported provider"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _single_query_provider(cls: type) -> Callable[[Mapping[str, Any]], Provider]:
    def _build(body: Mapping[str, Any]) -> Provider:
        return cls(query=_optional_str(body.get("query")))

    return _build


def _datadog(body: Mapping[str, Any]) -> Provider:
    raw_queries = body.get("queries")
    queries = (
        {str(name): str(query) for name, query in raw_queries.items()}
        if isinstance(raw_queries, Mapping)
        else None
    )
    return DatadogProvider(
        api_version=str(body.get("apiVersion") or "v1"),
        query=_optional_str(body.get("query")),
        queries=queries,
        formula=_optional_str(body.get("formula")),
    )


def _new_relic(body: Mapping[str, Any]) -> Provider:
    return NewRelicProvider(
        query=_optional_str(body.get("query")),
        profile=_optional_str(body.get("profile")),
    )


def _cloud_watch(body: Mapping[str, Any]) -> Provider:
    return CloudWatchProvider(metric_data_queries=body.get("metricDataQueries"))


_PROVIDER_BUILDERS: dict[str, Callable[[Mapping[str, Any]], Provider]] = {
    ProviderKind.prometheus.value: _single_query_provider(PrometheusProvider),
    ProviderKind.datadog.value: _datadog,
    ProviderKind.wavefront.value: _single_query_provider(WavefrontProvider),
    ProviderKind.newRelic.value: _new_relic,
    ProviderKind.cloudWatch.value: _cloud_watch,
    ProviderKind.graphite.value: _single_query_provider(GraphiteProvider),
    ProviderKind.influxdb.value: _single_query_provider(InfluxdbProvider),
    ProviderKind.skywalking.value: _single_query_provider(SkywalkingProvider),
}


def parse_provider(payload: Any) -> Provider | None:
    """Tag a raw ``{<providerName>: {...}}`` mapping with its provider variant."""
    if not isinstance(payload, Mapping) or not payload:
        return None
    kind = str(next(iter(payload)))
    body = payload[kind]
    if not isinstance(body, Mapping):
        body = {}
    builder = _PROVIDER_BUILDERS.get(kind)
    if builder is None:
        return UnsupportedProvider(kind=kind, raw=dict(body))
    return builder(body)


def provider_kind(provider: Provider | None) -> str:
    if provider is None:
        return UNSUPPORTED_PROVIDER
    return provider.kind


@dataclass(frozen=True, slots=True)
class AccessorSupport:
    is_format_supported: bool
    condition_key: str | None


_NOT_SUPPORTED = AccessorSupport(is_format_supported=False, condition_key=None)


def _first_result_index(accessor: str) -> AccessorSupport:
    return AccessorSupport(is_format_supported=accessor == "result[0]", condition_key="0")


def _datadog_accessor(accessor: str) -> AccessorSupport:
    return AccessorSupport(
        is_format_supported=accessor in ("result", "default(result, 0)"),
        condition_key="0" if "0" in accessor else None,
    )


def _wavefront_accessor(accessor: str) -> AccessorSupport:
    return AccessorSupport(is_format_supported=accessor == "result", condition_key=None)


def _new_relic_accessor(accessor: str) -> AccessorSupport:
    return AccessorSupport(
        is_format_supported=accessor.startswith("result."),
        condition_key=accessor[7:],
    )


def _never_supported(accessor: str) -> AccessorSupport:
    return _NOT_SUPPORTED


_ACCESSOR_RULES: dict[str, Callable[[str], AccessorSupport]] = {
    ProviderKind.prometheus.value: _first_result_index,
    ProviderKind.datadog.value: _datadog_accessor,
    ProviderKind.wavefront.value: _wavefront_accessor,
    ProviderKind.newRelic.value: _new_relic_accessor,
    ProviderKind.cloudWatch.value: _never_supported,
    ProviderKind.graphite.value: _first_result_index,
    ProviderKind.influxdb.value: _first_result_index,
    ProviderKind.skywalking.value: _never_supported,
}


def accessor_support(provider: Provider | None, accessor: str) -> AccessorSupport:
    rule = _ACCESSOR_RULES.get(provider_kind(provider), _never_supported)
    return rule(accessor.strip())


def _datadog_queries(provider: DatadogProvider, args: Sequence[Argument]) -> list[str] | None:
    api_version = provider.api_version.lower()
    if api_version == "v1":
        if provider.query is None:
            return None
        return [interpolate_query(provider.query, args) or ""]
    if api_version != "v2":
        return None

    formula = interpolate_query(provider.formula, args)
    if provider.query is not None:
        query = interpolate_query(provider.query, args) or ""
        if formula is not None:
            return [f"query: {query}, formula: {formula}"]
        return [query]
    if provider.queries is not None:
        interpolated = {
            name: interpolate_query(query, args) or "" for name, query in provider.queries.items()
        }
        if formula is not None:
            return [f"queries: {json.dumps(interpolated)}, formula: {formula}"]
        return list(interpolated.values())
    return None


def metric_queries(
    provider: Provider | None,
    args: Sequence[Argument] = (),
) -> list[str] | None:
    """Return the provider's queries formatted for display, or None if unsupported."""
    if provider is None or isinstance(provider, UnsupportedProvider):
        return None
    if isinstance(provider, DatadogProvider):
        return _datadog_queries(provider, args)
    if isinstance(provider, CloudWatchProvider):
        if not isinstance(provider.metric_data_queries, list):
            return None
        return [
            json.dumps(query, separators=(",", ":")) for query in provider.metric_data_queries
        ]
    if provider.query is None:
        return None
    return [interpolate_query(provider.query, args) or ""]

from __future__ import annotations

import pytest

from rollout_analysis.models import Argument
from rollout_analysis.transforms.interpolate import arg_value, interpolate_query

ARGS = [Argument(name="service", value="checkout"), Argument(name="limit", value="5")]


def test_interpolate_replaces_known_args() -> None:
    assert interpolate_query("{{args.x}}", [Argument(name="x", value="5")]) == "5"
    assert (
        interpolate_query('sum(rate(http{service="{{ args.service }}"}[5m]))', ARGS)
        == 'sum(rate(http{service="checkout"}[5m]))'
    )


def test_interpolate_preserves_unresolved_placeholders() -> None:
    assert interpolate_query("{{args.y}}", [Argument(name="x", value="5")]) == "{{args.y}}"
    assert interpolate_query("{{ args.service }} {{args.missing}}", ARGS) == (
        "checkout {{args.missing}}"
    )


@pytest.mark.parametrize(
    "template",
    ["{{service}}", "{{ inputs.service }}", "{{}}"],
)
def test_interpolate_leaves_malformed_placeholders_verbatim(template: str) -> None:
    assert interpolate_query(template, ARGS) == template


def test_interpolate_handles_missing_template_and_args() -> None:
    assert interpolate_query(None, ARGS) is None
    assert interpolate_query("{{args.limit}}", []) == "{{args.limit}}"
    assert interpolate_query("{{args.limit}}", None) == "{{args.limit}}"


@pytest.mark.parametrize("template", ["", "plain query", "result[0] < 5", "{ not a placeholder }"])
def test_interpolate_is_identity_without_placeholders(template: str) -> None:
    assert interpolate_query(template, ARGS) == template


def test_interpolate_keeps_placeholder_for_arg_without_value() -> None:
    args = [Argument(name="secret", value=None)]
    assert interpolate_query("{{args.secret}}", args) == "{{args.secret}}"


def test_arg_value_uses_first_match() -> None:
    args = [Argument(name="x", value="first"), Argument(name="x", value="second")]
    assert arg_value(args, "x") == "first"
    assert arg_value(args, "y") is None

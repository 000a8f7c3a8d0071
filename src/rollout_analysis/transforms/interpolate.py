from __future__ import annotations

import re
from typing import Sequence

from rollout_analysis.models import Argument

PLACEHOLDER_PATTERN = re.compile(r"\{\{.*?\}\}")
ARGS_PREFIX = "args"
_PLACEHOLDER_STRIP = re.compile(r"[{} ]")


def arg_value(args: Sequence[Argument], arg_name: str) -> str | None:
    for arg in args:
        if arg.name == arg_name:
            return arg.value
    return None


def _placeholder_arg_name(placeholder: str) -> str | None:
    pieces = _PLACEHOLDER_STRIP.sub("", placeholder).split(".")
    if len(pieces) < 2 or pieces[0] != ARGS_PREFIX:
        return None
    return pieces[1]


def interpolate_query(query: str | None, args: Sequence[Argument] | None = None) -> str | None:
    """Replace ``{{ args.<name> }}`` placeholders with argument values.

    Placeholders without a matching argument (or without a value) are left as-is.
    """
    if query is None:
        return None
    if not args:
        return query

    def _replace(match: re.Match[str]) -> str:
        placeholder = match.group(0)
        arg_name = _placeholder_arg_name(placeholder)
        if arg_name is None:
            return placeholder
        replacement = arg_value(args, arg_name)
        return placeholder if replacement is None else replacement

    return PLACEHOLDER_PATTERN.sub(_replace, query)

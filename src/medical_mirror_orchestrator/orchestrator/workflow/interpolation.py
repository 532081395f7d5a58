"""`{{placeholder}}` substitution over a step's parameter tree."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def stringify(value: Any) -> str:
    """Render a context value for embedding in a string.

    Strings are used as-is; None, booleans and containers are rendered as JSON so
    `{{flag}}` becomes `true` and `{{result}}` becomes a readable object.
    """

    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def interpolate_string(template: str, context: Mapping[str, Any]) -> str:
    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in context:
            return match.group(0)
        return stringify(context[name])

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def interpolate(params: Mapping[str, Any], context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of `params` with every placeholder in string leaves resolved.

    Nested mappings are walked recursively. Lists and other non-string values are
    passed through untouched; a placeholder naming a missing key is left as-is.
    """

    return {key: _interpolate_value(value, context) for key, value in params.items()}


def _interpolate_value(value: Any, context: Mapping[str, Any]) -> Any:
    if isinstance(value, str):
        return interpolate_string(value, context)
    if isinstance(value, Mapping):
        return interpolate(value, context)
    return value

"""Placeholder substitution for request, response and query templates."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from contract_flow_tester.failures import MalformedDocumentError, UnresolvedPlaceholderError

_PLACEHOLDER_PATTERN = re.compile(r"\$\{\s*([^{}\s]+)\s*\}")


def render_template(
    template: str,
    payload: Mapping[str, str],
    *,
    strict: bool = False,
    source: str = "template",
) -> str:
    """Replace every `${ key }` placeholder whose key exists in the payload.

    Substitution happens in one pass over the template, so a payload value that
    itself looks like a placeholder is inserted literally. Placeholders without a
    payload key are left as they are unless `strict` is set.

    Args:
      template: Template text.
      payload: Flat key to value mapping.
      strict: Fail on placeholders that have no payload key.
      source: Label used in error messages.

    Returns:
      The rendered text.

    Raises:
      UnresolvedPlaceholderError: If `strict` is set and keys are missing.
    """
    missing: list[str] = []

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in payload:
            return payload[key]
        if key not in missing:
            missing.append(key)
        return match.group(0)

    rendered = _PLACEHOLDER_PATTERN.sub(_substitute, template)
    if strict and missing:
        raise UnresolvedPlaceholderError(source, tuple(missing))
    return rendered


def render_document(
    template: str,
    payload: Mapping[str, str],
    *,
    strict: bool = False,
    source: str = "template",
) -> Any:
    """Render a JSON template and parse the result."""
    rendered = render_template(template, payload, strict=strict, source=source)
    try:
        return json.loads(rendered)
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(
            f"Rendered {source} is not valid JSON: {exc.msg} "
            f"(line {exc.lineno}, column {exc.colno})"
        ) from exc


def render_json_value(
    value: Any,
    payload: Mapping[str, str],
    *,
    strict: bool = False,
    source: str = "filter",
) -> Any:
    """Render placeholders inside an already parsed JSON value."""
    return render_document(
        json.dumps(value, ensure_ascii=False), payload, strict=strict, source=source
    )

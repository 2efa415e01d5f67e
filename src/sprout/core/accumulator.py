"""Cumulative merging of JSON-valued wire attributes."""

from __future__ import annotations

from collections.abc import Mapping
import json
import re
from typing import Any

from jinja2.utils import htmlsafe_json_dumps

from .exceptions import MalformedJsonDirectiveError


_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)


def html_safe_json(values: Mapping[str, Any]) -> str:
    """Serialise ``values`` compactly with HTML-sensitive characters escaped.

    Characters that could end an attribute or open a tag only ever occur inside
    JSON strings, so they are replaced by their ``\\uXXXX`` escapes.
    """
    encoded = htmlsafe_json_dumps(dict(values), ensure_ascii=False, separators=(",", ":"))
    # Escaped double quotes would still close a double-quoted attribute.
    return _ESCAPE_SEQUENCE.sub(_hex_quote, str(encoded))


def _hex_quote(match: re.Match[str]) -> str:
    return "\\u0022" if match.group(1) == '"' else match.group(0)


def decode_json_object(raw: str, *, source: str) -> dict[str, Any]:
    """Decode ``raw`` into a JSON object or raise :class:`MalformedJsonDirectiveError`."""
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedJsonDirectiveError(
            f"The '{source}' attribute does not contain valid JSON: {exc.msg}."
        ) from exc
    if not isinstance(decoded, dict):
        raise MalformedJsonDirectiveError(f"The '{source}' attribute must contain a JSON object.")
    return decoded


def merge_json_attribute(
    existing: str | None,
    new_pairs: Mapping[str, Any],
    *,
    source: str = "attribute",
) -> str:
    """Merge ``new_pairs`` into the JSON object stored in ``existing``.

    Keys of ``new_pairs`` override identically named keys already present.
    An empty ``new_pairs`` leaves ``existing`` untouched once it is known to be
    valid.
    """
    current = decode_json_object(existing, source=source) if existing else {}
    if not new_pairs:
        return existing or ""
    current.update(new_pairs)
    return html_safe_json(current)


__all__ = ["decode_json_object", "html_safe_json", "merge_json_attribute"]

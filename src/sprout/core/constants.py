"""Fixed vocabularies shared by the rewriter, builder and replay decoder."""

from __future__ import annotations


WIRE_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "boost",
        "confirm",
        "delete",
        "disable",
        "encoding",
        "ext",
        "get",
        "headers",
        "history-elt",
        "include",
        "indicator",
        "params",
        "patch",
        "post",
        "preserve",
        "prompt",
        "push-url",
        "put",
        "request",
        "select",
        "sse",
        "swap",
        "swap-oob",
        "target",
        "trigger",
        "vals",
        "vars",
        "ws",
    }
)
"""Attribute names understood by the AJAX client, without their prefix."""

JSON_ATTRIBUTES: frozenset[str] = frozenset({"headers", "vals"})
"""Wire attributes whose value is a JSON object merged cumulatively."""

REQUEST_DIRECTIVES: frozenset[str] = frozenset({"method", "action"})
"""Directives only read while synthesising the request verb."""

REPLACE_DIRECTIVE = "replace"
REPLACE_SWAP = "outerHTML"

DEPRECATED_DIRECTIVES: dict[str, tuple[str, str]] = {
    "vars": (
        "sprout.directives.vars",
        "The 'vars' directive has been deprecated for security reasons. "
        "Use the 'vals' or 'val:*' directives instead.",
    ),
}
"""Logical name mapped to ``(feature id, guidance)``."""

PARAM_PREFIX = "sprout:"
SITE_PARAM = "sprout:siteId"
COMPONENT_PARAM = "sprout:component"
TEMPLATE_PARAM = "sprout:template"
ACTION_PARAM = "sprout:action"
VARIABLES_PARAM = "sprout:variables"


def variable_param(name: str) -> str:
    """Return the request parameter carrying the token of variable ``name``."""
    return f"{VARIABLES_PARAM}[{name}]"


__all__ = [
    "ACTION_PARAM",
    "COMPONENT_PARAM",
    "DEPRECATED_DIRECTIVES",
    "JSON_ATTRIBUTES",
    "PARAM_PREFIX",
    "REPLACE_DIRECTIVE",
    "REPLACE_SWAP",
    "REQUEST_DIRECTIVES",
    "SITE_PARAM",
    "TEMPLATE_PARAM",
    "VARIABLES_PARAM",
    "WIRE_ATTRIBUTES",
    "variable_param",
]

"""Rewrite handlers turning directives into wire attributes."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from sprout.core.accumulator import decode_json_object
from sprout.core.constants import (
    ACTION_PARAM,
    DEPRECATED_DIRECTIVES,
    JSON_ATTRIBUTES,
    REPLACE_DIRECTIVE,
    REPLACE_SWAP,
    REQUEST_DIRECTIVES,
    WIRE_ATTRIBUTES,
)
from sprout.core.context import RewriteContext
from sprout.core.exceptions import MissingCsrfTokenError, UnsafeUriSchemeError
from sprout.core.rules import RewritePhase, rewrites


logger = logging.getLogger(__name__)


def build_url(base: str, params: dict[str, str]) -> str:
    """Append ``params`` to ``base`` as a query string."""
    if not params:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(params, safe=':[]')}"


@rewrites(RewritePhase.REQUEST, name="request_marker")
def request_marker(context: RewriteContext) -> None:
    """Point elements carrying the bare marker at the render endpoint."""
    if not context.has_marker():
        return

    verb = "get"
    params: dict[str, str] = {}

    method = context.directive_value("method")
    if method.strip().lower() == "post":
        verb = "post"
        token = context.csrf_token() if context.csrf_token is not None else None
        if not token:
            raise MissingCsrfTokenError(
                "A POST request was requested but no anti-forgery token is available."
            )
        context.merge_wire_json("headers", {context.config.csrf_header: token})

    action = context.directive_value("action")
    if action:
        params[ACTION_PARAM] = context.codec.sign(action)

    context.set_wire(verb, build_url(context.config.render_url, params))


@rewrites(RewritePhase.VALUES, name="value_directives")
def value_directives(context: RewriteContext) -> None:
    """Accumulate ``val:<field>`` directives into the extra values attribute."""
    for directive in list(context.pending()):
        if not directive.is_value:
            continue
        context.consume(directive)
        field_name = directive.field_name
        if not field_name:
            logger.debug("Ignoring value directive without a field: %s", directive.raw_key)
            continue
        context.merge_wire_json("vals", {field_name: directive.value})


@rewrites(RewritePhase.REPLACE, name="replace_shorthand")
def replace_shorthand(context: RewriteContext) -> None:
    """Expand the replace directive into select, target and swap."""
    for directive in context.named(REPLACE_DIRECTIVE):
        context.consume(directive)
        context.set_wire("select", directive.value)
        context.set_wire("target", directive.value)
        context.set_wire("swap", REPLACE_SWAP)


@rewrites(RewritePhase.DIRECTIVES, name="wire_directives")
def wire_directives(context: RewriteContext) -> None:
    """Map the remaining known directives onto wire attributes."""
    for directive in list(context.pending()):
        name = directive.logical_name
        if name not in WIRE_ATTRIBUTES:
            continue
        context.consume(directive)

        if name in JSON_ATTRIBUTES:
            _reject_unsafe_scheme(context, directive.raw_key, directive.value)
            pairs = decode_json_object(directive.value, source=directive.raw_key)
            context.merge_wire_json(name, pairs)
        else:
            context.set_wire(name, directive.value)

        deprecation = DEPRECATED_DIRECTIVES.get(name)
        if deprecation is not None:
            feature_id, message = deprecation
            context.deprecations.notify(feature_id, message)


@rewrites(RewritePhase.CLEANUP, name="drop_directives")
def drop_directives(context: RewriteContext) -> None:
    """Remove consumed directives and request markers from the element."""
    for directive in context.directives:
        if directive.logical_name in REQUEST_DIRECTIVES:
            context.consume(directive)
    for key in list(context.attributes):
        if key in context.consumed or context.resolver.is_marker(key):
            del context.attributes[key]


def _reject_unsafe_scheme(context: RewriteContext, key: str, value: str) -> None:
    candidate = value.lstrip().lower()
    for scheme in context.config.unsafe_schemes:
        if candidate.startswith(scheme):
            raise UnsafeUriSchemeError(
                f"The '{key}' attribute may not start with '{scheme}'. "
                "Use a JSON encoded value instead."
            )


__all__ = [
    "build_url",
    "drop_directives",
    "replace_shorthand",
    "request_marker",
    "value_directives",
    "wire_directives",
]

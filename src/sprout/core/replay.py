"""Decoding of the component state posted back by the AJAX client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import re
from typing import Any

from .codec import VariableCodec
from .config import VariablePolicy
from .constants import (
    ACTION_PARAM,
    COMPONENT_PARAM,
    PARAM_PREFIX,
    SITE_PARAM,
    TEMPLATE_PARAM,
    VARIABLES_PARAM,
)
from .exceptions import TokenForgeryError


logger = logging.getLogger(__name__)

_VARIABLE_KEY = re.compile(re.escape(VARIABLES_PARAM) + r"\[(?P<name>[^\]]+)\]")


@dataclass(frozen=True, slots=True)
class InvocationState:
    """Everything needed to render a component again."""

    target: str
    kind: str
    site_id: str
    variables: dict[str, Any] = field(default_factory=dict)
    action: str | None = None


def decode_request(params: Mapping[str, Any], codec: VariableCodec) -> InvocationState:
    """Verify the signed parameters of a replay request.

    Unsigned parameters become plain variables; signed variables override them.
    Missing or invalid tokens raise :class:`TokenForgeryError`.
    """
    site_id = _unsign(codec, params, SITE_PARAM)

    if params.get(COMPONENT_PARAM):
        kind, target = "component", _unsign(codec, params, COMPONENT_PARAM)
    else:
        kind, target = "template", _unsign(codec, params, TEMPLATE_PARAM)

    action = _unsign(codec, params, ACTION_PARAM) if params.get(ACTION_PARAM) else None

    plain = VariableCodec(codec.security, VariablePolicy.LENIENT)
    variables: dict[str, Any] = {}
    for key, value in params.items():
        if key.startswith(PARAM_PREFIX):
            continue
        plain.validate(key, value)
        variables[key] = value

    for name, token in _variable_tokens(params).items():
        try:
            variables[name] = codec.decode(token)
        except TokenForgeryError:
            logger.warning("Rejected a tampered token for variable '%s'.", name)
            raise

    return InvocationState(
        target=target,
        kind=kind,
        site_id=site_id,
        variables=variables,
        action=action,
    )


def _unsign(codec: VariableCodec, params: Mapping[str, Any], key: str) -> str:
    token = params.get(key)
    if not isinstance(token, str) or not token:
        raise TokenForgeryError(f"Missing signed parameter '{key}'.")
    try:
        return codec.unsign(token)
    except TokenForgeryError:
        logger.warning("Rejected a tampered '%s' token.", key)
        raise


def _variable_tokens(params: Mapping[str, Any]) -> dict[str, str]:
    tokens: dict[str, str] = {}
    nested = params.get(VARIABLES_PARAM)
    if isinstance(nested, Mapping):
        tokens.update({str(name): token for name, token in nested.items()})
    for key, token in params.items():
        match = _VARIABLE_KEY.fullmatch(key)
        if match:
            tokens[match.group("name")] = token
    for name, token in tokens.items():
        if not isinstance(token, str):
            raise TokenForgeryError(f"Variable '{name}' does not carry a token.")
    return tokens


__all__ = ["InvocationState", "decode_request"]

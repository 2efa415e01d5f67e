"""Validation and signing of component invocation variables.

Only plain data may travel through the browser: strings, numbers, booleans,
``None`` and, depending on :class:`~sprout.core.config.VariablePolicy`,
arrays whose leaves are plain data. Domain entities, models and arbitrary
objects are refused before anything is signed so they can never be rebuilt
from a replayed token.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Mapping
import dataclasses
import json
import math
from typing import Any

from pydantic import BaseModel

from .config import VariablePolicy
from .exceptions import InvalidVariableKindError, TokenForgeryError
from .security import HashProvider


SCALAR_TYPES = (str, int, float, bool, type(None))
ARRAY_TYPES = (list, tuple, dict)


class Element(ABC):
    """Marker for domain entities that must never be passed as variables.

    Hosts register their entity classes with ``Element.register(MyEntity)``.
    """


def variable_kind(value: Any) -> str:
    """Return ``scalar``, ``array``, ``element``, ``model`` or ``object``."""
    if isinstance(value, Element):
        return "element"
    if isinstance(value, BaseModel) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    ):
        return "model"
    if isinstance(value, ARRAY_TYPES):
        return "array"
    if isinstance(value, SCALAR_TYPES):
        return "scalar"
    return "object"


def canonical(value: Any) -> str:
    """Serialise a validated value into the string form that gets signed."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


class VariableCodec:
    """Encode variables into tokens and decode them back on replay."""

    def __init__(
        self,
        security: HashProvider,
        policy: VariablePolicy = VariablePolicy.LENIENT,
    ) -> None:
        self.security = security
        self.policy = policy

    def validate(self, name: str, value: Any) -> None:
        """Raise :class:`InvalidVariableKindError` unless ``value`` may be encoded."""
        self._validate(name, value, name)

    def _validate(self, name: str, value: Any, path: str) -> None:
        kind = variable_kind(value)
        if kind == "scalar":
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidVariableKindError("object", name, path)
            return
        if kind != "array" or self.policy is VariablePolicy.STRICT:
            raise InvalidVariableKindError(kind, name, path)

        is_mapping = isinstance(value, Mapping)
        items = value.items() if is_mapping else enumerate(value)
        for key, item in items:
            # JSON object keys are always strings once decoded
            if is_mapping and not isinstance(key, str):
                raise InvalidVariableKindError("object", name, f"{path}[{key!r}]")
            self._validate(name, item, f"{path}[{key}]")

    def encode(self, name: str, value: Any) -> str:
        """Validate and sign one variable."""
        self.validate(name, value)
        return self.security.sign(canonical(value))

    def decode(self, token: str) -> Any:
        """Verify a variable token and return the original value."""
        payload = self.security.unsign(token)
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise TokenForgeryError("Token does not carry an encoded variable.") from exc

    def sign(self, value: str | int) -> str:
        """Sign a raw identifier such as a target name, site or action."""
        return self.security.sign(str(value))

    def unsign(self, token: str) -> str:
        """Verify a raw identifier token."""
        return self.security.unsign(token)


__all__ = ["Element", "VariableCodec", "canonical", "variable_kind"]

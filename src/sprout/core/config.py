"""Configuration models used by the component renderer.

SproutConfig

`directive_prefixes` (`tuple[str, ...]`)
: Authoring prefixes recognised on directive attributes, tried in order. A
  prefix matches when the attribute starts with the prefix followed by ``-``.
  Longer, more specific forms come first so ``data-sprout-get`` never resolves
  through ``data-s``.

`marker_attributes` (`tuple[str, ...]`)
: Bare attributes asking an element to re-request its own component.

`wire_data_prefix` (`bool`)
: Emit ``data-hx-*`` instead of ``hx-*`` for every wire attribute. Use it when
  the authoring context only allows ``data-*`` attributes.

`variable_policy` (`VariablePolicy`)
: ``lenient`` accepts arrays whose leaves are scalars, ``strict`` rejects every
  array variable.

`render_url` (`str`)
: Endpoint requested by the AJAX client to re-render a component.

`csrf_header` (`str`)
: Header carrying the anti-forgery token on POST requests.

`unsafe_schemes` (`tuple[str, ...]`)
: URI schemes refused at the start of JSON-bodied directives. Matched
  case-insensitively after leading whitespace is stripped.

`component_class` (`str`)
: CSS class set on the element wrapping every component.

`id_prefix` (`str`)
: Prefix of generated component ids. It must not start with a digit.

`parser` (`str`)
: BeautifulSoup backend used to parse fragments.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigurationError


class VariablePolicy(str, Enum):
    """Which variable shapes may be encoded into tokens."""

    LENIENT = "lenient"
    """Scalars and arrays of scalars."""

    STRICT = "strict"
    """Scalars only."""


class SproutConfig(BaseModel):
    """Settings shared by the rewriter, the fragment processor and the builder."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    directive_prefixes: tuple[str, ...] = ("data-sprout", "data-s", "sprout", "s")
    marker_attributes: tuple[str, ...] = ("sprout", "data-sprout")
    wire_data_prefix: bool = False
    variable_policy: VariablePolicy = VariablePolicy.LENIENT
    render_url: str = "/actions/sprout/components/render"
    csrf_header: str = "X-CSRF-Token"
    unsafe_schemes: tuple[str, ...] = ("javascript:", "vbscript:")
    component_class: str = "sprout-component"
    id_prefix: str = Field(default="component-", min_length=1)
    parser: str = "lxml"

    @field_validator("directive_prefixes")
    @classmethod
    def _check_prefixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one directive prefix is required")
        if any(not prefix or prefix.endswith("-") for prefix in value):
            raise ValueError("directive prefixes must be non-empty and not end with '-'")
        return value

    @field_validator("unsafe_schemes")
    @classmethod
    def _normalise_schemes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(scheme.strip().lower() for scheme in value if scheme.strip())

    @field_validator("id_prefix")
    @classmethod
    def _check_id_prefix(cls, value: str) -> str:
        if value[0].isdigit():
            raise ValueError("id prefix may not start with a digit")
        return value

    @property
    def wire_prefix(self) -> str:
        """Return the prefix prepended to every wire attribute name."""
        return "data-hx-" if self.wire_data_prefix else "hx-"

    def wire(self, name: str) -> str:
        """Return the full wire attribute name for a logical name."""
        return f"{self.wire_prefix}{name}"


def load_config(path: Path | str, **overrides: Any) -> SproutConfig:
    """Load a configuration file, optionally nested under a ``sprout`` key."""
    source = Path(path)
    try:
        payload = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read configuration '{source}': {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration '{source}' must contain a mapping.")
    if isinstance(payload.get("sprout"), dict):
        payload = payload["sprout"]

    payload.update(overrides)
    try:
        return SproutConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration '{source}': {exc}") from exc


__all__ = ["SproutConfig", "VariablePolicy", "load_config"]

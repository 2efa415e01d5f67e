"""Per-element state shared by the rewrite handlers."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .accumulator import merge_json_attribute
from .directives import Directive, DirectiveResolver


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .codec import VariableCodec
    from .config import SproutConfig
    from .diagnostics import DeprecationLogger
    from .rules import RewritePhase


CsrfTokenProvider = Callable[[], str | None]


@dataclass(slots=True)
class RewriteContext:
    """Attributes of one element plus the collaborators needed to rewrite them."""

    attributes: MutableMapping[str, Any]
    config: SproutConfig
    codec: VariableCodec
    resolver: DirectiveResolver
    deprecations: DeprecationLogger
    csrf_token: CsrfTokenProvider | None = None
    directives: list[Directive] = field(default_factory=list)
    consumed: set[str] = field(default_factory=set)
    phase: RewritePhase | None = None

    def __post_init__(self) -> None:
        if not self.directives:
            self.directives = self.resolver.collect(self.attributes)

    def wire(self, name: str) -> str:
        """Return the wire attribute name for ``name``."""
        return self.config.wire(name)

    def pending(self) -> Iterator[Directive]:
        """Yield directives not yet consumed, in discovery order."""
        for directive in self.directives:
            if directive.raw_key not in self.consumed:
                yield directive

    def named(self, name: str) -> list[Directive]:
        """Return every pending directive whose logical name is ``name``."""
        return [directive for directive in self.pending() if directive.logical_name == name]

    def consume(self, directive: Directive) -> None:
        """Mark ``directive`` as handled so it is removed during cleanup."""
        self.consumed.add(directive.raw_key)

    def has_marker(self) -> bool:
        """Return True when the element carries a bare request marker."""
        return any(self.resolver.is_marker(key) for key in self.attributes)

    def directive_value(self, name: str) -> str:
        """Return the first non-empty value of directive ``name``."""
        return self.resolver.value_of(self.attributes, name)

    def set_wire(self, name: str, value: str) -> None:
        """Assign a wire attribute, replacing any previous value."""
        self.attributes[self.wire(name)] = value

    def merge_wire_json(self, name: str, pairs: Mapping[str, Any]) -> None:
        """Accumulate ``pairs`` into the JSON-bodied wire attribute ``name``."""
        key = self.wire(name)
        existing = self.attributes.get(key)
        merged = merge_json_attribute(existing, pairs, source=key)
        if merged:
            self.attributes[key] = merged


__all__ = ["CsrfTokenProvider", "RewriteContext"]

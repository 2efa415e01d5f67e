"""Recognition of directive attributes and their logical names."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import re


VALUE_PREFIX = "val:"

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")


@dataclass(frozen=True, slots=True)
class Directive:
    """A directive attribute found on one element."""

    raw_key: str
    logical_name: str
    value: str

    @property
    def is_value(self) -> bool:
        """Return True for ``val:<field>`` directives."""
        return self.logical_name.startswith(VALUE_PREFIX)

    @property
    def field_name(self) -> str | None:
        """Return the normalised field of a value directive."""
        if not self.is_value:
            return None
        return normalise_field_name(self.logical_name[len(VALUE_PREFIX) :])


def normalise_field_name(name: str) -> str:
    """Convert ``first-name`` or ``first_name`` into ``firstName``."""
    words = [word for word in _WORD_SPLIT.split(name) if word]
    if not words:
        return ""
    head, *tail = words
    return head[:1].lower() + head[1:] + "".join(word[:1].upper() + word[1:] for word in tail)


class DirectiveResolver:
    """Map attribute names onto logical directive names.

    Prefixes are tried in the configured order and the first prefix followed by
    ``-`` wins. Attributes matching no prefix resolve to ``None``.
    """

    def __init__(
        self,
        prefixes: Iterable[str],
        marker_attributes: Iterable[str] = (),
    ) -> None:
        self.prefixes = tuple(prefixes)
        self.marker_attributes = frozenset(marker_attributes)

    def resolve(self, key: str) -> str | None:
        """Return the logical name of ``key`` or ``None`` for plain attributes."""
        for prefix in self.prefixes:
            head = f"{prefix}-"
            if key.startswith(head) and len(key) > len(head):
                return key[len(head) :]
        return None

    def is_marker(self, key: str) -> bool:
        """Return True when ``key`` is a bare request marker."""
        return key in self.marker_attributes

    def collect(self, attributes: Mapping[str, object]) -> list[Directive]:
        """Return the directives of an attribute set in discovery order."""
        directives: list[Directive] = []
        for key, value in attributes.items():
            name = self.resolve(key)
            if name is None:
                continue
            directives.append(Directive(raw_key=key, logical_name=name, value=_as_text(value)))
        return directives

    def value_of(self, attributes: Mapping[str, object], name: str) -> str:
        """Return the first non-empty value of directive ``name`` across prefixes."""
        for prefix in self.prefixes:
            value = attributes.get(f"{prefix}-{name}")
            if value:
                return _as_text(value)
        return ""


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


__all__ = ["VALUE_PREFIX", "Directive", "DirectiveResolver", "normalise_field_name"]

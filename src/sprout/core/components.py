"""Components and templates the builder can render by name."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, TypeVar, runtime_checkable

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import ComponentInputError


class Component(BaseModel):
    """Base class for server-side components.

    Subclasses declare their inputs as fields. Variables that do not match a
    declared field are rejected instead of being ignored.
    """

    model_config = ConfigDict(extra="forbid")

    def render(self) -> str:
        raise NotImplementedError


ComponentT = TypeVar("ComponentT", bound=type[Component])


class ComponentRegistry:
    """Named collection of component classes."""

    def __init__(self) -> None:
        self._components: dict[str, type[Component]] = {}

    def register(self, name: str, component: type[Component] | None = None) -> Any:
        """Register ``component`` under ``name``; usable as a decorator."""

        def decorator(cls: ComponentT) -> ComponentT:
            if not (isinstance(cls, type) and issubclass(cls, Component)):
                raise TypeError(f"Component '{name}' must extend Component.")
            self._components[name] = cls
            return cls

        if component is not None:
            return decorator(component)
        return decorator

    def get(self, name: str) -> type[Component] | None:
        return self._components.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def create(self, name: str, variables: Mapping[str, Any]) -> Component | None:
        """Instantiate component ``name`` with ``variables`` or return ``None``."""
        cls = self.get(name)
        if cls is None:
            return None
        try:
            return cls.model_validate(dict(variables))
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) for error in exc.errors()
            )
            raise ComponentInputError(
                f"Component '{name}' rejected its variables: {fields}."
            ) from exc


@runtime_checkable
class TemplateResolver(Protocol):
    """Collaborator rendering templates by name."""

    def exists(self, name: str) -> bool: ...

    def render(self, name: str, variables: Mapping[str, Any]) -> str: ...


def build_environment(search_paths: Iterable[Path | str]) -> Environment:
    """Return a Jinja environment suited to HTML fragments."""
    loader = FileSystemLoader([str(path) for path in search_paths])
    return Environment(
        loader=loader,
        autoescape=select_autoescape(default=True, default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )


class JinjaTemplateResolver:
    """:class:`TemplateResolver` backed by a Jinja2 environment."""

    def __init__(
        self,
        search_paths: Iterable[Path | str] = (),
        *,
        environment: Environment | None = None,
    ) -> None:
        self.environment = environment or build_environment(search_paths)

    def exists(self, name: str) -> bool:
        try:
            self.environment.get_template(name)
        except TemplateNotFound:
            return False
        return True

    def render(self, name: str, variables: Mapping[str, Any]) -> str:
        return self.environment.get_template(name).render(**variables)


__all__ = [
    "Component",
    "ComponentRegistry",
    "JinjaTemplateResolver",
    "TemplateResolver",
    "build_environment",
]

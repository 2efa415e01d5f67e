"""Human readable diagnostics rendered in place of a failing component."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment

from .components import build_environment
from .exceptions import InvalidVariableKindError


TEMPLATES_ROOT = Path(__file__).resolve().parent.parent / "templates"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return build_environment([TEMPLATES_ROOT])


def render_variable_error(exc: InvalidVariableKindError) -> str:
    """Render the diagnostic fragment explaining a rejected variable."""
    template = _environment().get_template(f"errors/variable-{exc.kind}.html")
    return template.render(name=exc.name, path=exc.path, kind=exc.kind)


__all__ = ["render_variable_error"]

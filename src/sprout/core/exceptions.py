"""Custom exception hierarchy for the component rendering pipeline."""

from __future__ import annotations


class SproutError(RuntimeError):
    """Base exception for component rendering failures."""

    status_code: int = 500


class BadRequestError(SproutError):
    """Raised when the input of a render request cannot be honoured."""

    status_code = 400


class ConfigurationError(SproutError):
    """Raised when the runtime configuration is unusable."""


class InvalidVariableKindError(BadRequestError, TypeError):
    """Raised when a component variable cannot be encoded into a token.

    ``kind`` is one of ``element``, ``model``, ``object`` or ``array``.
    ``path`` points at the offending leaf when the variable is nested.
    """

    def __init__(self, kind: str, name: str, path: str | None = None) -> None:
        self.kind = kind
        self.name = name
        self.path = path or name
        super().__init__(f"Variable '{self.path}' may not be of kind '{kind}'.")


class MalformedJsonDirectiveError(BadRequestError):
    """Raised when a JSON-bodied attribute does not contain a JSON object."""


class UnsafeUriSchemeError(BadRequestError):
    """Raised when a JSON-bodied attribute starts with a script-executing scheme."""


class TargetNotFoundError(BadRequestError):
    """Raised when neither a component nor a template matches a name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unable to find the component or template '{name}'.")


class ComponentInputError(BadRequestError):
    """Raised when a component rejects the variables it was created with."""


class TokenForgeryError(BadRequestError):
    """Raised when a signed token was tampered with, truncated, or foreign."""


class MissingCsrfTokenError(SproutError):
    """Raised when a POST request is requested without an anti-forgery token."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BadRequestError",
    "ComponentInputError",
    "ConfigurationError",
    "InvalidVariableKindError",
    "MalformedJsonDirectiveError",
    "MissingCsrfTokenError",
    "SproutError",
    "TargetNotFoundError",
    "TokenForgeryError",
    "UnsafeUriSchemeError",
    "exception_hint",
    "exception_messages",
]

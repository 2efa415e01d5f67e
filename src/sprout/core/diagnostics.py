"""Deprecation notices raised while rewriting directives."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DeprecationLogger(Protocol):
    """Interface used to record the use of obsolete directives."""

    def notify(self, feature_id: str, message: str) -> None: ...


class NullDeprecationLogger:
    """Logger that ignores every notice."""

    def notify(self, feature_id: str, message: str) -> None:
        return


class LoggingDeprecationLogger:
    """Logger that forwards notices to the standard logging module."""

    def __init__(self, *, logger_obj: logging.Logger | None = None) -> None:
        self._logger = logger_obj or logger

    def notify(self, feature_id: str, message: str) -> None:
        self._logger.warning("%s [%s]", message, feature_id)


__all__ = [
    "DeprecationLogger",
    "LoggingDeprecationLogger",
    "NullDeprecationLogger",
]

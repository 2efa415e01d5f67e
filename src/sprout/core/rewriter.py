"""Attribute rewriter turning directives into wire attributes."""

from __future__ import annotations

from collections.abc import MutableMapping
import logging
from typing import Any

from .codec import VariableCodec
from .config import SproutConfig
from .context import CsrfTokenProvider, RewriteContext
from .diagnostics import DeprecationLogger, NullDeprecationLogger
from .directives import DirectiveResolver
from .rules import RewriteEngine


logger = logging.getLogger(__name__)


class AttributeRewriter:
    """Rewrite one element's attributes in place.

    Each call runs the registered handlers phase by phase: request marker,
    value directives, replace shorthand, remaining directives, cleanup.
    Attributes that are not directives are never touched.
    """

    def __init__(
        self,
        config: SproutConfig,
        codec: VariableCodec,
        *,
        deprecations: DeprecationLogger | None = None,
        csrf_token: CsrfTokenProvider | None = None,
    ) -> None:
        self.config = config
        self.codec = codec
        self.deprecations = deprecations or NullDeprecationLogger()
        self.csrf_token = csrf_token
        self.resolver = DirectiveResolver(config.directive_prefixes, config.marker_attributes)
        self.engine = RewriteEngine()
        self._register_builtin_handlers()

    def _register_builtin_handlers(self) -> None:
        from sprout.handlers import attributes as attribute_handlers

        self.engine.collect_from(attribute_handlers)

    def register(self, handler: Any) -> None:
        """Register additional handlers.

        Arguments can be callables decorated with :func:`rewrites` or modules and
        classes exposing decorated attributes.
        """
        if getattr(handler, "__rewrite_rule__", None) is not None:
            self.engine.register(handler)
            return
        self.engine.collect_from(handler)

    def rewrite(self, attributes: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Rewrite ``attributes`` in place and return the same mapping."""
        context = RewriteContext(
            attributes=attributes,
            config=self.config,
            codec=self.codec,
            resolver=self.resolver,
            deprecations=self.deprecations,
            csrf_token=self.csrf_token,
        )
        if not context.directives and not context.has_marker():
            return attributes

        logger.debug(
            "Rewriting %d directive(s): %s",
            len(context.directives),
            ", ".join(directive.raw_key for directive in context.directives),
        )
        self.engine.run(context)
        return attributes


__all__ = ["AttributeRewriter"]

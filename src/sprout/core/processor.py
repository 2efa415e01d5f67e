"""Post-processing of rendered HTML fragments."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, FeatureNotFound

from .rewriter import AttributeRewriter


logger = logging.getLogger(__name__)

_DOCUMENT_SHELL = '<!doctype html><html lang=""><body>{}</body></html>'


class FragmentProcessor:
    """Rewrite the directives of every element within an HTML fragment."""

    def __init__(self, rewriter: AttributeRewriter, parser: str | None = None) -> None:
        self.rewriter = rewriter
        self.parser_backend = parser or rewriter.config.parser

    def process(self, html: str) -> str:
        """Return ``html`` with every element's directives rewritten."""
        if not html.strip():
            return html

        # Parse inside a body so top-level scripts are not moved into <head>.
        soup = self._parse(_DOCUMENT_SHELL.format(html))
        body = soup.body
        if body is None:  # pragma: no cover - the shell always yields a body
            return html

        for element in body.find_all(True):
            self.rewriter.rewrite(element.attrs)

        output = body.decode_contents()
        # Character references escaped during serialisation are restored.
        return output.replace("&amp;#", "&#")

    def _parse(self, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, self.parser_backend, multi_valued_attributes=None)
        except FeatureNotFound:
            if self.parser_backend == "html.parser":
                raise
            logger.debug("Parser '%s' unavailable, using html.parser", self.parser_backend)
            self.parser_backend = "html.parser"
            return BeautifulSoup(html, self.parser_backend, multi_valued_attributes=None)


__all__ = ["FragmentProcessor"]

from __future__ import annotations

import json

from bs4 import BeautifulSoup
import pytest

from sprout.core.codec import VariableCodec
from sprout.core.config import SproutConfig
from sprout.core.exceptions import MalformedJsonDirectiveError, UnsafeUriSchemeError
from sprout.core.processor import FragmentProcessor
from sprout.core.rewriter import AttributeRewriter
from sprout.core.security import HmacSecurity


PARSERS = ["html.parser", "lxml"]


class RecordingDeprecations:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def notify(self, feature_id: str, message: str) -> None:
        self.calls.append(feature_id)


def _processor(parser: str, deprecations: RecordingDeprecations | None = None) -> FragmentProcessor:
    rewriter = AttributeRewriter(
        SproutConfig(parser=parser),
        VariableCodec(HmacSecurity("processor-secret")),
        deprecations=deprecations,
        csrf_token=lambda: "csrf",
    )
    return FragmentProcessor(rewriter)


def _attrs(html: str, selector: str) -> dict[str, str]:
    soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    element = soup.select_one(selector)
    assert element is not None
    return dict(element.attrs)


@pytest.mark.parametrize("parser", PARSERS)
@pytest.mark.parametrize("html", ["", "   ", "\n\t"])
def test_blank_input_is_returned_unchanged(parser: str, html: str) -> None:
    assert _processor(parser).process(html) == html


def test_replace_directive_is_rewritten() -> None:
    output = _processor("html.parser").process('<button s-replace="#list">Go</button>')
    assert output == (
        '<button hx-select="#list" hx-target="#list" hx-swap="outerHTML">Go</button>'
    )


@pytest.mark.parametrize("parser", PARSERS)
def test_every_element_is_visited(parser: str) -> None:
    output = _processor(parser).process(
        '<div id="outer" s-target="#a"><span id="inner" s-swap="none">x</span></div>'
        '<p id="sibling" s-val:page-number="2">y</p>'
    )

    assert _attrs(output, "#outer") == {"id": "outer", "hx-target": "#a"}
    assert _attrs(output, "#inner") == {"id": "inner", "hx-swap": "none"}
    sibling = _attrs(output, "#sibling")
    assert json.loads(sibling["hx-vals"]) == {"pageNumber": "2"}


@pytest.mark.parametrize("parser", PARSERS)
def test_duplicate_ids_are_tolerated(parser: str) -> None:
    output = _processor(parser).process('<div id="x" id="y">ok</div><p id="x">again</p>')
    assert "ok" in output
    assert "again" in output
    assert output.count("<div") == 1


@pytest.mark.parametrize("parser", PARSERS)
def test_top_level_script_stays_in_place(parser: str) -> None:
    html = '<script>var tag = "<b>" && 1;</script><p s-trigger="load">x</p>'

    output = _processor(parser).process(html)

    assert output.startswith('<script>var tag = "<b>" && 1;</script>')
    assert '<p hx-trigger="load">x</p>' in output


@pytest.mark.parametrize("parser", PARSERS)
def test_character_references_are_not_double_encoded(parser: str) -> None:
    output = _processor(parser).process("<p>&amp;#8220;quoted&amp;#8221;</p>")
    assert output == "<p>&#8220;quoted&#8221;</p>"


@pytest.mark.parametrize("parser", PARSERS)
def test_plain_markup_round_trips(parser: str) -> None:
    html = '<ul class="a b"><li data-id="1">One</li><li>Two &amp; three</li></ul>'
    assert _processor(parser).process(html) == html


@pytest.mark.parametrize("parser", PARSERS)
def test_processing_is_idempotent(parser: str) -> None:
    processor = _processor(parser)
    once = processor.process('<a sprout s-method="post" s-val:id="7" s-replace="#cart">Add</a>')
    assert processor.process(once) == once


def test_deprecations_are_reported_per_element() -> None:
    deprecations = RecordingDeprecations()
    processor = _processor("html.parser", deprecations)

    processor.process('<p s-vars="a:1">a</p><p s-vars="b:2">b</p>')

    assert deprecations.calls == ["sprout.directives.vars", "sprout.directives.vars"]


def test_malformed_json_fails_the_whole_fragment() -> None:
    with pytest.raises(MalformedJsonDirectiveError):
        _processor("html.parser").process('<p s-trigger="load">ok</p><p s-vals="{bad">x</p>')


def test_unsafe_scheme_fails_the_whole_fragment() -> None:
    with pytest.raises(UnsafeUriSchemeError):
        _processor("html.parser").process("<p s-headers='javascript:alert(1)'>x</p>")


def test_missing_parser_falls_back_to_html_parser() -> None:
    processor = _processor("html.parser")
    processor.parser_backend = "no-such-parser"

    output = processor.process('<p s-trigger="load">x</p>')

    assert output == '<p hx-trigger="load">x</p>'
    assert processor.parser_backend == "html.parser"

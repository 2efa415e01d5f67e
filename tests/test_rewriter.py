from __future__ import annotations

import json

import pytest

from sprout.core.codec import VariableCodec
from sprout.core.config import SproutConfig
from sprout.core.context import RewriteContext
from sprout.core.exceptions import (
    MalformedJsonDirectiveError,
    MissingCsrfTokenError,
    UnsafeUriSchemeError,
)
from sprout.core.rewriter import AttributeRewriter
from sprout.core.rules import RewritePhase, rewrites
from sprout.core.security import HmacSecurity


class RecordingDeprecations:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def notify(self, feature_id: str, message: str) -> None:
        self.calls.append((feature_id, message))


@pytest.fixture
def codec() -> VariableCodec:
    return VariableCodec(HmacSecurity("rewriter-secret"))


@pytest.fixture
def deprecations() -> RecordingDeprecations:
    return RecordingDeprecations()


@pytest.fixture
def rewriter(codec: VariableCodec, deprecations: RecordingDeprecations) -> AttributeRewriter:
    return AttributeRewriter(
        SproutConfig(),
        codec,
        deprecations=deprecations,
        csrf_token=lambda: "csrf-123",
    )


def test_bare_marker_requests_the_component(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"sprout": "", "class": "btn"})
    assert attributes == {"class": "btn", "hx-get": "/actions/sprout/components/render"}


def test_data_marker_is_recognised(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"data-sprout": ""})
    assert attributes == {"hx-get": "/actions/sprout/components/render"}


@pytest.mark.parametrize("method", ["post", "POST", "Post"])
def test_post_method_adds_csrf_header(rewriter: AttributeRewriter, method: str) -> None:
    attributes = rewriter.rewrite({"sprout": "", "s-method": method})

    assert "hx-get" not in attributes
    assert attributes["hx-post"] == "/actions/sprout/components/render"
    assert json.loads(attributes["hx-headers"]) == {"X-CSRF-Token": "csrf-123"}
    assert "s-method" not in attributes


def test_other_methods_fall_back_to_get(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"sprout": "", "s-method": "delete"})
    assert attributes == {"hx-get": "/actions/sprout/components/render"}


def test_post_without_csrf_token_fails(codec: VariableCodec) -> None:
    rewriter = AttributeRewriter(SproutConfig(), codec)
    with pytest.raises(MissingCsrfTokenError):
        rewriter.rewrite({"sprout": "", "s-method": "post"})


def test_action_is_signed_into_the_request(
    rewriter: AttributeRewriter, codec: VariableCodec
) -> None:
    attributes = rewriter.rewrite({"sprout": "", "s-action": "cart/add"})

    url = attributes["hx-get"]
    base, query = url.split("?", 1)
    key, token = query.split("=", 1)
    assert base == "/actions/sprout/components/render"
    assert key == "sprout:action"
    assert codec.unsign(token) == "cart/add"
    assert "s-action" not in attributes


def test_value_directives_accumulate_in_discovery_order(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite(
        {"s-val:first-name": "Ada", "data-s-val:age": "36", "s-val:first_name": "Grace"}
    )

    assert list(attributes) == ["hx-vals"]
    assert json.loads(attributes["hx-vals"]) == {"firstName": "Grace", "age": "36"}


def test_value_directives_override_existing_values(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"hx-vals": '{"a":"1","b":"2"}', "s-val:b": "3"})
    assert json.loads(attributes["hx-vals"]) == {"a": "1", "b": "3"}


def test_vals_directive_overrides_value_directives(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"s-vals": '{"x":"2","y":"3"}', "s-val:x": "1"})
    assert json.loads(attributes["hx-vals"]) == {"x": "2", "y": "3"}


def test_replace_expands_into_three_wire_attributes(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"class": "btn", "s-replace": "#list", "s-trigger": "click"})

    assert attributes == {
        "class": "btn",
        "hx-select": "#list",
        "hx-target": "#list",
        "hx-swap": "outerHTML",
        "hx-trigger": "click",
    }


def test_remaining_directives_map_one_to_one(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite(
        {
            "s-trigger": "keyup changed delay:300ms",
            "sprout-confirm": "Sure?",
            "data-s-push-url": "true",
            "data-sprout-swap-oob": "true",
            "s-get": "/search",
        }
    )

    assert attributes == {
        "hx-trigger": "keyup changed delay:300ms",
        "hx-confirm": "Sure?",
        "hx-push-url": "true",
        "hx-swap-oob": "true",
        "hx-get": "/search",
    }


def test_headers_directive_merges_with_csrf_header(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite(
        {"sprout": "", "s-method": "post", "s-headers": '{"X-Extra":"1"}'}
    )
    assert json.loads(attributes["hx-headers"]) == {"X-CSRF-Token": "csrf-123", "X-Extra": "1"}


def test_malformed_json_directive_fails(rewriter: AttributeRewriter) -> None:
    with pytest.raises(MalformedJsonDirectiveError):
        rewriter.rewrite({"s-headers": "{oops"})


@pytest.mark.parametrize("value", ["javascript:alert(1)", "  JavaScript:alert(1)", "vbscript:x"])
def test_unsafe_scheme_in_json_directive_fails(rewriter: AttributeRewriter, value: str) -> None:
    with pytest.raises(UnsafeUriSchemeError):
        rewriter.rewrite({"s-vals": value})


def test_unsafe_scheme_outside_json_directive_passes_through(rewriter: AttributeRewriter) -> None:
    attributes = rewriter.rewrite({"s-confirm": "javascript:alert(1)"})
    assert attributes == {"hx-confirm": "javascript:alert(1)"}


def test_unknown_attributes_pass_through_untouched(rewriter: AttributeRewriter) -> None:
    original = {"Class": "Btn", "data-x": "1", "s-unknown": "keep", "onclick": "go()"}
    attributes = rewriter.rewrite(dict(original))
    assert attributes == original


def test_rewrite_mutates_in_place(rewriter: AttributeRewriter) -> None:
    attributes = {"s-target": "#a"}
    assert rewriter.rewrite(attributes) is attributes
    assert attributes == {"hx-target": "#a"}


def test_deprecated_directive_notifies_once_per_occurrence(
    rewriter: AttributeRewriter, deprecations: RecordingDeprecations
) -> None:
    attributes = rewriter.rewrite({"s-vars": "a:1"})
    rewriter.rewrite({"data-s-vars": "b:2"})

    assert attributes == {"hx-vars": "a:1"}
    assert [feature for feature, _message in deprecations.calls] == [
        "sprout.directives.vars",
        "sprout.directives.vars",
    ]
    assert "vals" in deprecations.calls[0][1]


def test_data_prefix_toggle_applies_everywhere(codec: VariableCodec) -> None:
    rewriter = AttributeRewriter(
        SproutConfig(wire_data_prefix=True), codec, csrf_token=lambda: "t"
    )

    attributes = rewriter.rewrite(
        {"sprout": "", "s-method": "post", "s-val:q": "x", "s-replace": "#r"}
    )

    assert set(attributes) == {
        "data-hx-post",
        "data-hx-headers",
        "data-hx-vals",
        "data-hx-select",
        "data-hx-target",
        "data-hx-swap",
    }


def test_custom_handlers_run_after_builtin_phases(rewriter: AttributeRewriter) -> None:
    seen: list[str | None] = []

    @rewrites(RewritePhase.DIRECTIVES, name="audit", after=("wire_directives",))
    def audit(context: RewriteContext) -> None:
        seen.append(context.attributes.get("hx-trigger"))

    rewriter.register(audit)
    rewriter.rewrite({"s-trigger": "load"})

    assert seen == ["load"]

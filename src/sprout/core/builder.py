"""Assembly of replayable component markup."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import html
import logging
import secrets
import string
from typing import Any

from jinja2 import Environment
from markupsafe import Markup

from .accumulator import html_safe_json
from .codec import VariableCodec
from .components import ComponentRegistry, TemplateResolver
from .config import SproutConfig
from .constants import PARAM_PREFIX, SITE_PARAM, variable_param
from .context import CsrfTokenProvider
from .diagnostics import DeprecationLogger
from .errors import render_variable_error
from .exceptions import BadRequestError, InvalidVariableKindError, TargetNotFoundError
from .processor import FragmentProcessor
from .replay import decode_request
from .rewriter import AttributeRewriter
from .security import HashProvider


logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_letters + string.digits


@dataclass
class ComponentEvent:
    """Mutable view of a build shared with the registered hooks."""

    target: str
    variables: dict[str, Any]
    attributes: dict[str, Any]
    output: str | None = None


BuildHook = Callable[[ComponentEvent], None]


class ComponentBuilder:
    """Render components wrapped in an element the AJAX client can refresh."""

    def __init__(
        self,
        config: SproutConfig,
        security: HashProvider,
        *,
        templates: TemplateResolver | None = None,
        components: ComponentRegistry | None = None,
        deprecations: DeprecationLogger | None = None,
        csrf_token: CsrfTokenProvider | None = None,
        site_id: str | int = 1,
    ) -> None:
        self.config = config
        self.templates = templates
        self.components = components or ComponentRegistry()
        self.site_id = str(site_id)
        self.codec = VariableCodec(security, config.variable_policy)
        self.rewriter = AttributeRewriter(
            config,
            self.codec,
            deprecations=deprecations,
            csrf_token=csrf_token,
        )
        self.processor = FragmentProcessor(self.rewriter)
        self.before_build: list[BuildHook] = []
        self.after_build: list[BuildHook] = []

    def on_before_build(self, hook: BuildHook) -> BuildHook:
        """Register a hook able to rewrite target, variables or attributes."""
        self.before_build.append(hook)
        return hook

    def on_after_build(self, hook: BuildHook) -> BuildHook:
        """Register a hook able to rewrite the final markup."""
        self.after_build.append(hook)
        return hook

    def build(
        self,
        target: str,
        variables: Mapping[str, Any] | None = None,
        attributes: Mapping[str, Any] | None = None,
        *,
        request_variables: Mapping[str, Any] | None = None,
    ) -> str:
        """Render ``target`` and wrap it in a refreshable ``div``.

        ``request_variables`` are the plain values of the current request. They
        reach the renderer but are never signed.
        """
        own_variables = dict(variables or {})
        ambient = dict(request_variables or {})
        event = ComponentEvent(
            target=target,
            variables={**own_variables, **ambient},
            attributes=dict(attributes or {}),
        )
        for hook in self.before_build:
            hook(event)

        signed = {
            name: value
            for name, value in event.variables.items()
            if name in own_variables or name not in ambient
        }
        try:
            tokens = {
                variable_param(name): self.codec.encode(name, value)
                for name, value in signed.items()
            }
        except InvalidVariableKindError as exc:
            logger.warning("Component '%s' received an invalid variable: %s", event.target, exc)
            return render_variable_error(exc)

        kind, rendered = self.render_target(event.target, event.variables)
        content = self.processor.process(rendered)

        values: dict[str, str] = {
            SITE_PARAM: self.codec.sign(self.site_id),
            f"{PARAM_PREFIX}{kind}": self.codec.sign(event.target),
            **tokens,
        }

        element_id = event.attributes.get("id") or self.generate_id()
        wire = self.config.wire
        base: dict[str, Any] = {
            "id": element_id,
            "class": self.config.component_class,
            wire("target"): "this",
            wire("include"): f"#{element_id} *",
            wire("trigger"): "refresh",
            wire("get"): self.config.render_url,
            wire("vals"): html_safe_json(values),
        }
        merged = {**base, **event.attributes}
        self.rewriter.rewrite(merged)

        event.output = render_element("div", merged, content)
        for hook in self.after_build:
            hook(event)
        return event.output

    def render_target(self, name: str, variables: Mapping[str, Any]) -> tuple[str, str]:
        """Render a registered component, else a template, and report which."""
        component = self.components.create(name, variables)
        if component is not None:
            return "component", component.render()
        if self.templates is not None and self.templates.exists(name):
            return "template", self.templates.render(name, variables)
        raise TargetNotFoundError(name)

    def replay(self, params: Mapping[str, Any]) -> str:
        """Render the component described by a replay request's parameters."""
        state = decode_request(params, self.codec)
        if state.site_id != self.site_id:
            raise BadRequestError("The request was signed for another site.")

        if state.kind == "component":
            component = self.components.create(state.target, state.variables)
            if component is None:
                raise TargetNotFoundError(state.target)
            rendered = component.render()
        else:
            if self.templates is None or not self.templates.exists(state.target):
                raise TargetNotFoundError(state.target)
            rendered = self.templates.render(state.target, state.variables)
        return self.processor.process(rendered)

    def generate_id(self) -> str:
        """Return a random element id that never starts with a digit."""
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
        return f"{self.config.id_prefix}{suffix}"

    def install(self, environment: Environment, name: str = "sprout") -> None:
        """Expose :meth:`build` to templates as a global function."""

        def _component(
            target: str,
            variables: Mapping[str, Any] | None = None,
            attributes: Mapping[str, Any] | None = None,
        ) -> Markup:
            return Markup(self.build(target, variables, attributes))

        environment.globals[name] = _component


def render_element(tag: str, attributes: Mapping[str, Any], content: str) -> str:
    """Serialise an element whose content is already HTML."""
    parts = [tag]
    for key, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(key)
            continue
        parts.append(f'{key}="{html.escape(str(value), quote=True)}"')
    return f"<{' '.join(parts)}>{content}</{tag}>"


__all__ = ["BuildHook", "ComponentBuilder", "ComponentEvent", "render_element"]

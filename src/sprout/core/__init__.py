"""Core building blocks of the component renderer."""

from __future__ import annotations

from .accumulator import html_safe_json, merge_json_attribute
from .builder import ComponentBuilder, ComponentEvent
from .codec import Element, VariableCodec
from .components import Component, ComponentRegistry, JinjaTemplateResolver, TemplateResolver
from .config import SproutConfig, VariablePolicy, load_config
from .diagnostics import DeprecationLogger, LoggingDeprecationLogger, NullDeprecationLogger
from .directives import Directive, DirectiveResolver
from .processor import FragmentProcessor
from .replay import InvocationState, decode_request
from .rewriter import AttributeRewriter
from .rules import RewritePhase, rewrites
from .security import HashProvider, HmacSecurity


__all__ = [
    "AttributeRewriter",
    "Component",
    "ComponentBuilder",
    "ComponentEvent",
    "ComponentRegistry",
    "DeprecationLogger",
    "Directive",
    "DirectiveResolver",
    "Element",
    "FragmentProcessor",
    "HashProvider",
    "HmacSecurity",
    "InvocationState",
    "JinjaTemplateResolver",
    "LoggingDeprecationLogger",
    "NullDeprecationLogger",
    "RewritePhase",
    "SproutConfig",
    "TemplateResolver",
    "VariableCodec",
    "VariablePolicy",
    "decode_request",
    "html_safe_json",
    "load_config",
    "merge_json_attribute",
    "rewrites",
]

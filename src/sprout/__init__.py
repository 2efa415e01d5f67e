"""Primary public API for Sprout."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from sprout.core import (
    AttributeRewriter,
    Component,
    ComponentBuilder,
    ComponentEvent,
    ComponentRegistry,
    DeprecationLogger,
    Directive,
    DirectiveResolver,
    Element,
    FragmentProcessor,
    HashProvider,
    HmacSecurity,
    InvocationState,
    JinjaTemplateResolver,
    LoggingDeprecationLogger,
    NullDeprecationLogger,
    RewritePhase,
    SproutConfig,
    TemplateResolver,
    VariableCodec,
    VariablePolicy,
    decode_request,
    html_safe_json,
    load_config,
    merge_json_attribute,
    rewrites,
)
from sprout.core.exceptions import (
    BadRequestError,
    ComponentInputError,
    ConfigurationError,
    InvalidVariableKindError,
    MalformedJsonDirectiveError,
    MissingCsrfTokenError,
    SproutError,
    TargetNotFoundError,
    TokenForgeryError,
    UnsafeUriSchemeError,
)


try:
    __version__ = _pkg_version("sprout-components")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "AttributeRewriter",
    "BadRequestError",
    "Component",
    "ComponentBuilder",
    "ComponentEvent",
    "ComponentInputError",
    "ComponentRegistry",
    "ConfigurationError",
    "DeprecationLogger",
    "Directive",
    "DirectiveResolver",
    "Element",
    "FragmentProcessor",
    "HashProvider",
    "HmacSecurity",
    "InvalidVariableKindError",
    "InvocationState",
    "JinjaTemplateResolver",
    "LoggingDeprecationLogger",
    "MalformedJsonDirectiveError",
    "MissingCsrfTokenError",
    "NullDeprecationLogger",
    "RewritePhase",
    "SproutConfig",
    "SproutError",
    "TargetNotFoundError",
    "TemplateResolver",
    "TokenForgeryError",
    "UnsafeUriSchemeError",
    "VariableCodec",
    "VariablePolicy",
    "__version__",
    "decode_request",
    "html_safe_json",
    "load_config",
    "merge_json_attribute",
    "rewrites",
]

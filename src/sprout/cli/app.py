"""Typer application wiring for the Sprout CLI."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import sys
from typing import Annotated

import typer

from sprout.core.codec import VariableCodec
from sprout.core.config import SproutConfig, load_config
from sprout.core.exceptions import SproutError, exception_hint
from sprout.core.processor import FragmentProcessor
from sprout.core.rewriter import AttributeRewriter
from sprout.core.rules import RewriteEngine
from sprout.core.security import HmacSecurity

from .state import debug_enabled, emit_error, emit_warning, get_cli_state, set_cli_state


SecretOption = Annotated[
    str,
    typer.Option(
        "--secret",
        envvar="SPROUT_SECRET_KEY",
        help="Secret used to sign and verify tokens.",
        show_envvar=True,
    ),
]


class ConsoleDeprecationLogger:
    """Deprecation logger printing notices on the error console."""

    def notify(self, feature_id: str, message: str) -> None:
        emit_warning(f"{message} [{feature_id}]")


app = typer.Typer(
    help="Rewrite component directives and manage signed tokens.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


@app.callback()
def configure(
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="YAML configuration file.", exists=True),
    ] = None,
    data_prefix: Annotated[
        bool | None,
        typer.Option("--data-prefix/--no-data-prefix", help="Emit data-hx-* wire attributes."),
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity.")
    ] = 0,
    debug: Annotated[bool, typer.Option("--debug", help="Show full tracebacks.")] = False,
) -> None:
    """Configure the shared CLI state."""
    overrides = {} if data_prefix is None else {"wire_data_prefix": data_prefix}
    with _reporting():
        settings = load_config(config, **overrides) if config else SproutConfig(**overrides)
    set_cli_state(verbosity=verbose, debug=debug, config=settings)
    logging.basicConfig(level=logging.DEBUG if verbose >= 2 else logging.WARNING)


@app.command()
def process(
    source: Annotated[
        Path | None,
        typer.Argument(help="HTML fragment to rewrite. Reads stdin when omitted.", exists=True),
    ] = None,
    secret: SecretOption = "",
    csrf_token: Annotated[
        str | None,
        typer.Option("--csrf-token", help="Anti-forgery token injected into POST requests."),
    ] = None,
) -> None:
    """Rewrite the directives of an HTML fragment."""
    state = get_cli_state()
    html = source.read_text(encoding="utf-8") if source else sys.stdin.read()
    rewriter = AttributeRewriter(
        state.config,
        _codec(secret, state.config),
        deprecations=ConsoleDeprecationLogger(),
        csrf_token=(lambda: csrf_token),
    )
    with _reporting():
        output = FragmentProcessor(rewriter).process(html)
    typer.echo(output, nl=False)


@app.command()
def sign(
    value: Annotated[str, typer.Argument(help="Value to sign.")],
    secret: SecretOption = "",
) -> None:
    """Sign a raw value into an opaque token."""
    typer.echo(_codec(secret, get_cli_state().config).sign(value))


@app.command()
def unsign(
    token: Annotated[str, typer.Argument(help="Token to verify.")],
    secret: SecretOption = "",
) -> None:
    """Verify a token and print the value it carries."""
    codec = _codec(secret, get_cli_state().config)
    with _reporting():
        value = codec.unsign(token)
    typer.echo(value)


@app.command()
def rules() -> None:
    """List the rewrite rules in execution order."""
    from rich import box
    from rich.table import Table

    from sprout.handlers import attributes as attribute_handlers

    engine = RewriteEngine()
    engine.collect_from(attribute_handlers)

    table = Table(
        title="Rewrite rules",
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    table.add_column("Phase", style="magenta")
    table.add_column("Name", style="green")
    table.add_column("Priority", justify="right")
    table.add_column("After")
    for entry in engine.registry.describe():
        after = ", ".join(entry["after"]) or "-"  # type: ignore[arg-type]
        table.add_row(str(entry["phase"]), str(entry["name"]), str(entry["priority"]), after)

    get_cli_state().console.print(table)


@contextmanager
def _reporting() -> Iterator[None]:
    """Report library errors on stderr and exit with status 1."""
    try:
        yield
    except SproutError as exc:
        if debug_enabled():
            raise
        emit_error(exception_hint(exc) or str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


def _codec(secret: str, config: SproutConfig) -> VariableCodec:
    if not secret:
        raise typer.BadParameter("A secret is required (--secret or SPROUT_SECRET_KEY).")
    return VariableCodec(HmacSecurity(secret), config.variable_policy)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]

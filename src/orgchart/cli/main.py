"""Primary Typer application wiring the orgchart CLI."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

import typer
from rich.table import Table

from orgchart.utils.logging import configure_logging

from . import hierarchy
from .common import CLIError, configure_state, console, parse_override, resolve_settings


class OrgchartTyper(typer.Typer):
    """Typer subclass that supports registering exception handlers."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._exception_handlers: list[tuple[type[BaseException], Callable[[BaseException], Any]]] = []

    def exception_handler(
        self, exception_type: type[BaseException]
    ) -> Callable[[Callable[[BaseException], Any]], Callable[[BaseException], Any]]:
        def decorator(handler: Callable[[BaseException], Any]) -> Callable[[BaseException], Any]:
            self._exception_handlers.append((exception_type, handler))
            return handler

        return decorator

    def _resolve_handler(self, exception: BaseException) -> Callable[[BaseException], Any] | None:
        for registered_type, handler in self._exception_handlers:
            if isinstance(exception, registered_type):
                return handler
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().__call__(*args, **kwargs)
        except BaseException as exc:  # pragma: no cover - CLI surface behaviour
            handler = self._resolve_handler(exc)
            if handler is None:
                raise
            result = handler(exc)
            if isinstance(result, typer.Exit):
                raise result
            if isinstance(result, BaseException):
                raise result
            return result


app = OrgchartTyper(
    add_completion=False,
    help="""
    Build validated people and team hierarchies from flat organization
    records, and inspect them from the command line.
    """.strip(),
    no_args_is_help=True,
)


@app.exception_handler(CLIError)
def handle_cli_error(exception: CLIError) -> typer.Exit:
    """Render ``CLIError`` messages without stack traces."""

    console.print(f"[bold red]Error:[/bold red] {exception}")
    return typer.Exit(code=2)


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Active configuration environment (development, testing, production).",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        "-o",
        metavar="KEY=VALUE",
        help="Configuration override in dotted.key=value notation (repeatable).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Emit verbose diagnostic output for CLI operations.",
    ),
) -> None:
    """Configure shared CLI state prior to executing subcommands."""

    overrides = [parse_override(item) for item in override]
    configure_state(
        ctx,
        environment=environment,
        overrides=overrides,
        verbose=verbose,
    )

    if verbose:
        state = ctx.obj
        policy = state.settings.policies.hierarchy
        table = Table(title="CLI Context", show_header=False, box=None)
        table.add_row("Environment", state.environment)
        table.add_row("Policy version", state.settings.policy_version)
        table.add_row("Max records", str(policy.max_records))
        table.add_row("Max direct reports", str(policy.max_direct_reports))
        console.print(table)


app.add_typer(hierarchy.app, name="hierarchy", help="Hierarchy construction commands")


def run(argv: Iterable[str] | None = None) -> int:
    """Console-script entry point: configure logging, then dispatch."""

    args = list(argv) if argv is not None else None
    configure_logging(resolve_settings(None, {}))
    try:
        return app(prog_name="orgchart", args=args, standalone_mode=False) or 0
    except typer.Exit as exc:  # pragma: no cover - delegated exit code
        return exc.exit_code


__all__ = ["app", "run"]

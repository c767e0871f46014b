"""Hierarchy commands: build, tree listing, statistics and span checks."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from orgchart.hierarchy import (
    HierarchyBuilder,
    HierarchyResult,
    InvalidInputError,
    assemble_from_files,
    check_reparent,
    hierarchy_statistics,
    load_records,
    render_tree,
    span_of_control,
)
from orgchart.hierarchy.io import EXPORT_FORMATS

from .common import CLIError, CLIState, console, fail, get_state, resolve_path

app = typer.Typer(
    add_completion=False,
    help="Build and inspect people or team hierarchies from flat records.",
    no_args_is_help=True,
)


def _build(state: CLIState, inputs: List[Path], organization: Optional[str]) -> HierarchyResult:
    records = load_records([resolve_path(path) for path in inputs], organization_id=organization)
    return HierarchyBuilder(state.settings.policies.hierarchy).build(records)


def _failure(exc: Exception) -> typer.Exit:
    if isinstance(exc, InvalidInputError):
        return fail(str(exc), reason=exc.reason.value)
    return fail(str(exc))


def _print_warnings(result: HierarchyResult, *, limit: int = 20) -> None:
    if not result.warnings:
        return
    table = Table(title=f"{result.warning_count} record(s) could not be placed", box=None)
    table.add_column("Record")
    table.add_column("Reason")
    table.add_column("Detail")
    for warning in result.warnings[:limit]:
        table.add_row(warning.id, warning.reason.value, warning.detail)
    if result.warning_count > limit:
        table.add_row("...", "", f"{result.warning_count - limit} more")
    console.print(table)


def _build_command(
    ctx: typer.Context,
    inputs: List[Path] = typer.Argument(..., help="Record files (JSON array or JSONL)."),
    *,
    output_path: Path = typer.Option(..., "--output", "-O", help="Destination for the hierarchy result JSON."),
    organization: Optional[str] = typer.Option(
        None,
        "--organization",
        help="Keep only records belonging to this organization id.",
    ),
    export_path: Optional[Path] = typer.Option(
        None,
        "--export",
        help="Optional path for a chart projection export.",
    ),
    export_format: str = typer.Option(
        "json",
        "--format",
        help="Projection export format: json, adjacency or dot.",
        case_sensitive=False,
    ),
    warnings_path: Optional[Path] = typer.Option(
        None,
        "--warnings",
        help="Optional path for the data-integrity warning report.",
    ),
) -> None:
    state = get_state(ctx)
    fmt = export_format.lower()
    if fmt not in EXPORT_FORMATS:
        raise fail(f"--format must be one of: {', '.join(EXPORT_FORMATS)}")

    try:
        result = assemble_from_files(
            [resolve_path(path) for path in inputs],
            resolve_path(output_path, must_exist=False),
            settings=state.settings,
            organization_id=organization,
            export_path=resolve_path(export_path, must_exist=False) if export_path else None,
            export_format=fmt,
            warning_report_path=resolve_path(warnings_path, must_exist=False) if warnings_path else None,
        )
    except (CLIError, FileNotFoundError, ValueError) as exc:
        raise _failure(exc) from exc

    table = Table(title="Hierarchy Summary", box=None)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Organization", result.organization_id or "-")
    table.add_row("Placed", str(result.node_count))
    table.add_row("Roots", str(len(result.roots)))
    table.add_row("Edges", str(len(result.edges)))
    table.add_row("Warnings", str(result.warning_count))
    console.print(table)
    _print_warnings(result)
    if result.has_warnings:
        raise typer.Exit(code=1)


def _tree_command(
    ctx: typer.Context,
    inputs: List[Path] = typer.Argument(..., help="Record files (JSON array or JSONL)."),
    *,
    organization: Optional[str] = typer.Option(None, "--organization", help="Organization id filter."),
) -> None:
    state = get_state(ctx)
    policy = state.settings.policies.hierarchy
    try:
        result = _build(state, inputs, organization)
    except (CLIError, FileNotFoundError, ValueError) as exc:
        raise _failure(exc) from exc

    listing = render_tree(
        result,
        display_attribute=policy.display_name_attribute,
        indent=policy.tree_indent,
    )
    if listing:
        console.print(listing, markup=False, highlight=False)
    else:
        console.print("[yellow]No records to display.[/yellow]")
    _print_warnings(result)


def _stats_command(
    ctx: typer.Context,
    inputs: List[Path] = typer.Argument(..., help="Record files (JSON array or JSONL)."),
    *,
    organization: Optional[str] = typer.Option(None, "--organization", help="Organization id filter."),
) -> None:
    state = get_state(ctx)
    try:
        result = _build(state, inputs, organization)
    except (CLIError, FileNotFoundError, ValueError) as exc:
        raise _failure(exc) from exc

    stats = hierarchy_statistics(result)
    table = Table(title="Hierarchy Statistics", box=None)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key in ("node_count", "edge_count", "root_count", "leaf_count", "max_depth", "max_span", "total_subunits"):
        table.add_row(key, str(stats[key]))
    for depth, count in stats["depth_counts"].items():  # type: ignore[union-attr]
        table.add_row(f"depth {depth}", str(count))
    for reason, count in stats["warning_counts"].items():  # type: ignore[union-attr]
        table.add_row(reason, str(count))
    console.print(table)


def _span_command(
    ctx: typer.Context,
    inputs: List[Path] = typer.Argument(..., help="Record files (JSON array or JSONL)."),
    *,
    organization: Optional[str] = typer.Option(None, "--organization", help="Organization id filter."),
    max_direct_reports: Optional[int] = typer.Option(
        None,
        "--max-direct-reports",
        help="Override the span-of-control threshold.",
    ),
) -> None:
    state = get_state(ctx)
    if max_direct_reports is not None and max_direct_reports < 1:
        raise fail("--max-direct-reports must be positive")
    policy = state.settings.policies.hierarchy
    try:
        result = _build(state, inputs, organization)
    except (CLIError, FileNotFoundError, ValueError) as exc:
        raise _failure(exc) from exc

    findings = span_of_control(result, max_direct_reports=max_direct_reports, policy=policy)
    if not findings:
        console.print("[green]No span-of-control issues found.[/green]")
        return
    table = Table(title="Span of Control", box=None)
    table.add_column("Record")
    table.add_column("Name")
    table.add_column("Direct", justify="right")
    table.add_column("Threshold", justify="right")
    table.add_column("Severity")
    for finding in findings:
        table.add_row(
            finding.id,
            finding.display_name,
            str(finding.direct_reports),
            str(finding.threshold),
            finding.severity,
        )
    console.print(table)


def _reparent_command(
    ctx: typer.Context,
    inputs: List[Path] = typer.Argument(..., help="Record files (JSON array or JSONL)."),
    *,
    entity: str = typer.Option(..., "--entity", help="Id of the record being moved."),
    parent: Optional[str] = typer.Option(
        None,
        "--parent",
        help="Id of the new parent; omit to make the record top-level.",
    ),
    organization: Optional[str] = typer.Option(None, "--organization", help="Organization id filter."),
) -> None:
    state = get_state(ctx)
    try:
        records = load_records([resolve_path(path) for path in inputs], organization_id=organization)
        check_reparent(records, entity, parent, policy=state.settings.policies.hierarchy)
    except (CLIError, FileNotFoundError, ValueError) as exc:
        raise _failure(exc) from exc
    target = (parent or "").strip() or "top level"
    console.print(f"[green]'{entity}' can be moved under {target}.[/green]")


app.command("build")(_build_command)
app.command("tree")(_tree_command)
app.command("stats")(_stats_command)
app.command("span")(_span_command)
app.command("reparent")(_reparent_command)

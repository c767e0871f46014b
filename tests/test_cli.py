"""End-to-end smoke tests for the Typer-based orgchart CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from orgchart.cli.common import merge_overrides, parse_override
from orgchart.cli.main import app


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {
        "ORGCHART_SETTINGS__PATHS__OUTPUT_DIR": str(tmp_path / "output"),
        "ORGCHART_SETTINGS__PATHS__LOGS_DIR": str(tmp_path / "logs"),
        "ORGCHART_SETTINGS__CREATE_DIRS": "false",
    }


def _write_records(path: Path, rows: list[dict]) -> Path:
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def teams_file(tmp_path: Path) -> Path:
    rows = [
        {"id": "eng", "parentId": None, "organizationId": "acme", "attributes": {"name": "Engineering Team"}},
        {"id": "fe", "parentId": "eng", "organizationId": "acme", "attributes": {"name": "Frontend Team"}},
        {"id": "be", "parentId": "eng", "organizationId": "acme", "attributes": {"name": "Backend Team"}},
    ]
    return _write_records(tmp_path / "teams.jsonl", rows)


def test_parse_override_builds_nested_mapping() -> None:
    override = parse_override("policies.hierarchy.max_direct_reports=3")
    assert override == {"policies": {"hierarchy": {"max_direct_reports": 3}}}

    merged = merge_overrides([override, parse_override("policies.hierarchy.tree_indent=4")])
    assert merged["policies"]["hierarchy"] == {"max_direct_reports": 3, "tree_indent": 4}


def test_parse_override_requires_equals() -> None:
    with pytest.raises(typer.BadParameter):
        parse_override("policies.hierarchy")


def test_build_writes_result(runner: CliRunner, cli_env: dict[str, str], teams_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "result.json"
    result = runner.invoke(
        app,
        ["hierarchy", "build", str(teams_file), "--output", str(output)],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert "Hierarchy Summary" in result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert [root["id"] for root in payload["roots"]] == ["eng"]


def test_build_exits_one_when_records_cannot_be_placed(
    runner: CliRunner, cli_env: dict[str, str], tmp_path: Path
) -> None:
    source = _write_records(
        tmp_path / "cycle.jsonl",
        [
            {"id": "a", "parentId": "b", "organizationId": "acme"},
            {"id": "b", "parentId": "a", "organizationId": "acme"},
        ],
    )
    warnings = tmp_path / "warnings.json"
    result = runner.invoke(
        app,
        ["hierarchy", "build", str(source), "--output", str(tmp_path / "r.json"), "--warnings", str(warnings)],
        env=cli_env,
    )

    assert result.exit_code == 1, result.output
    assert "CYCLE_DETECTED" in result.output
    assert json.loads(warnings.read_text(encoding="utf-8"))["total"] == 2


def test_build_rejects_duplicate_ids(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    source = _write_records(
        tmp_path / "dupes.jsonl",
        [
            {"id": "a", "organizationId": "acme"},
            {"id": "a", "organizationId": "acme"},
        ],
    )
    result = runner.invoke(
        app,
        ["hierarchy", "build", str(source), "--output", str(tmp_path / "r.json")],
        env=cli_env,
    )

    assert result.exit_code == 2
    assert "duplicate record ids" in result.output
    assert "DUPLICATE_ID" in result.output


def test_build_rejects_unknown_format(runner: CliRunner, cli_env: dict[str, str], teams_file: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["hierarchy", "build", str(teams_file), "--output", str(tmp_path / "r.json"), "--format", "svg"],
        env=cli_env,
    )

    assert result.exit_code == 2


def test_tree_prints_indented_listing(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(app, ["hierarchy", "tree", str(teams_file)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Engineering Team" in result.output
    assert "└─ Backend Team" in result.output
    assert "└─ Frontend Team" in result.output


def test_stats_reports_counts(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(app, ["hierarchy", "stats", str(teams_file)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "node_count" in result.output
    assert "max_span" in result.output


def test_span_uses_override_threshold(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(
        app,
        ["-o", "policies.hierarchy.max_direct_reports=1", "hierarchy", "span", str(teams_file)],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert "Span of Control" in result.output
    assert "eng" in result.output


def test_span_without_findings(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(app, ["hierarchy", "span", str(teams_file)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "No span-of-control issues found" in result.output


def test_reparent_rejects_cycle(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(
        app,
        ["hierarchy", "reparent", str(teams_file), "--entity", "eng", "--parent", "fe"],
        env=cli_env,
    )

    assert result.exit_code == 2
    assert "would create a cycle" in result.output
    assert "Reason: WOULD_CREATE_CYCLE" in result.output


def test_reparent_to_top_level(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(
        app,
        ["hierarchy", "reparent", str(teams_file), "--entity", "fe"],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert "top level" in result.output


def test_verbose_prints_context(runner: CliRunner, cli_env: dict[str, str], teams_file: Path) -> None:
    result = runner.invoke(app, ["--verbose", "hierarchy", "stats", str(teams_file)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "CLI Context" in result.output

"""Public file-driven entry point for hierarchy construction."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from orgchart.config.settings import Settings
from orgchart.utils.logging import get_logger, log_timing, logging_context

from .builder import HierarchyBuilder
from .io import export_projection, load_records, write_result, write_warning_report
from .result import HierarchyResult

_LOGGER = get_logger(module=__name__)


def assemble_from_files(
    input_paths: Sequence[str | Path],
    output_path: str | Path | None,
    *,
    settings: Settings | None = None,
    organization_id: str | None = None,
    export_path: str | Path | None = None,
    export_format: str = "json",
    warning_report_path: str | Path | None = None,
) -> HierarchyResult:
    """Load records, build the hierarchy and write the requested artefacts."""

    cfg = settings or Settings()
    policy = cfg.policies.hierarchy
    records = load_records(input_paths, organization_id=organization_id)
    builder = HierarchyBuilder(policy)

    tenant = organization_id or (records[0].organization_id if records else "-")
    with logging_context(step="hierarchy-build", organization_id=tenant):
        with log_timing("hierarchy-build", logger_=_LOGGER):
            result = builder.build(records)

        if output_path is not None:
            write_result(result, output_path)
        if export_path is not None:
            export_projection(
                result,
                export_path,
                format=export_format,
                display_attribute=policy.display_name_attribute,
            )
        if warning_report_path is not None:
            write_warning_report(result, warning_report_path)

    if result.has_warnings:
        _LOGGER.warning(
            "Some records could not be placed",
            organization_id=tenant,
            warnings=result.warning_count,
        )
    return result


__all__ = ["assemble_from_files"]

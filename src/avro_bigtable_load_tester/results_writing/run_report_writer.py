"""Run report workbook writer service."""

from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from avro_bigtable_load_tester.metrics_export.metrics_models import LoadTestMetrics

from .report_models import RunMetadata

RUN_INFO_SHEET_NAME = "RunInfo"
METRICS_SHEET_NAME = "Metrics"


def write_run_report(
    output_path: Path | str,
    run_metadata: RunMetadata,
    metrics: LoadTestMetrics,
) -> Path:
    """Write the run report workbook and return its resolved path."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    _write_run_info_sheet(workbook, run_metadata)
    _write_metrics_sheet(workbook, metrics)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _write_run_info_sheet(workbook, run_metadata: RunMetadata) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    duration = (run_metadata.run_end - run_metadata.run_start).total_seconds()
    entries = (
        ("run_start", run_metadata.run_start.isoformat()),
        ("run_end", run_metadata.run_end.isoformat()),
        ("duration_seconds", round(duration, 3)),
        ("test_name", run_metadata.test_name),
        ("run_id", run_metadata.run_id),
        ("job_id", run_metadata.job_id),
        ("spec_path", run_metadata.spec_path),
        ("instance_id", run_metadata.instance_id),
        ("table_id", run_metadata.table_id),
        ("input_file_pattern", run_metadata.input_file_pattern),
        ("sampled_rows", run_metadata.sampled_rows),
        ("metrics_exported", run_metadata.metrics_exported),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
    _fit_column_widths(sheet, entries)


def _write_metrics_sheet(workbook, metrics: LoadTestMetrics) -> None:
    sheet = workbook.create_sheet(METRICS_SHEET_NAME)
    sheet.cell(row=1, column=1, value="Metric")
    sheet.cell(row=1, column=2, value="Value")
    sheet.cell(row=1, column=1).style = "Headline 1"
    sheet.cell(row=1, column=2).style = "Headline 1"
    entries = tuple((row["name"], row["value"]) for row in metrics.as_rows())
    for row, (name, value) in enumerate(entries, start=2):
        sheet.cell(row=row, column=1, value=name)
        sheet.cell(row=row, column=2, value=value)
    _fit_column_widths(sheet, entries)


def _fit_column_widths(sheet, entries) -> None:
    key_width = max((len(str(key)) for key, _ in entries), default=10)
    sheet.column_dimensions[get_column_letter(1)].width = max(12, min(key_width + 4, 60))
    sheet.column_dimensions[get_column_letter(2)].width = 60

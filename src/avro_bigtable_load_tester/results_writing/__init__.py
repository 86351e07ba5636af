"""Results writing domain exports."""

from .report_models import RunMetadata
from .run_report_writer import METRICS_SHEET_NAME, RUN_INFO_SHEET_NAME, write_run_report

__all__ = [
    "METRICS_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
    "RunMetadata",
    "write_run_report",
]

"""Report filtering and export services."""

from .csv_export import export_to_csv, report_filename
from .filters import filter_entries, summarize_entries

__all__ = ["export_to_csv", "filter_entries", "report_filename", "summarize_entries"]

"""
Timesheet ingestion and aggregation: spreadsheet exports in, hour
summaries out.
"""

from .aggregates import (
    aggregate_by,
    aggregate_by_category,
    compute_totals,
    daily_series,
    ratio_view,
    report_rows,
)
from .codes import UndefinedCodeStat, build_code_index, find_undefined_codes, lookup_code, parse_taxonomy
from .coerce import coerce_date, coerce_number, coerce_string
from .config import Settings, build_settings, load_settings
from .dedup import DedupResult, partition_duplicates
from .errors import FileReadFailure, IngestError, ParseFailure, ValidationFailure
from .filters import ReportFilter, filter_records
from .headers import DAILY_REPORT_LAYOUT, ColumnMapping, PositionalLayout, match_headers, match_positional
from .ingest import ImportSummary, IngestionResult, ingest_rows, ingest_workbook
from .io import read_workbook, validate_source
from .records import WorkCodeDefinition, WorkRecord, build_records, content_hash, validate_record
from .report import export_delimited, report_filename
from .store import WorkStore

__all__ = [
    "aggregate_by",
    "aggregate_by_category",
    "compute_totals",
    "daily_series",
    "ratio_view",
    "report_rows",
    "UndefinedCodeStat",
    "build_code_index",
    "find_undefined_codes",
    "lookup_code",
    "parse_taxonomy",
    "coerce_date",
    "coerce_number",
    "coerce_string",
    "Settings",
    "build_settings",
    "load_settings",
    "DedupResult",
    "partition_duplicates",
    "FileReadFailure",
    "IngestError",
    "ParseFailure",
    "ValidationFailure",
    "ReportFilter",
    "filter_records",
    "DAILY_REPORT_LAYOUT",
    "ColumnMapping",
    "PositionalLayout",
    "match_headers",
    "match_positional",
    "ImportSummary",
    "IngestionResult",
    "ingest_rows",
    "ingest_workbook",
    "read_workbook",
    "validate_source",
    "WorkCodeDefinition",
    "WorkRecord",
    "build_records",
    "content_hash",
    "validate_record",
    "export_delimited",
    "report_filename",
    "WorkStore",
]

"""
ingest.py

One batch end to end: rows -> header mapping -> records -> dedup ->
validation -> undefined-code scan.

ingest_workbook() picks the data sheet and the taxonomy sheet out of a
workbook; ingest_rows() does the rest and is usable on rows from anywhere.
Structural problems raise ParseFailure; per-record problems are returned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .codes import UndefinedCodeStat, build_code_index, find_undefined_codes, parse_taxonomy
from .config import Settings
from .dedup import partition_duplicates
from .errors import ParseFailure, ValidationFailure
from .headers import (
    DAILY_REPORT_LAYOUT,
    ColumnMapping,
    PositionalLayout,
    locate_header_row,
    match_headers,
    match_positional,
)
from .io import Rows, Source, read_workbook
from .records import WorkCodeDefinition, WorkRecord, build_records, validate_record

logger = logging.getLogger(__name__)

Layout = Union[str, PositionalLayout, None]


@dataclass(frozen=True)
class ImportSummary:
    job_id: str
    inserted: int
    updated: int
    duplicates: int
    errors: int
    undefined_codes: int


@dataclass
class IngestionResult:
    records: List[WorkRecord]
    duplicates: List[WorkRecord]
    taxonomy_entries: List[WorkCodeDefinition]
    column_mapping: ColumnMapping
    validation_failures: List[ValidationFailure] = field(default_factory=list)
    undefined_codes: List[UndefinedCodeStat] = field(default_factory=list)
    job_id: str = ""

    def summary(self) -> ImportSummary:
        return ImportSummary(
            job_id=self.job_id,
            inserted=len(self.records),
            updated=0,
            duplicates=len(self.duplicates),
            errors=len(self.validation_failures),
            undefined_codes=sum(s.count for s in self.undefined_codes),
        )


def _default_settings() -> Settings:
    return Settings(input_dir=None, output_dir=Path("outputs"))


def _resolve_layout(layout: Layout, settings: Settings) -> Optional[PositionalLayout]:
    """None means synonym search."""
    if isinstance(layout, PositionalLayout):
        return layout
    name = layout or settings.layout
    if name == "positional":
        return DAILY_REPORT_LAYOUT
    if name == "auto":
        return None
    raise ValueError(f"Unknown layout: {name!r}")


def _map_columns(rows: Rows, layout: Optional[PositionalLayout]):
    if layout is not None:
        if len(rows) <= layout.header_row:
            raise ParseFailure(
                f"Sheet has {len(rows)} row(s); positional header expected on row {layout.header_row + 1}"
            )
        mapping = match_positional(rows[layout.header_row], layout)
        data_rows = rows[layout.header_row + 1:]
    else:
        header_idx = locate_header_row(rows)
        if header_idx is None:
            raise ParseFailure("No recognizable header row")
        mapping = match_headers(rows[header_idx])
        data_rows = rows[header_idx + 1:]

    if len(mapping) == 0:
        raise ParseFailure("Header row maps no known columns")
    return mapping, data_rows


def ingest_rows(
    rows: Rows,
    layout: Layout = None,
    taxonomy: Optional[Sequence[WorkCodeDefinition]] = None,
    settings: Optional[Settings] = None,
    taxonomy_rows: Optional[Rows] = None,
    created_at: Optional[datetime] = None,
    prefer_source_total: bool = False,
) -> IngestionResult:
    """
    Ingest one sheet of rows.

    Args:
        rows: 2-D cells of the data sheet
        layout: "auto", "positional" or a PositionalLayout (default: settings.layout)
        taxonomy: definitions already known to the caller
        taxonomy_rows: 2-D cells of a code sheet to parse alongside

    Raises:
        ParseFailure: no header row / no mappable columns
    """
    settings = settings or _default_settings()
    mapping, data_rows = _map_columns(rows, _resolve_layout(layout, settings))
    logger.info(f"Column mapping: {mapping.as_dict()}")

    records = build_records(
        data_rows,
        mapping,
        created_at=created_at,
        hash_method=settings.hash_method,
        prefer_source_total=prefer_source_total,
    )
    dedup = partition_duplicates(records)

    failures: List[ValidationFailure] = []
    for rec in dedup.unique:
        is_valid, messages = validate_record(rec)
        warnings = [m for m in messages if m.startswith("[WARNING]")]
        if not is_valid:
            errors = [m for m in messages if not m.startswith("[WARNING]")]
            failures.append(ValidationFailure(record=rec, errors=errors, warnings=warnings))
        elif warnings:
            logger.warning(f"{rec.record_id}: {'; '.join(warnings)}")

    entries = parse_taxonomy(taxonomy_rows) if taxonomy_rows else []
    index = build_code_index(list(taxonomy or []) + entries)
    undefined = find_undefined_codes(dedup.unique, index)

    result = IngestionResult(
        records=dedup.unique,
        duplicates=dedup.duplicates,
        taxonomy_entries=entries,
        column_mapping=mapping,
        validation_failures=failures,
        undefined_codes=undefined,
        job_id=f"job_{int(time.time() * 1000)}",
    )
    logger.info(
        f"Ingested {len(records)} row(s): {len(result.records)} unique, "
        f"{len(result.duplicates)} duplicate, {len(failures)} invalid"
    )
    return result


def _pick_sheets(sheets: Dict[str, Rows], settings: Settings):
    if settings.data_sheet in sheets:
        data_name = settings.data_sheet
    else:
        data_name = next(iter(sheets))
        logger.info(f"Sheet {settings.data_sheet!r} not found; using first sheet {data_name!r}")

    codes_name = settings.codes_sheet if settings.codes_sheet in sheets else None
    if codes_name == data_name:
        codes_name = None
    return data_name, codes_name


def ingest_workbook(
    source: Source,
    layout: Layout = None,
    taxonomy: Optional[Sequence[WorkCodeDefinition]] = None,
    settings: Optional[Settings] = None,
    created_at: Optional[datetime] = None,
    prefer_source_total: bool = False,
) -> IngestionResult:
    """
    Read a workbook (path or bytes) and ingest its data sheet, parsing the
    code sheet when present.

    Raises:
        FileReadFailure: unreadable source
        ParseFailure: no sheets / no usable header
    """
    settings = settings or _default_settings()
    sheets = read_workbook(source)
    data_name, codes_name = _pick_sheets(sheets, settings)

    try:
        return ingest_rows(
            sheets[data_name],
            layout=layout,
            taxonomy=taxonomy,
            settings=settings,
            taxonomy_rows=sheets[codes_name] if codes_name else None,
            created_at=created_at,
            prefer_source_total=prefer_source_total,
        )
    except ParseFailure as e:
        logger.error(f"Parse failed (component=ingest, action=ingest_workbook, sheet={data_name!r}): {e.message}")
        raise

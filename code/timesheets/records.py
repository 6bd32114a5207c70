"""
records.py

Canonical timesheet record types, the record builder and content hashing.

WorkRecord is immutable once built. content_hash covers only the fields
that make two rows "the same report" (date, contractor, project, sub-work,
subarea, reporter, hours); ids and timestamps are excluded.
"""

from __future__ import annotations

import base64
import json
import re
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from .coerce import coerce_date, coerce_number, coerce_string
from .headers import ColumnMapping


HASH_METHODS = ("base64", "rolling")

CONTRACTOR_ID_PREFIX = "contractor_"
PROJECT_ID_PREFIX = "project_"
RECORD_ID_PREFIX = "work_"

MAX_REGULAR_HOURS = 24
MAX_OVERTIME_HOURS = 8

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class WorkRecord:
    record_id: str
    work_date: str
    contractor_id: str
    contractor_name: str
    reporter: str
    headcount: float
    employment_code: str
    project_id: str
    project_code: str
    subarea_code: str
    subwork_code: str
    in_hours: float
    out_hours: float
    total_hours: float
    content_hash: str
    created_at: str


@dataclass(frozen=True)
class WorkCodeDefinition:
    subwork_code: str
    subwork_name: str
    major_code: str
    major_name: str
    note: Optional[str] = None
    version: str = "1.0"
    updated_at: str = ""


RECORD_COLUMNS = [f.name for f in fields(WorkRecord)]


# ======================================================
# CONTENT HASH
# ======================================================

def _canon_number(v: float) -> str:
    v = float(v)
    if v.is_integer():
        return str(int(v))
    return repr(v)


def hash_key(record: WorkRecord) -> str:
    """Significant fields as a compact JSON array."""
    return json.dumps([
        record.work_date,
        record.contractor_name,
        record.project_code,
        record.subwork_code,
        record.subarea_code,
        record.reporter,
        _canon_number(record.in_hours),
        _canon_number(record.out_hours),
    ], ensure_ascii=False, separators=(",", ":"))


def rolling_hash(key: str) -> str:
    """32-bit h*31+c hash over code points, folded to non-negative base-36."""
    h = 0
    for ch in key:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    h = abs(h)
    if h == 0:
        return "0"
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = []
    while h:
        h, r = divmod(h, 36)
        out.append(digits[r])
    return "".join(reversed(out))


def content_hash(record: WorkRecord, method: str = "base64") -> str:
    """
    Deterministic fingerprint of a record's significant fields.

    base64: URL-safe base64 of the UTF-8 key with non-alphanumerics stripped
            (lossless on multi-byte text).
    rolling: rolling_hash() of the key; shorter, weaker.
    """
    key = hash_key(record)
    if method == "base64":
        token = base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii")
        return _NON_ALNUM.sub("", token)
    if method == "rolling":
        return rolling_hash(key)
    raise ValueError(f"Unknown hash method: {method!r}. Expected one of {HASH_METHODS}")


# ======================================================
# RECORD BUILDER
# ======================================================

def is_empty_row(row: Sequence[object]) -> bool:
    return all(coerce_string(cell) == "" for cell in row)


def _cell(row: Sequence[object], mapping: ColumnMapping, name: str) -> object:
    idx = mapping.positions.get(name)
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def build_record(
    row: Sequence[object],
    mapping: ColumnMapping,
    record_id: str,
    created_at: str,
    hash_method: str = "base64",
    prefer_source_total: bool = False,
) -> WorkRecord:
    contractor_name = coerce_string(_cell(row, mapping, "contractor_name"))
    project_code = coerce_string(_cell(row, mapping, "project_code"))
    in_hours = coerce_number(_cell(row, mapping, "in_hours"))
    out_hours = coerce_number(_cell(row, mapping, "out_hours"))

    total_hours = max(0.0, in_hours + out_hours)
    if prefer_source_total:
        sourced = _cell(row, mapping, "total_hours")
        if coerce_string(sourced) != "":
            total_hours = coerce_number(sourced)

    record = WorkRecord(
        record_id=record_id,
        work_date=coerce_date(_cell(row, mapping, "work_date")) or "",
        contractor_id=f"{CONTRACTOR_ID_PREFIX}{contractor_name}",
        contractor_name=contractor_name,
        reporter=coerce_string(_cell(row, mapping, "reporter")),
        headcount=coerce_number(_cell(row, mapping, "headcount")),
        employment_code=coerce_string(_cell(row, mapping, "employment_code")),
        project_id=f"{PROJECT_ID_PREFIX}{project_code}",
        project_code=project_code,
        subarea_code=coerce_string(_cell(row, mapping, "subarea_code")),
        subwork_code=coerce_string(_cell(row, mapping, "subwork_code")),
        in_hours=in_hours,
        out_hours=out_hours,
        total_hours=total_hours,
        content_hash="",
        created_at=created_at,
    )
    return replace(record, content_hash=content_hash(record, hash_method))


def build_records(
    rows: Sequence[Sequence[object]],
    mapping: ColumnMapping,
    created_at: Optional[datetime] = None,
    hash_method: str = "base64",
    prefer_source_total: bool = False,
) -> List[WorkRecord]:
    """
    Build one WorkRecord per non-empty data row.

    Blank rows are skipped silently. Ids are unique within the batch only:
    work_<batch epoch ms>_<index among non-empty rows>.
    """
    if hash_method not in HASH_METHODS:
        raise ValueError(f"Unknown hash method: {hash_method!r}. Expected one of {HASH_METHODS}")

    stamp = created_at or datetime.now(timezone.utc)
    created_iso = stamp.isoformat()
    batch_ms = int(stamp.timestamp() * 1000)

    out: List[WorkRecord] = []
    data_rows = [r for r in rows if not is_empty_row(r)]
    for index, row in enumerate(data_rows):
        out.append(build_record(
            row,
            mapping,
            record_id=f"{RECORD_ID_PREFIX}{batch_ms}_{index}",
            created_at=created_iso,
            hash_method=hash_method,
            prefer_source_total=prefer_source_total,
        ))
    return out


# ======================================================
# VALIDATION
# ======================================================

def validate_record(record: WorkRecord) -> Tuple[bool, List[str]]:
    """
    Required-field and numeric-range checks for one record.

    Returns:
        (is_valid, messages) -- messages prefixed "[WARNING]" do not affect validity
    """
    errors: List[str] = []

    if not record.work_date:
        errors.append("work_date is missing or unparseable")
    if not record.contractor_name:
        errors.append("contractor_name is missing")
    if not record.project_code:
        errors.append("project_code is missing")
    if not record.subwork_code:
        errors.append("subwork_code is missing")

    if record.in_hours < 0:
        errors.append(f"in_hours must be >= 0 (got {record.in_hours})")
    if record.out_hours < 0:
        errors.append(f"out_hours must be >= 0 (got {record.out_hours})")
    if record.headcount < 0:
        errors.append(f"headcount must be >= 0 (got {record.headcount})")

    if record.in_hours > MAX_REGULAR_HOURS:
        errors.append(f"[WARNING] in_hours exceeds {MAX_REGULAR_HOURS} ({record.in_hours})")
    if record.out_hours > MAX_OVERTIME_HOURS:
        errors.append(f"[WARNING] out_hours exceeds {MAX_OVERTIME_HOURS} ({record.out_hours})")

    is_valid = len([e for e in errors if not e.startswith("[WARNING]")]) == 0
    return is_valid, errors

"""
headers.py

Maps raw header cells of a timesheet export onto canonical field names.

Two modes:
- synonym search (match_headers): ranked synonym lists per field with
  exact -> containment -> ordered-subsequence fallback
- positional layout (match_positional): fixed column indexes for a known
  export template; the synonym search is never consulted

A header claimed by one field is not offered to later fields, so the
first-declared field wins an ambiguous header.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .coerce import coerce_string


# ======================================================
# CANONICAL FIELDS (declaration order == claim priority)
# ======================================================

CANONICAL_FIELDS: Dict[str, List[str]] = {
    "work_date": ["日付", "日付(YYYYMMDD|ExcelSerial|string)", "work_date", "date", "年月日", "作業日"],
    "contractor_name": ["業者名", "業者", "contractor", "company", "会社", "企業"],
    "reporter": ["報告者名", "報告者", "reporter", "name", "氏名", "担当者"],
    "headcount": ["在籍", "人数", "headcount", "count", "人員"],
    "employment_code": ["雇", "雇用区分", "employment", "emp_code", "雇用"],
    "project_code": ["工事番号", "工事番号(Sxxxx)", "project", "project_code", "工事", "プロジェクト"],
    "subarea_code": ["小区画", "小区画(code例: B12P/H5P/...)", "subarea", "area", "区画"],
    "subwork_code": ["小区分", "小区分(code例: 25K/211/...)", "subwork", "work_code", "作業", "工種"],
    "in_hours": ["規内", "規内(numeric)", "in_hours", "regular", "通常", "定時"],
    "out_hours": ["規外", "規外(numeric)", "out_hours", "overtime", "残業", "超過"],
    "total_hours": ["計", "計(numeric)", "total_hours", "total", "合計", "総計"],
}

MIN_HEADER_FIELDS = 2


@dataclass(frozen=True)
class ColumnMapping:
    """Canonical field -> observed header text, and the column it sits in."""
    fields: Dict[str, str] = field(default_factory=dict)
    positions: Dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def as_dict(self) -> Dict[str, str]:
        return dict(self.fields)


@dataclass(frozen=True)
class PositionalLayout:
    header_row: int
    columns: Dict[str, int]


# Stabilized daily-report export: header on the 5th row, fixed column order.
DAILY_REPORT_LAYOUT = PositionalLayout(
    header_row=4,
    columns={
        "work_date": 0,
        "contractor_name": 1,
        "reporter": 2,
        "headcount": 3,
        "employment_code": 5,
        "project_code": 6,
        "subarea_code": 10,
        "subwork_code": 11,
        "in_hours": 14,
        "out_hours": 15,
        "total_hours": 16,
    },
)


# ======================================================
# MATCH RULES
# ======================================================

def normalize_header(text: str) -> str:
    s = unicodedata.normalize("NFKC", text).casefold()
    return "".join(s.split())


def _exact(header: str, candidate: str) -> bool:
    return header == candidate


def _contains(header: str, candidate: str) -> bool:
    return candidate in header or header in candidate


def _subsequence(header: str, candidate: str) -> bool:
    it = iter(header)
    return all(ch in it for ch in candidate)


MATCH_RULES = (_exact, _contains, _subsequence)


def match_headers(headers: Sequence[object]) -> ColumnMapping:
    """
    Resolve canonical fields against a header row by synonym search.

    Unmatched fields are omitted. An empty header list gives an empty mapping.
    """
    pool: List[tuple] = []
    for idx, raw in enumerate(headers):
        text = coerce_string(raw)
        if text:
            pool.append((idx, text, normalize_header(text)))

    fields: Dict[str, str] = {}
    positions: Dict[str, int] = {}
    claimed: set = set()

    for name, candidates in CANONICAL_FIELDS.items():
        hit = _find(pool, claimed, candidates)
        if hit is None:
            continue
        idx, text = hit
        fields[name] = text
        positions[name] = idx
        claimed.add(idx)

    return ColumnMapping(fields=fields, positions=positions)


def _find(pool: List[tuple], claimed: set, candidates: List[str]) -> Optional[tuple]:
    for candidate in candidates:
        cand = normalize_header(candidate)
        if not cand:
            continue
        for rule in MATCH_RULES:
            for idx, text, norm in pool:
                if idx in claimed:
                    continue
                if rule(norm, cand):
                    return idx, text
    return None


def match_positional(headers: Sequence[object], layout: PositionalLayout = DAILY_REPORT_LAYOUT) -> ColumnMapping:
    """Map fields straight from the layout's column indexes (blank header cells are skipped)."""
    fields: Dict[str, str] = {}
    positions: Dict[str, int] = {}
    for name, idx in layout.columns.items():
        if idx >= len(headers):
            continue
        text = coerce_string(headers[idx])
        if text:
            fields[name] = text
            positions[name] = idx
    return ColumnMapping(fields=fields, positions=positions)


def locate_header_row(rows: Sequence[Sequence[object]], max_scan: int = 20) -> Optional[int]:
    """
    Pick the header row for synonym mode: the row among the first `max_scan`
    whose mapping covers the most fields (at least MIN_HEADER_FIELDS).
    Ties go to the earlier row.
    """
    best_idx: Optional[int] = None
    best_size = MIN_HEADER_FIELDS - 1
    for idx, row in enumerate(rows[:max_scan]):
        size = len(match_headers(list(row)))
        if size > best_size:
            best_idx, best_size = idx, size
    return best_idx

"""
codes.py

Work-code taxonomy: parsing the code sheet and resolving sub-work codes.

Records only carry `subwork_code`; names are looked up at aggregation time,
so a taxonomy loaded after the records still applies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .coerce import coerce_string
from .headers import normalize_header
from .records import WorkCodeDefinition, WorkRecord, is_empty_row

logger = logging.getLogger(__name__)

TAXONOMY_VERSION = "1.0"
MAX_HEADER_SCAN = 20


@dataclass(frozen=True)
class UndefinedCodeStat:
    subwork_code: str
    count: int
    first_seen: str


# ======================================================
# RESOLVER
# ======================================================

def build_code_index(definitions: Iterable[WorkCodeDefinition]) -> Dict[str, WorkCodeDefinition]:
    index: Dict[str, WorkCodeDefinition] = {}
    for d in definitions:
        if d.subwork_code in index:
            logger.warning(f"Duplicate taxonomy code {d.subwork_code!r} ignored (keeping first definition)")
            continue
        index[d.subwork_code] = d
    return index


def lookup_code(index: Dict[str, WorkCodeDefinition], code: str) -> Optional[WorkCodeDefinition]:
    return index.get(code)


def as_code_index(taxonomy) -> Dict[str, WorkCodeDefinition]:
    if isinstance(taxonomy, dict):
        return taxonomy
    return build_code_index(taxonomy or [])


def find_undefined_codes(records: Sequence[WorkRecord], taxonomy) -> List[UndefinedCodeStat]:
    """
    Sub-work codes used by records but missing from the taxonomy.

    Records with an empty sub-code are not counted here (validate_record flags
    them). Codes keep first-appearance order; first_seen is the earliest
    non-empty work_date among that code's records.
    """
    index = as_code_index(taxonomy)
    counts: Dict[str, int] = {}
    first_seen: Dict[str, str] = {}

    for rec in records:
        code = rec.subwork_code
        if not code or code in index:
            continue
        counts[code] = counts.get(code, 0) + 1
        if rec.work_date and (code not in first_seen or rec.work_date < first_seen[code]):
            first_seen[code] = rec.work_date

    stats = [UndefinedCodeStat(code, n, first_seen.get(code, "")) for code, n in counts.items()]
    if stats:
        logger.warning(f"Undefined sub-work codes: {[s.subwork_code for s in stats]}")
    return stats


# ======================================================
# TAXONOMY SHEET
# ======================================================

def _role(header: str) -> Optional[str]:
    h = normalize_header(header)
    if not h:
        return None
    is_name = "名称" in h or "name" in h
    if "大区分" in h or "major" in h:
        return "major_name" if is_name else "major_code"
    if "小区分" in h or h.startswith("sub"):
        return "subwork_name" if is_name else "subwork_code"
    if "備考" in h or "note" in h:
        return "note"
    return None


def _header_roles(row: Sequence[object]) -> Dict[str, int]:
    roles: Dict[str, int] = {}
    for idx, cell in enumerate(row):
        role = _role(coerce_string(cell))
        if role and role not in roles:
            roles[role] = idx
    return roles


def _get(row: Sequence[object], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ""
    return coerce_string(row[idx])


def parse_taxonomy(
    rows: Sequence[Sequence[object]],
    version: str = TAXONOMY_VERSION,
    updated_at: Optional[str] = None,
) -> List[WorkCodeDefinition]:
    """
    Parse a code sheet into WorkCodeDefinitions.

    The header row is the first row (within MAX_HEADER_SCAN) carrying a sub-work
    code column. Rows without a sub-work code are skipped.
    """
    header_idx = None
    roles: Dict[str, int] = {}
    for idx, row in enumerate(rows[:MAX_HEADER_SCAN]):
        found = _header_roles(row)
        if "subwork_code" in found:
            header_idx, roles = idx, found
            break

    if header_idx is None:
        logger.info("No taxonomy header row found; taxonomy is empty")
        return []

    stamp = updated_at or datetime.now(timezone.utc).isoformat()
    out: List[WorkCodeDefinition] = []
    for row in rows[header_idx + 1:]:
        if is_empty_row(row):
            continue
        code = _get(row, roles.get("subwork_code"))
        if not code:
            continue
        note = _get(row, roles.get("note")) if "note" in roles else None
        out.append(WorkCodeDefinition(
            subwork_code=code,
            subwork_name=_get(row, roles.get("subwork_name")),
            major_code=_get(row, roles.get("major_code")),
            major_name=_get(row, roles.get("major_name")),
            note=note or None,
            version=version,
            updated_at=stamp,
        ))

    logger.info(f"Parsed {len(out)} taxonomy entries")
    return out

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .records import WorkRecord


DEFAULT_GROUP_BY = ("project_code", "major_name", "subwork_name")
DEFAULT_METRICS = ("regular_hours", "overtime_hours", "total_hours", "overtime_fraction")


@dataclass(frozen=True)
class ReportFilter:
    """Report query. page/page_size are carried for callers; filter_records ignores them."""
    group_by: tuple = DEFAULT_GROUP_BY
    metrics: tuple = DEFAULT_METRICS
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    contractor: Optional[str] = None
    project: Optional[str] = None
    employment: Optional[str] = None
    page: int = 1
    page_size: int = 50


def filter_records(records: Sequence[WorkRecord], report_filter: Optional[ReportFilter] = None) -> List[WorkRecord]:
    """
    Substring match on project/contractor/employment and an inclusive
    YYYY-MM-DD string range on work_date. Unset criteria match everything.
    """
    f = report_filter or ReportFilter()
    out: List[WorkRecord] = []
    for rec in records:
        if f.project and f.project not in rec.project_code:
            continue
        if f.contractor and f.contractor not in rec.contractor_name:
            continue
        if f.employment and f.employment not in rec.employment_code:
            continue
        if f.date_from and rec.work_date < f.date_from:
            continue
        if f.date_to and rec.work_date > f.date_to:
            continue
        out.append(rec)
    return out

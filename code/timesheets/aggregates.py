"""
aggregates.py

Pure aggregation views over WorkRecords (+ taxonomy), returned as DataFrames.

Hour sums are regular = in_hours, overtime = out_hours, total = total_hours.
Rounding uses decimal half-up so 11.35 -> 11.4 regardless of float noise.
"""

from __future__ import annotations

import math
from dataclasses import asdict
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, List, Sequence, Union

import numpy as np
import pandas as pd

from .codes import as_code_index
from .records import RECORD_COLUMNS, WorkRecord


UNDEFINED_NAME = "undefined"
REGULAR_COLOR = "#3B82F6"
OVERTIME_COLOR = "#EF4444"

HOUR_COLUMNS = ["regular_hours", "overtime_hours", "total_hours"]
_SOURCE_HOURS = {"in_hours": "regular_hours", "out_hours": "overtime_hours", "total_hours": "total_hours"}

GROUP_DIMENSIONS = (
    "project_code",
    "major_name",
    "subwork_name",
    "subwork_code",
    "contractor_name",
    "employment_code",
    "work_date",
    "reporter",
    "subarea_code",
)


def round_half_up(value: float, places: int = 1) -> float:
    v = float(value)
    if not math.isfinite(v):
        return v
    d = Decimal(repr(v))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + places + 2)
        return float(d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _round_col(s: pd.Series, places: int = 1) -> pd.Series:
    return s.map(lambda v: round_half_up(v, places))


def records_frame(records: Sequence[WorkRecord]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame([asdict(r) for r in records], columns=RECORD_COLUMNS)


def _hour_sums(df: pd.DataFrame, keys: List[str]) -> pd.DataFrame:
    g = (
        df.groupby(keys, sort=False)[list(_SOURCE_HOURS)]
          .sum()
          .reset_index()
    )
    return g.rename(columns=_SOURCE_HOURS)


def _annotate_names(df: pd.DataFrame, taxonomy) -> pd.DataFrame:
    index = as_code_index(taxonomy)
    out = df.copy()
    out["major_name"] = [
        (index[c].major_name if c in index else "") or UNDEFINED_NAME for c in out["subwork_code"]
    ]
    out["subwork_name"] = [
        (index[c].subwork_name if c in index else "") or UNDEFINED_NAME for c in out["subwork_code"]
    ]
    return out


def _overtime_fraction(df: pd.DataFrame) -> pd.Series:
    total = df["total_hours"].astype(float)
    frac = np.where(total > 0, df["overtime_hours"] / total.where(total > 0, 1.0), 0.0)
    return pd.Series(frac, index=df.index)


# ======================================================
# VIEWS
# ======================================================

def aggregate_by_category(records: Sequence[WorkRecord], taxonomy) -> pd.DataFrame:
    """
    Hours per display category.

    Records are grouped by (project_code, subwork_code) and each group is named
    major name -> sub-work name -> "{project}_{subwork}". Groups sharing a name
    are merged; order is first appearance. Sums are not rounded.
    """
    cols = ["name"] + HOUR_COLUMNS
    if not records:
        return pd.DataFrame(columns=cols)

    index = as_code_index(taxonomy)
    groups = _hour_sums(records_frame(records), ["project_code", "subwork_code"])

    def _name(project: str, code: str) -> str:
        d = index.get(code)
        if d is not None and d.major_name:
            return d.major_name
        if d is not None and d.subwork_name:
            return d.subwork_name
        return f"{project}_{code}"

    groups["name"] = [_name(p, c) for p, c in zip(groups["project_code"], groups["subwork_code"])]
    merged = groups.groupby("name", sort=False)[HOUR_COLUMNS].sum().reset_index()
    return merged[cols]


def ratio_view(records: Sequence[WorkRecord]) -> pd.DataFrame:
    regular = float(sum(r.in_hours for r in records))
    overtime = float(sum(r.out_hours for r in records))
    return pd.DataFrame([
        {"name": "regular", "value": regular, "color": REGULAR_COLOR},
        {"name": "overtime", "value": overtime, "color": OVERTIME_COLOR},
    ])


def daily_series(records: Sequence[WorkRecord]) -> pd.DataFrame:
    cols = ["date"] + HOUR_COLUMNS
    if not records:
        return pd.DataFrame(columns=cols)

    daily = _hour_sums(records_frame(records), ["work_date"]).rename(columns={"work_date": "date"})
    daily = daily.sort_values("date", kind="mergesort").reset_index(drop=True)
    for c in HOUR_COLUMNS:
        daily[c] = _round_col(daily[c])
    return daily[cols]


def compute_totals(records: Sequence[WorkRecord]) -> Dict[str, float]:
    """Unrounded hour sums; only overtime_ratio (percent) is rounded half-up."""
    regular = float(sum(r.in_hours for r in records))
    overtime = float(sum(r.out_hours for r in records))
    total = regular + overtime
    ratio = round_half_up(overtime / total * 100) if total > 0 else 0.0
    return {
        "regular_hours": regular,
        "overtime_hours": overtime,
        "total_hours": total,
        "overtime_ratio": ratio,
    }


def report_rows(records: Sequence[WorkRecord], taxonomy) -> pd.DataFrame:
    """
    One row per (project_code, subwork_code): names from the taxonomy
    ("undefined" when missing), hours to one decimal, overtime_fraction to
    three decimals, sorted by total_hours descending.
    """
    cols = ["project_code", "major_name", "subwork_name"] + HOUR_COLUMNS + ["overtime_fraction"]
    if not records:
        return pd.DataFrame(columns=cols)

    rows = _annotate_names(_hour_sums(records_frame(records), ["project_code", "subwork_code"]), taxonomy)
    return _finish(rows)[cols]


def aggregate_by(records: Sequence[WorkRecord], taxonomy, group_by: Union[str, Sequence[str]]) -> pd.DataFrame:
    """
    Generic pivot over any of GROUP_DIMENSIONS with the same hour sums and
    rounding as report_rows().
    """
    dims = [group_by] if isinstance(group_by, str) else list(group_by)
    if not dims:
        raise ValueError("group_by must name at least one dimension")
    unknown = [d for d in dims if d not in GROUP_DIMENSIONS]
    if unknown:
        raise ValueError(f"Unknown group_by dimension(s): {unknown}. Expected any of {GROUP_DIMENSIONS}")

    cols = dims + HOUR_COLUMNS + ["overtime_fraction"]
    if not records:
        return pd.DataFrame(columns=cols)

    df = _annotate_names(records_frame(records), taxonomy)
    return _finish(_hour_sums(df, dims))[cols]


def _finish(rows: pd.DataFrame) -> pd.DataFrame:
    rows = rows.copy()
    rows["overtime_fraction"] = _round_col(_overtime_fraction(rows), 3)
    for c in HOUR_COLUMNS:
        rows[c] = _round_col(rows[c])
    return rows.sort_values("total_hours", ascending=False, kind="mergesort").reset_index(drop=True)

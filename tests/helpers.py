"""Shared fixtures for the timesheet tests."""

import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

import pandas as pd

from timesheets.records import WorkCodeDefinition, WorkRecord, content_hash


CONTRACTOR = "㈲三和工業"

CODES = [
    WorkCodeDefinition("211", "配材作業", "110", "組立"),
    WorkCodeDefinition("212", "組立作業", "110", "組立"),
    WorkCodeDefinition("25K", "配管", "120", "配管"),
]


def make_record(**overrides) -> WorkRecord:
    fields = dict(
        record_id="work_0_0",
        work_date="2025-01-15",
        contractor_id=f"contractor_{CONTRACTOR}",
        contractor_name=CONTRACTOR,
        reporter="",
        headcount=1.0,
        employment_code="",
        project_id="project_S6290",
        project_code="S6290",
        subarea_code="",
        subwork_code="211",
        in_hours=8.0,
        out_hours=1.5,
        total_hours=0.0,
        content_hash="",
        created_at="2025-01-15T00:00:00+00:00",
    )
    fields.update(overrides)
    if "total_hours" not in overrides:
        fields["total_hours"] = max(0.0, fields["in_hours"] + fields["out_hours"])
    rec = WorkRecord(**fields)
    return replace(rec, content_hash=content_hash(rec))


def sample_records():
    """S6290/211 8.0+1.5 and S6290/212 7.5+0.5 (15.5 regular, 2.0 overtime)."""
    return [
        make_record(record_id="work_0_0", subwork_code="211", in_hours=8.0, out_hours=1.5),
        make_record(record_id="work_0_1", subwork_code="212", in_hours=7.5, out_hours=0.5),
    ]


# Daily sheet: title row, header, two distinct rows, one duplicate,
# one undefined code (999), one row missing its project code.
DATA_ROWS = [
    ["日報", None, None, None, None, None],
    ["日付", "業者名", "工事番号", "小区分", "規内", "規外"],
    ["20250115", CONTRACTOR, "S6290", 211, 8, 1.5],
    ["20250115", CONTRACTOR, "S6290", 212, 7.5, 0.5],
    ["20250115", CONTRACTOR, "S6290", 211, 8, 1.5],
    ["20250116", CONTRACTOR, "S6290", 999, 4, 0],
    ["20250116", CONTRACTOR, None, "25K", 3, 0],
]

CODE_ROWS = [
    ["大区分", "大区分名称", "小区分", "小区分名称", "備考"],
    [110, "組立", 211, "配材作業", None],
    [110, "組立", 212, "組立作業", None],
    [120, "配管", "25K", "配管", None],
]


def write_workbook(path, sheets):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)

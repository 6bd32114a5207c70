"""
coerce.py

Cell value coercion for timesheet exports.

Spreadsheet readers hand back a mix of str, float, int, datetime and NaN.
Every function here degrades to a safe default instead of raising, so one
malformed cell can never abort a batch.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pandas as pd


# Spreadsheet serial day 25569 == 1970-01-01
EXCEL_EPOCH_OFFSET = 25569
SECONDS_PER_DAY = 86400

_YYYYMMDD = re.compile(r"^\d{8}$")
_SERIAL = re.compile(r"^\d+\.?\d*$")
_YMD_LOCAL = re.compile(r"^(\d{4})\s*[年/.\-]\s*(\d{1,2})\s*[月/.\-]\s*(\d{1,2})\s*日?$")
_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_blank(raw: object) -> bool:
    if raw is None:
        return True
    try:
        if pd.isna(raw):
            return True
    except (TypeError, ValueError):
        return False
    return isinstance(raw, str) and raw.strip() == ""


def _cell_text(raw: object) -> str:
    # Readers deliver integer-looking cells as floats (20250115.0, 211.0)
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw).strip()


def _safe_iso(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def serial_to_iso(serial: float) -> Optional[str]:
    """Convert a spreadsheet serial day number to YYYY-MM-DD (UTC)."""
    try:
        seconds = (serial - EXCEL_EPOCH_OFFSET) * SECONDS_PER_DAY
        ts = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        return None
    return ts.strftime("%Y-%m-%d")


def coerce_date(raw: object) -> Optional[str]:
    """
    Normalize a date cell to YYYY-MM-DD.

    Accepts, in order:
      - datetime / date / Timestamp objects
      - 8-digit YYYYMMDD
      - bare numbers (spreadsheet serial days)
      - YYYY年M月D日 and YYYY/M/D
      - anything pandas.to_datetime understands

    Returns None when nothing applies.
    """
    if _is_blank(raw):
        return None

    if isinstance(raw, (datetime, date)):
        return raw.strftime("%Y-%m-%d")

    s = _cell_text(raw)
    if s == "":
        return None

    if _YYYYMMDD.match(s):
        return _safe_iso(int(s[0:4]), int(s[4:6]), int(s[6:8]))

    if _SERIAL.match(s):
        return serial_to_iso(float(s))

    m = _YMD_LOCAL.match(s)
    if m:
        return _safe_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    try:
        ts = pd.to_datetime(s, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.strftime("%Y-%m-%d")


def coerce_number(raw: object) -> float:
    """
    Parse a numeric cell. Blank, non-numeric and non-finite input -> 0.0.
    Range checks are left to validate_record().
    """
    if _is_blank(raw) or isinstance(raw, bool):
        return 0.0

    if isinstance(raw, (int, float)):
        v = float(raw)
        return v if math.isfinite(v) else 0.0

    s = str(raw).strip().replace(",", "")
    try:
        v = float(s)
    except ValueError:
        m = _NUMERIC_PREFIX.match(s)
        if not m:
            return 0.0
        v = float(m.group(0))
    return v if math.isfinite(v) else 0.0


def coerce_string(raw: object) -> str:
    if _is_blank(raw):
        return ""
    return _cell_text(raw)

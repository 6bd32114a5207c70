"""
io.py

Workbook reading: a path or raw bytes -> {sheet_name: rows}.

Rows are plain 2-D lists with blank cells as None, so everything downstream
works the same whether the source was .xlsx or .csv.
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd

from .errors import FileReadFailure, ParseFailure

logger = logging.getLogger(__name__)

Rows = List[List[object]]
Source = Union[str, Path, bytes]


def frame_to_rows(df: pd.DataFrame) -> Rows:
    obj = df.astype(object)
    return obj.where(pd.notna(obj), None).values.tolist()


def _read_csv(path: Path) -> Dict[str, Rows]:
    try:
        df = pd.read_csv(path, header=None, dtype=object, keep_default_na=True, skip_blank_lines=False)
    except pd.errors.EmptyDataError:
        logger.warning(f"CSV file contains no data: {path}")
        return {path.stem: []}
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ParseFailure(f"Failed to parse CSV file {path}", details=e) from e
    return {path.stem: frame_to_rows(df)}


def read_workbook(source: Source) -> Dict[str, Rows]:
    """
    Read every sheet of a workbook.

    Raises:
        FileReadFailure: missing/empty file, or bytes that are not a workbook
        ParseFailure: readable container but no sheets
    """
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise FileReadFailure("Workbook bytes are empty")
        target = BytesIO(source)
        label = f"<{len(source)} bytes>"
    else:
        path = Path(source)
        if not path.exists():
            raise FileReadFailure(f"File not found: {path}")
        if path.stat().st_size == 0:
            raise FileReadFailure(f"File is empty: {path}")
        if path.suffix.lower() == ".csv":
            logger.info(f"Reading CSV file: {path}")
            return _read_csv(path)
        target = path
        label = str(path)

    try:
        logger.info(f"Reading workbook: {label}")
        sheets = pd.read_excel(target, sheet_name=None, header=None, engine="openpyxl")
    except zipfile.BadZipFile as e:
        logger.error(f"Workbook unreadable (component=io, action=read_workbook): {label}")
        raise FileReadFailure(f"Failed to read workbook {label}: corrupted or invalid format", details=e) from e
    except (ValueError, KeyError, OSError) as e:
        logger.error(f"Workbook unreadable (component=io, action=read_workbook): {label}: {e}")
        raise FileReadFailure(f"Failed to read workbook {label}: {e}", details=e) from e

    if not sheets:
        raise ParseFailure(f"Workbook has no sheets: {label}")

    out = {str(name): frame_to_rows(df) for name, df in sheets.items()}
    logger.info(f"Read {len(out)} sheet(s) from {label}: {list(out)}")
    return out


ALLOWED_SUFFIXES = (".xlsx", ".xlsm", ".csv")
MAX_SOURCE_BYTES = 10 * 1024 * 1024
LARGE_SOURCE_BYTES = 5 * 1024 * 1024


def validate_source(path: Union[str, Path]) -> Tuple[bool, List[str]]:
    """
    Pre-flight check on a candidate input file (type and size).

    Returns:
        (is_valid, messages) -- "[WARNING]" messages do not affect validity
    """
    p = Path(path)
    errors: List[str] = []

    if p.suffix.lower() not in ALLOWED_SUFFIXES:
        errors.append(f"Unsupported file type {p.suffix or '(none)'}; expected one of {ALLOWED_SUFFIXES}")

    size = p.stat().st_size if p.exists() else 0
    if size > MAX_SOURCE_BYTES:
        errors.append(f"File too large ({size} bytes); limit is {MAX_SOURCE_BYTES} bytes")
    elif size > LARGE_SOURCE_BYTES:
        errors.append(f"[WARNING] Large file ({size} bytes); processing may be slow")

    is_valid = len([e for e in errors if not e.startswith("[WARNING]")]) == 0
    return is_valid, errors

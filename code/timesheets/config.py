import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .records import HASH_METHODS

LAYOUTS = ("auto", "positional")

DEFAULT_DATA_SHEET = "データ(日報)"
DEFAULT_CODES_SHEET = "コード"


@dataclass(frozen=True)
class Settings:
    input_dir: Optional[Path]
    output_dir: Path
    data_sheet: str = DEFAULT_DATA_SHEET
    codes_sheet: str = DEFAULT_CODES_SHEET
    layout: str = "auto"
    hash_method: str = "base64"
    separator: str = ","


def build_settings(
    input_dir: Optional[str],
    output_dir: str,
    data_sheet: str = DEFAULT_DATA_SHEET,
    codes_sheet: str = DEFAULT_CODES_SHEET,
    layout: str = "auto",
    hash_method: str = "base64",
    separator: str = ",",
) -> Settings:
    if layout not in LAYOUTS:
        raise ValueError(f"Invalid layout {layout!r}. Expected one of {LAYOUTS}")
    if hash_method not in HASH_METHODS:
        raise ValueError(f"Invalid hash method {hash_method!r}. Expected one of {HASH_METHODS}")
    if not separator:
        raise ValueError("Export separator must not be empty")
    return Settings(
        input_dir=Path(input_dir) if input_dir else None,
        output_dir=Path(output_dir),
        data_sheet=data_sheet,
        codes_sheet=codes_sheet,
        layout=layout,
        hash_method=hash_method,
        separator=separator,
    )


def load_settings(
    input_dir=None,
    output_dir=None,
    layout=None,
    hash_method=None,
    dotenv_path=None,
) -> Settings:
    load_dotenv(dotenv_path=dotenv_path, override=False)
    input_dir = input_dir or os.getenv("TIMESHEET_INPUT_DIR")
    output_dir = output_dir or os.getenv("TIMESHEET_OUTPUT_DIR") or "outputs"
    return build_settings(
        input_dir,
        output_dir,
        data_sheet=os.getenv("TIMESHEET_DATA_SHEET") or DEFAULT_DATA_SHEET,
        codes_sheet=os.getenv("TIMESHEET_CODES_SHEET") or DEFAULT_CODES_SHEET,
        layout=layout or os.getenv("TIMESHEET_LAYOUT") or "auto",
        hash_method=hash_method or os.getenv("TIMESHEET_HASH_METHOD") or "base64",
        separator=os.getenv("TIMESHEET_EXPORT_SEP") or ",",
    )


def ensure_dirs(s: Settings):
    s.output_dir.mkdir(parents=True, exist_ok=True)

from datetime import date
from pathlib import Path
from typing import Optional, Union

import pandas as pd

REPORT_PREFIX = "hours_summary"


def export_delimited(frame: pd.DataFrame, path: Optional[Union[str, Path]] = None, sep: str = ",") -> str:
    """
    Header row of column names, then one line per row. Values containing the
    separator, a quote or a newline are quoted. Written as UTF-8 when `path`
    is given.
    """
    text = frame.to_csv(sep=sep, index=False, lineterminator="\n")
    if path is not None:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
    return text


def report_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{REPORT_PREFIX}_{day.isoformat()}.csv"


def save_csv(df, path):
    df.to_csv(path, index=False)

#!/usr/bin/env python3
"""
run_pipeline.py

Single entrypoint: ingest timesheet workbooks -> filter -> aggregate -> export.

Outputs (in --output_dir / TIMESHEET_OUTPUT_DIR):
- hours_summary_YYYY-MM-DD.csv  report rows (project x sub-work)
- by_category.csv               hours per work category
- daily_series.csv              hours per day
- undefined_codes.csv           sub-work codes missing from the code sheet

A file that cannot be read or parsed is reported and skipped; the rest of
the batch still runs.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

import pandas as pd

from timesheets import (
    IngestError,
    ReportFilter,
    WorkStore,
    aggregate_by_category,
    compute_totals,
    daily_series,
    export_delimited,
    filter_records,
    find_undefined_codes,
    ingest_workbook,
    load_settings,
    report_filename,
    report_rows,
    validate_source,
)
from timesheets.config import ensure_dirs
from timesheets.io import ALLOWED_SUFFIXES
from timesheets.report import save_csv


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Aggregate timesheet workbook exports into hour summaries.")
    grp = ap.add_mutually_exclusive_group(required=False)
    grp.add_argument("--input_dir", type=str, help="Directory containing workbook exports")
    grp.add_argument("--files", nargs="+", type=str, help="List of workbook files to process")
    ap.add_argument("--output_dir", type=str, required=False, help="Directory to write outputs")
    ap.add_argument("--layout", choices=["auto", "positional"], default=None,
                    help="Header detection: synonym search (auto) or fixed daily-report columns")
    ap.add_argument("--from", dest="date_from", type=str, default=None, help="Earliest work date (YYYY-MM-DD)")
    ap.add_argument("--to", dest="date_to", type=str, default=None, help="Latest work date (YYYY-MM-DD)")
    ap.add_argument("--project", type=str, default=None, help="Project code substring")
    ap.add_argument("--contractor", type=str, default=None, help="Contractor name substring")
    return ap.parse_args(argv)


def _collect_inputs(args, settings) -> List[Path]:
    if args.files:
        return [Path(f) for f in args.files]
    if settings.input_dir is None:
        raise SystemExit("Missing input_dir. Provide --input_dir or set TIMESHEET_INPUT_DIR in .env.")
    if not settings.input_dir.exists():
        raise SystemExit(f"Input directory does not exist: {settings.input_dir}")
    return sorted(p for p in settings.input_dir.iterdir() if p.suffix.lower() in ALLOWED_SUFFIXES)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    code_dir = Path(__file__).resolve().parent
    settings = load_settings(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        layout=args.layout,
        dotenv_path=code_dir / ".env",
    )
    ensure_dirs(settings)

    inputs = _collect_inputs(args, settings)
    if not inputs:
        raise SystemExit("No workbook files found to process.")

    store = WorkStore()
    failed = 0

    # ---- Ingest ----
    for path in inputs:
        ok, messages = validate_source(path)
        for m in messages:
            if m.startswith("[WARNING]"):
                print(f"{m} ({path.name})")
            else:
                print(f"[ERROR] {path.name}: {m}")
        if not ok:
            failed += 1
            continue

        try:
            result = ingest_workbook(path, settings=settings)
        except IngestError as e:
            print(f"[ERROR] {path.name}: {e}")
            failed += 1
            continue

        added = store.add_records(result.records)
        store.add_codes(result.taxonomy_entries)
        s = result.summary()
        print(
            f"[INFO] {path.name}: inserted={s.inserted} duplicates={s.duplicates} "
            f"errors={s.errors} undefined_codes={s.undefined_codes} (new across batch: {added})"
        )
        for failure in result.validation_failures[:5]:
            print(f"  [WARNING] {failure.record.record_id}: {'; '.join(failure.errors)}")

    if len(store) == 0:
        print("[WARNING] No records ingested; nothing to aggregate.")
        return

    # ---- Filter + aggregate ----
    report_filter = ReportFilter(
        date_from=args.date_from,
        date_to=args.date_to,
        project=args.project,
        contractor=args.contractor,
    )
    records = filter_records(store.records, report_filter)
    codes = store.codes
    out = settings.output_dir
    sep = settings.separator

    export_delimited(report_rows(records, codes), out / report_filename(), sep=sep)
    export_delimited(aggregate_by_category(records, codes), out / "by_category.csv", sep=sep)
    export_delimited(daily_series(records), out / "daily_series.csv", sep=sep)

    undefined = find_undefined_codes(records, codes)
    save_csv(
        pd.DataFrame([asdict(u) for u in undefined], columns=["subwork_code", "count", "first_seen"]),
        out / "undefined_codes.csv",
    )

    totals = compute_totals(records)
    print(f"\nProcessed {len(inputs) - failed}/{len(inputs)} files; {len(records)} record(s) after filtering.")
    print(f"Regular hours:  {totals['regular_hours']:.1f}")
    print(f"Overtime hours: {totals['overtime_hours']:.1f}")
    print(f"Total hours:    {totals['total_hours']:.1f}")
    print(f"Overtime ratio: {totals['overtime_ratio']}%")
    if undefined:
        print(f"[WARNING] {len(undefined)} undefined sub-work code(s): {', '.join(u.subwork_code for u in undefined)}")
    print(f"Wrote outputs to: {out.resolve()}")
    print("✓ Pipeline complete.")


if __name__ == "__main__":
    main()

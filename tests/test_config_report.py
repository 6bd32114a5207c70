#!/usr/bin/env python3
"""
test_config_report.py

Unit tests for timesheets/config.py and timesheets/report.py

Tests:
- Settings from environment, explicit arguments win
- Invalid layout / hash method rejected
- Delimited export text and file output, quoting of separators in values
- Report file naming
"""

import io
import os
import shutil
import tempfile
import unittest
import sys
from datetime import date
from pathlib import Path
from unittest import mock

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from timesheets.config import build_settings, load_settings
from timesheets.report import export_delimited, report_filename


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.no_env = Path(self.test_dir) / "missing.env"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            s = load_settings(dotenv_path=self.no_env)
        self.assertIsNone(s.input_dir)
        self.assertEqual(s.output_dir, Path("outputs"))
        self.assertEqual(s.data_sheet, "データ(日報)")
        self.assertEqual(s.codes_sheet, "コード")
        self.assertEqual(s.layout, "auto")
        self.assertEqual(s.hash_method, "base64")
        self.assertEqual(s.separator, ",")

    def test_from_environment(self):
        env = {
            "TIMESHEET_INPUT_DIR": "in",
            "TIMESHEET_OUTPUT_DIR": "out",
            "TIMESHEET_LAYOUT": "positional",
            "TIMESHEET_HASH_METHOD": "rolling",
            "TIMESHEET_EXPORT_SEP": ";",
            "TIMESHEET_DATA_SHEET": "Daily",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            s = load_settings(dotenv_path=self.no_env)
        self.assertEqual(s.input_dir, Path("in"))
        self.assertEqual(s.output_dir, Path("out"))
        self.assertEqual(s.layout, "positional")
        self.assertEqual(s.hash_method, "rolling")
        self.assertEqual(s.separator, ";")
        self.assertEqual(s.data_sheet, "Daily")

    def test_explicit_arguments_win(self):
        env = {"TIMESHEET_OUTPUT_DIR": "out", "TIMESHEET_LAYOUT": "positional"}
        with mock.patch.dict(os.environ, env, clear=True):
            s = load_settings(output_dir="elsewhere", layout="auto", dotenv_path=self.no_env)
        self.assertEqual(s.output_dir, Path("elsewhere"))
        self.assertEqual(s.layout, "auto")

    def test_dotenv_file(self):
        env_file = Path(self.test_dir) / ".env"
        env_file.write_text("TIMESHEET_HASH_METHOD=rolling\n", encoding="utf-8")
        with mock.patch.dict(os.environ, {}, clear=True):
            s = load_settings(dotenv_path=env_file)
        self.assertEqual(s.hash_method, "rolling")

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            build_settings(None, "out", layout="grid")
        with self.assertRaises(ValueError):
            build_settings(None, "out", hash_method="md5")
        with mock.patch.dict(os.environ, {"TIMESHEET_HASH_METHOD": "sha"}, clear=True):
            with self.assertRaises(ValueError):
                load_settings(dotenv_path=self.no_env)


class TestExport(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.frame = pd.DataFrame({
            "project_code": ["S6290", "S7001"],
            "major_name": ["組立", "undefined"],
            "total_hours": [9.5, 8.0],
        })

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_text(self):
        text = export_delimited(self.frame)
        self.assertEqual(text.splitlines(), [
            "project_code,major_name,total_hours",
            "S6290,組立,9.5",
            "S7001,undefined,8.0",
        ])

    def test_separator_inside_value_is_quoted(self):
        frame = self.frame.assign(major_name=["組立, 配材", "配管;継手"])
        self.assertIn('"組立, 配材"', export_delimited(frame).splitlines()[1])
        for sep in (",", ";"):
            text = export_delimited(frame, sep=sep)
            back = pd.read_csv(io.StringIO(text), sep=sep)
            self.assertEqual(list(back.columns), ["project_code", "major_name", "total_hours"])
            self.assertEqual(list(back["major_name"]), ["組立, 配材", "配管;継手"])
            self.assertEqual(list(back["total_hours"]), [9.5, 8.0])

    def test_separator_and_file(self):
        path = Path(self.test_dir) / "nested" / "report.csv"
        text = export_delimited(self.frame, path, sep=";")
        self.assertTrue(path.exists())
        self.assertEqual(path.read_text(encoding="utf-8"), text)
        self.assertTrue(text.startswith("project_code;major_name;total_hours"))

    def test_header_only_when_empty(self):
        text = export_delimited(self.frame.iloc[0:0])
        self.assertEqual(text, "project_code,major_name,total_hours\n")

    def test_report_filename(self):
        self.assertEqual(report_filename(date(2025, 1, 15)), "hours_summary_2025-01-15.csv")


if __name__ == "__main__":
    unittest.main(verbosity=2)

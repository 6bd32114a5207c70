"""
errors.py

Structural failures raise IngestError subclasses with a stable code.
Per-record problems are collected as ValidationFailure values instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .records import WorkRecord


FILE_READ_ERROR = "FILE_READ_ERROR"
EXCEL_PARSE_ERROR = "EXCEL_PARSE_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"


class IngestError(Exception):
    code = "INGEST_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code
        self.message = message
        self.details = details
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": None if self.details is None else str(self.details),
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class FileReadFailure(IngestError):
    """Source missing or its bytes could not be read as a workbook."""
    code = FILE_READ_ERROR


class ParseFailure(IngestError):
    """Workbook read, but it has no usable data sheet or header row."""
    code = EXCEL_PARSE_ERROR


@dataclass
class ValidationFailure:
    record: WorkRecord
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    code: str = VALIDATION_ERROR

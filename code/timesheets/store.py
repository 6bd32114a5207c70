from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .records import WorkCodeDefinition, WorkRecord

logger = logging.getLogger(__name__)


class WorkStore:
    """
    Session-scoped collection of records and code definitions.

    Owned by the caller; nothing here is global. Records are deduplicated
    across batches by content hash, codes by sub-work code (first wins).
    """

    def __init__(self):
        self._records: List[WorkRecord] = []
        self._hashes: set = set()
        self._codes: Dict[str, WorkCodeDefinition] = {}

    def add_records(self, records: Iterable[WorkRecord]) -> int:
        added = 0
        for rec in records:
            if rec.content_hash in self._hashes:
                continue
            self._hashes.add(rec.content_hash)
            self._records.append(rec)
            added += 1
        logger.info(f"Stored {added} new record(s); {len(self._records)} total")
        return added

    def add_codes(self, codes: Iterable[WorkCodeDefinition]) -> int:
        added = 0
        for code in codes:
            if code.subwork_code in self._codes:
                continue
            self._codes[code.subwork_code] = code
            added += 1
        return added

    @property
    def records(self) -> List[WorkRecord]:
        return list(self._records)

    @property
    def codes(self) -> List[WorkCodeDefinition]:
        return list(self._codes.values())

    def clear(self) -> None:
        self._records.clear()
        self._hashes.clear()
        self._codes.clear()

    def __len__(self) -> int:
        return len(self._records)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .records import WorkRecord


@dataclass
class DedupResult:
    unique: List[WorkRecord] = field(default_factory=list)
    duplicates: List[WorkRecord] = field(default_factory=list)


def partition_duplicates(records: Sequence[WorkRecord]) -> DedupResult:
    """
    Split a batch by content hash. The first occurrence of a hash (input order)
    is kept; every later occurrence goes to `duplicates`.
    """
    seen = set()
    result = DedupResult()
    for rec in records:
        if rec.content_hash in seen:
            result.duplicates.append(rec)
            continue
        seen.add(rec.content_hash)
        result.unique.append(rec)
    return result

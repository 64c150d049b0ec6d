"""Unmeasured record pruning transform.

A record with neither a headcount nor a percentage carries no layoff
measurement, and neither value can be derived from the other without
the company size, so such records are dropped.
"""

from __future__ import annotations

from typing import Iterable

from core.types import LayoffRecord


def has_measurement(record: LayoffRecord) -> bool:
    """Return whether the record carries at least one layoff measurement."""
    return record.total_laid_off is not None or record.percentage_laid_off is not None


def prune_unmeasured(records: Iterable[LayoffRecord]) -> list[LayoffRecord]:
    """Drop records where both value fields are absent.

    Args:
        records: Records after deduplication and null resolution.

    Returns:
        Records with at least one measurement, in input order.
    """
    return [record for record in records if has_measurement(record)]

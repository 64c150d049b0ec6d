"""Exact record deduplication transform.

This module removes records identical across all nine fields.
Each duplicate group gets a transient ordinal in input order and only
ordinal 1 survives; the ordinal never leaves this module.
"""

from __future__ import annotations

from typing import Iterable

from core.types import LayoffRecord


def assign_row_numbers(records: Iterable[LayoffRecord]) -> list[tuple[LayoffRecord, int]]:
    """Number records within each identical-field group.

    Absent values compare equal to each other, so two records that are
    both missing ``total_laid_off`` still fall in the same group.

    Args:
        records: Records in a deterministic order.

    Returns:
        Pairs of record and its one-based ordinal within its group.
    """
    group_sizes: dict[tuple[object, ...], int] = {}
    numbered: list[tuple[LayoffRecord, int]] = []
    for record in records:
        group_key = record.field_tuple()
        ordinal = group_sizes.get(group_key, 0) + 1
        group_sizes[group_key] = ordinal
        numbered.append((record, ordinal))
    return numbered


def remove_duplicates(records: Iterable[LayoffRecord]) -> list[LayoffRecord]:
    """Keep the first record of every identical-field group.

    Args:
        records: Records to evaluate.

    Returns:
        Ordered records with duplicates removed.
    """
    return [record for record, ordinal in assign_row_numbers(records) if ordinal == 1]

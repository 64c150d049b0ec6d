"""Unit tests for exact deduplication transform."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from core.types import LayoffRecord
from transforms.deduplication import assign_row_numbers, remove_duplicates


def _record(**overrides: object) -> LayoffRecord:
    record = LayoffRecord(
        company="Casper",
        location="SF Bay Area",
        industry="Retail",
        total_laid_off=100,
        percentage_laid_off=0.1,
        event_date=date(2022, 1, 1),
        stage="Series A",
        country="United States.",
        funds_raised_millions=50.0,
    )
    return replace(record, **overrides)


def test_remove_duplicates_keeps_one_of_identical_pair() -> None:
    """Two records identical in all fields should collapse to one."""
    deduped = remove_duplicates([_record(), _record()])

    assert deduped == [_record()]


def test_remove_duplicates_keeps_records_differing_in_one_field() -> None:
    """A single differing field keeps both records."""
    deduped = remove_duplicates([_record(), _record(funds_raised_millions=51.0)])

    assert len(deduped) == 2


def test_remove_duplicates_groups_absent_values_together() -> None:
    """Absent values compare equal for grouping."""
    deduped = remove_duplicates(
        [_record(total_laid_off=None), _record(total_laid_off=None), _record()]
    )

    assert len(deduped) == 2


def test_remove_duplicates_preserves_first_occurrence_order() -> None:
    """Survivors should keep input order."""
    other = _record(company="Airbnb")

    deduped = remove_duplicates([_record(), other, _record(), other])

    assert [record.company for record in deduped] == ["Casper", "Airbnb"]


def test_assign_row_numbers_numbers_each_group_from_one() -> None:
    """Ordinals should restart per group."""
    other = _record(company="Airbnb")

    numbered = assign_row_numbers([_record(), other, _record(), _record()])

    assert [ordinal for _, ordinal in numbered] == [1, 1, 2, 3]


def test_remove_duplicates_does_not_expose_ordinal() -> None:
    """Deduplicated output should be plain records."""
    deduped = remove_duplicates([_record()])

    assert all(isinstance(record, LayoffRecord) for record in deduped)

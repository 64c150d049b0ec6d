"""Missing industry resolution transforms.

This module turns blank industry strings into absent values and then
back-fills absent industries from other records of the same company.
Backfill candidates are resolved explicitly so output is reproducible
when a company carries more than one known industry.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Iterable, Union

from core.constants import DEFAULT_TIE_BREAK_POLICY, TIE_BREAK_POLICIES
from core.errors import SiftTransformError
from core.logging_config import get_logger
from core.types import LayoffRecord

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class NoCandidate:
    """No record of the company carries a known industry."""


@dataclass(frozen=True)
class SingleCandidate:
    """Exactly one distinct known industry exists for the company."""

    value: str


@dataclass(frozen=True)
class MultipleCandidates:
    """Several distinct known industries exist; ``chosen`` is the tie-break winner."""

    values: tuple[str, ...]
    chosen: str


BackfillResolution = Union[NoCandidate, SingleCandidate, MultipleCandidates]


def blank_industry_to_absent(records: Iterable[LayoffRecord]) -> list[LayoffRecord]:
    """Replace empty or whitespace-only industries with ``None``.

    Args:
        records: Records to normalize.

    Returns:
        Records where blank industries are absent.
    """
    converted: list[LayoffRecord] = []
    for record in records:
        if record.industry is not None and not record.industry.strip():
            record = replace(record, industry=None)
        converted.append(record)
    return converted


def resolve_industry_candidates(
    records: Iterable[LayoffRecord],
    tie_break: str = DEFAULT_TIE_BREAK_POLICY,
) -> dict[str, BackfillResolution]:
    """Resolve one backfill value per company.

    Args:
        records: Records after blank conversion.
        tie_break: ``lexicographic`` or ``most_common``.

    Returns:
        Mapping of company to its backfill resolution.

    Raises:
        SiftTransformError: If the tie-break policy is unknown.
    """
    if tie_break not in TIE_BREAK_POLICIES:
        raise SiftTransformError(
            f"Unknown backfill tie-break policy '{tie_break}'. "
            f"Use one of: {', '.join(TIE_BREAK_POLICIES)}."
        )
    known: dict[str, Counter[str]] = {}
    for record in records:
        counts = known.setdefault(record.company, Counter())
        if record.industry is not None:
            counts[record.industry] += 1
    return {company: _resolve(counts, tie_break) for company, counts in known.items()}


def backfill_industry(
    records: Iterable[LayoffRecord],
    tie_break: str = DEFAULT_TIE_BREAK_POLICY,
) -> list[LayoffRecord]:
    """Fill absent industries from records sharing the same company.

    Candidates come from the records as given; values filled during this
    pass are not used as further candidates.

    Args:
        records: Records after blank conversion.
        tie_break: Policy used when a company has several known industries.

    Returns:
        Records with resolvable industries filled in.
    """
    record_list = list(records)
    resolutions = resolve_industry_candidates(record_list, tie_break)
    ambiguous = sorted(
        company
        for company, resolution in resolutions.items()
        if isinstance(resolution, MultipleCandidates)
    )
    if ambiguous:
        _LOGGER.warning(
            "industry_backfill_ambiguous",
            company_count=len(ambiguous),
            companies=ambiguous[:10],
            tie_break=tie_break,
        )
    filled: list[LayoffRecord] = []
    for record in record_list:
        if record.industry is None:
            value = _resolution_value(resolutions[record.company])
            if value is not None:
                record = replace(record, industry=value)
        filled.append(record)
    return filled


def resolve_nulls(
    records: Iterable[LayoffRecord],
    tie_break: str = DEFAULT_TIE_BREAK_POLICY,
) -> list[LayoffRecord]:
    """Run blank conversion followed by same-company backfill."""
    return backfill_industry(blank_industry_to_absent(records), tie_break)


def _resolve(counts: Counter[str], tie_break: str) -> BackfillResolution:
    if not counts:
        return NoCandidate()
    values = tuple(sorted(counts))
    if len(values) == 1:
        return SingleCandidate(value=values[0])
    if tie_break == "most_common":
        chosen = min(values, key=lambda value: (-counts[value], value))
    else:
        chosen = values[0]
    return MultipleCandidates(values=values, chosen=chosen)


def _resolution_value(resolution: BackfillResolution) -> str | None:
    if isinstance(resolution, SingleCandidate):
        return resolution.value
    if isinstance(resolution, MultipleCandidates):
        return resolution.chosen
    return None

"""Free-text standardization transforms.

This module normalizes company, industry, and country values so that
equivalent spellings compare equal. Every pass is idempotent.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from core.cleaning_rules import find_industry_rule, matches_prefix
from core.constants import COUNTRY_TRAILING_CHARACTERS
from core.types import CleaningRules, LayoffRecord


def trim_company(record: LayoffRecord) -> LayoffRecord:
    """Strip leading and trailing whitespace from the company name."""
    trimmed = record.company.strip()
    if trimmed == record.company:
        return record
    return replace(record, company=trimmed)


def collapse_industry(record: LayoffRecord, rules: CleaningRules) -> LayoffRecord:
    """Rewrite an industry to its canonical label when a prefix rule matches.

    Args:
        record: Record to standardize.
        rules: Cleaning rules with ordered industry prefixes.

    Returns:
        Record with the canonical industry label, or the input record.
    """
    if not record.industry:
        return record
    rule = find_industry_rule(record.industry, rules)
    if rule is None or rule.label == record.industry:
        return record
    return replace(record, industry=rule.label)


def trim_country_suffix(record: LayoffRecord, rules: CleaningRules) -> LayoffRecord:
    """Strip trailing periods from countries matching a configured prefix.

    Args:
        record: Record to standardize.
        rules: Cleaning rules with country prefixes.

    Returns:
        Record with the trimmed country, or the input record.
    """
    country = record.country
    if not country:
        return record
    if not any(matches_prefix(country, prefix) for prefix in rules.country_suffix_prefixes):
        return record
    trimmed = country.rstrip(COUNTRY_TRAILING_CHARACTERS)
    if trimmed == country:
        return record
    return replace(record, country=trimmed)


def standardize_record(record: LayoffRecord, rules: CleaningRules) -> LayoffRecord:
    """Apply every standardization pass to one record."""
    record = trim_company(record)
    record = collapse_industry(record, rules)
    return trim_country_suffix(record, rules)


def standardize_records(
    records: Iterable[LayoffRecord],
    rules: CleaningRules,
) -> list[LayoffRecord]:
    """Standardize free-text fields across records.

    Args:
        records: Records to standardize.
        rules: Cleaning rules.

    Returns:
        Standardized records in input order.
    """
    return [standardize_record(record, rules) for record in records]

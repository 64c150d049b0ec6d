"""Unit tests for free-text standardization transforms."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from core.types import CleaningRules, IndustryRule, LayoffRecord
from transforms.standardization import (
    collapse_industry,
    standardize_records,
    trim_company,
    trim_country_suffix,
)


def _record(**overrides: object) -> LayoffRecord:
    record = LayoffRecord(
        company="Coinbase",
        location="SF Bay Area",
        industry="Crypto",
        total_laid_off=950,
        percentage_laid_off=0.2,
        event_date=date(2023, 1, 10),
        stage="Post-IPO",
        country="United States",
        funds_raised_millions=549.0,
    )
    return replace(record, **overrides)


def test_trim_company_strips_whitespace() -> None:
    """Leading and trailing whitespace should be removed."""
    assert trim_company(_record(company="  Uber \t")).company == "Uber"


def test_trim_company_returns_same_record_when_clean() -> None:
    """Unchanged records should be passed through as-is."""
    record = _record()

    assert trim_company(record) is record


def test_collapse_industry_maps_prefix_variants() -> None:
    """All values starting with the prefix should become the label."""
    rules = CleaningRules()
    variants = ["Crypto Currency", "CryptoCurrency", "crypto", "Crypto"]

    collapsed = {collapse_industry(_record(industry=value), rules).industry for value in variants}

    assert collapsed == {"Crypto"}


def test_collapse_industry_leaves_other_industries() -> None:
    """Industries without a matching prefix are untouched."""
    record = _record(industry="Retail")

    assert collapse_industry(record, CleaningRules()) is record


def test_collapse_industry_uses_first_matching_rule() -> None:
    """Rule order decides between overlapping prefixes."""
    rules = CleaningRules(
        industry_rules=(
            IndustryRule(prefix="Fintech", label="Fintech"),
            IndustryRule(prefix="Fin", label="Finance"),
        )
    )

    assert collapse_industry(_record(industry="Fintech Lending"), rules).industry == "Fintech"


def test_collapse_industry_skips_absent_and_blank() -> None:
    """Absent and blank industries are left for the null resolver."""
    rules = CleaningRules()

    assert collapse_industry(_record(industry=None), rules).industry is None
    assert collapse_industry(_record(industry=""), rules).industry == ""


def test_trim_country_suffix_strips_trailing_periods() -> None:
    """Trailing periods should be removed for matching countries."""
    record = trim_country_suffix(_record(country="United States.."), CleaningRules())

    assert record.country == "United States"


def test_trim_country_suffix_is_scoped_to_prefix() -> None:
    """Countries outside the configured prefixes keep their punctuation."""
    record = _record(country="Korea, Rep.")

    assert trim_country_suffix(record, CleaningRules()) is record


def test_standardize_records_is_idempotent() -> None:
    """Running the standardizer twice matches running it once."""
    rules = CleaningRules()
    records = [
        _record(company=" Casper ", industry="Crypto Currency", country="United States."),
        _record(industry="Retail", country="Canada"),
    ]

    once = standardize_records(records, rules)
    twice = standardize_records(once, rules)

    assert once == twice

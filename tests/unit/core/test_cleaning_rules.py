"""Unit tests for cleaning rules loading."""

from __future__ import annotations

import pytest

from core.cleaning_rules import dump_cleaning_rules, find_industry_rule, load_cleaning_rules
from core.errors import SiftConfigError
from core.types import CleaningRules, IndustryRule
from tests.fixture_paths import fixture_path


def test_load_cleaning_rules_defaults_without_path() -> None:
    """Missing rules path should fall back to the crypto/United States defaults."""
    rules = load_cleaning_rules(None)

    assert rules == CleaningRules(
        industry_rules=(IndustryRule(prefix="Crypto", label="Crypto"),),
        country_suffix_prefixes=("United States",),
    )


def test_load_cleaning_rules_reads_yaml_file() -> None:
    """YAML rules should be parsed in declared order."""
    rules = load_cleaning_rules(fixture_path("rules/custom_rules.yaml"))

    assert [rule.label for rule in rules.industry_rules] == ["Crypto", "Finance"]
    assert rules.country_suffix_prefixes == ("United States", "United Kingdom")


def test_load_cleaning_rules_rejects_unstable_labels() -> None:
    """A label rewritten by another rule should be refused."""
    with pytest.raises(SiftConfigError, match="Fintech"):
        load_cleaning_rules(fixture_path("rules/unstable_rules.yaml"))


def test_load_cleaning_rules_rejects_unknown_fields() -> None:
    """Unknown root keys should be reported."""
    with pytest.raises(SiftConfigError, match="industry_prefix"):
        load_cleaning_rules(fixture_path("rules/unknown_field_rules.yaml"))


def test_load_cleaning_rules_raises_for_missing_file(tmp_path) -> None:
    """A missing rules file should fail with a config error."""
    with pytest.raises(SiftConfigError):
        load_cleaning_rules(tmp_path / "missing.yaml")


def test_load_cleaning_rules_rejects_wrong_version(tmp_path) -> None:
    """Only version 1 rule files are supported."""
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text("version: 2\n", encoding="utf-8")

    with pytest.raises(SiftConfigError, match="version"):
        load_cleaning_rules(rules_file)


def test_label_defaults_to_prefix(tmp_path) -> None:
    """A rule without label should use its prefix as canonical label."""
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text(
        "version: 1\nindustry_prefixes:\n  - prefix: Health\n", encoding="utf-8"
    )

    rules = load_cleaning_rules(rules_file)

    assert rules.industry_rules == (IndustryRule(prefix="Health", label="Health"),)


def test_find_industry_rule_ignores_case() -> None:
    """Prefix matching should be case-insensitive."""
    rule = find_industry_rule("crypto currency", CleaningRules())

    assert rule is not None and rule.label == "Crypto"


def test_dump_cleaning_rules_round_trips_through_loader(tmp_path) -> None:
    """Dumped rules should load back to the same rule set."""
    import yaml

    rules = load_cleaning_rules(fixture_path("rules/custom_rules.yaml"))
    rules_file = tmp_path / "dumped.yaml"
    rules_file.write_text(yaml.safe_dump(dump_cleaning_rules(rules)), encoding="utf-8")

    assert load_cleaning_rules(rules_file) == rules

"""Typed cleaning-rule parsing for standardization.

This module loads and validates YAML rule files that map industry
prefixes to canonical labels and scope the country suffix fix.
Rules are data, so new near-duplicate spellings need no code change.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import RULES_FILE_VERSION
from core.errors import SiftConfigError, SiftDependencyError
from core.types import CleaningRules, IndustryRule


def load_cleaning_rules(rules_path: str | Path | None) -> CleaningRules:
    """Load cleaning rules from YAML, or return defaults.

    Args:
        rules_path: Optional path to a YAML rules file.

    Returns:
        Validated cleaning rules.

    Raises:
        SiftDependencyError: If PyYAML is unavailable.
        SiftConfigError: If the file is invalid or rules are inconsistent.
    """
    if rules_path is None:
        return CleaningRules()
    payload = _load_yaml_payload(Path(rules_path))
    root_mapping = _expect_mapping(payload, "rules root")
    _validate_root_keys(root_mapping)
    _parse_version(root_mapping)
    defaults = CleaningRules()
    industry_rules = _parse_industry_rules(root_mapping, defaults.industry_rules)
    country_prefixes = _parse_country_prefixes(root_mapping, defaults.country_suffix_prefixes)
    rules = CleaningRules(
        industry_rules=industry_rules,
        country_suffix_prefixes=country_prefixes,
    )
    validate_cleaning_rules(rules)
    return rules


def matches_prefix(value: str, prefix: str) -> bool:
    """Return whether ``value`` starts with ``prefix`` ignoring case."""
    return value.casefold().startswith(prefix.casefold())


def find_industry_rule(value: str, rules: CleaningRules) -> IndustryRule | None:
    """Return the first industry rule whose prefix matches ``value``."""
    for rule in rules.industry_rules:
        if matches_prefix(value, rule.prefix):
            return rule
    return None


def validate_cleaning_rules(rules: CleaningRules) -> None:
    """Check that every canonical label is a fixed point of the rule set.

    A label rewritten by another rule would change again on a second
    standardization pass.

    Raises:
        SiftConfigError: If any label is not stable under the rules.
    """
    for rule in rules.industry_rules:
        target_rule = find_industry_rule(rule.label, rules)
        if target_rule is not None and target_rule.label != rule.label:
            raise SiftConfigError(
                f"Industry label '{rule.label}' (prefix '{rule.prefix}') would be rewritten "
                f"to '{target_rule.label}' by prefix '{target_rule.prefix}'. "
                "Reorder or merge the rules so every label maps to itself."
            )


def dump_cleaning_rules(rules: CleaningRules) -> dict[str, object]:
    """Render rules as a YAML-compatible payload."""
    return {
        "version": RULES_FILE_VERSION,
        "industry_prefixes": [
            {"prefix": rule.prefix, "label": rule.label} for rule in rules.industry_rules
        ],
        "country_suffix_prefixes": list(rules.country_suffix_prefixes),
    }


def _load_yaml_payload(rules_file: Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise SiftDependencyError(
            "YAML rules support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    rules_file = rules_file.expanduser().resolve()
    if not rules_file.exists():
        raise SiftConfigError(
            f"Rules file does not exist at {rules_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(rules_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise SiftConfigError(
            f"Failed to read rules file at {rules_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise SiftConfigError(
            f"Failed to parse YAML rules at {rules_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise SiftConfigError(f"Rules file at {rules_file} is empty. Define 'version' and rules.")
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise SiftConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise SiftConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise SiftConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _expect_text(value: object, context: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise SiftConfigError(f"Invalid {context}: expected a non-empty string.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int):
        raise SiftConfigError("Rules field 'version' must be an integer. Set version: 1.")
    if raw_version != RULES_FILE_VERSION:
        raise SiftConfigError(
            f"Unsupported rules version {raw_version}. Use version: {RULES_FILE_VERSION}."
        )
    return raw_version


def _parse_industry_rules(
    root_mapping: Mapping[str, object],
    default_rules: tuple[IndustryRule, ...],
) -> tuple[IndustryRule, ...]:
    raw_rules = root_mapping.get("industry_prefixes")
    if raw_rules is None:
        return default_rules
    parsed_rules = []
    for index, rule_value in enumerate(_expect_sequence(raw_rules, "industry_prefixes")):
        context = f"industry_prefixes entry #{index + 1}"
        rule_mapping = _expect_mapping(rule_value, context)
        unknown_keys = sorted(set(rule_mapping) - {"prefix", "label"})
        if unknown_keys:
            raise SiftConfigError(
                f"Invalid {context}: unknown fields {', '.join(unknown_keys)}."
            )
        prefix = _expect_text(rule_mapping.get("prefix"), f"{context} prefix")
        raw_label = rule_mapping.get("label", prefix)
        label = _expect_text(raw_label, f"{context} label")
        parsed_rules.append(IndustryRule(prefix=prefix, label=label))
    return tuple(parsed_rules)


def _parse_country_prefixes(
    root_mapping: Mapping[str, object],
    default_prefixes: tuple[str, ...],
) -> tuple[str, ...]:
    raw_prefixes = root_mapping.get("country_suffix_prefixes")
    if raw_prefixes is None:
        return default_prefixes
    prefix_rows = _expect_sequence(raw_prefixes, "country_suffix_prefixes")
    return tuple(
        _expect_text(value, f"country_suffix_prefixes entry #{index + 1}")
        for index, value in enumerate(prefix_rows)
    )


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    allowed_keys = {"version", "industry_prefixes", "country_suffix_prefixes"}
    unknown_keys = sorted(set(root_mapping) - allowed_keys)
    if unknown_keys:
        raise SiftConfigError(f"Rules file contains unknown root fields: {', '.join(unknown_keys)}.")

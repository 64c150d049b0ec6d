"""Core constants used across Sift modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".sift")
DATASETS_DIR_NAME = "datasets"
VERSIONS_DIR_NAME = "versions"
CATALOG_FILE_NAME = "catalog.json"
MANIFEST_FILE_NAME = "manifest.json"
RECORDS_FILE_NAME = "records.jsonl"
REJECTIONS_FILE_NAME = "rejections.jsonl"
LANCE_DIR_NAME = "data.lance"
HASH_ALGORITHM = "sha256"
SUPPORTED_SOURCE_EXTENSIONS = (".csv", ".jsonl", ".parquet")
LAYOFF_FIELDS = (
    "company",
    "location",
    "industry",
    "total_laid_off",
    "percentage_laid_off",
    "event_date",
    "stage",
    "country",
    "funds_raised_millions",
)
SOURCE_FIELD_ALIASES = {"date": "event_date"}
NULL_TOKENS = ("NULL", "null", "None", "NaN", "nan")
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")
DEFAULT_INDUSTRY_PREFIXES = (("Crypto", "Crypto"),)
DEFAULT_COUNTRY_SUFFIX_PREFIXES = ("United States",)
COUNTRY_TRAILING_CHARACTERS = "."
RULES_FILE_VERSION = 1
MALFORMED_POLICIES = ("reject", "abort")
DEFAULT_MALFORMED_POLICY = "reject"
TIE_BREAK_POLICIES = ("lexicographic", "most_common")
DEFAULT_TIE_BREAK_POLICY = "lexicographic"
DEFAULT_LOG_LEVEL = "INFO"

"""Shared typed models.

This module defines immutable data models used by ingest, transforms,
store, and SDK layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping

from core.constants import (
    DEFAULT_COUNTRY_SUFFIX_PREFIXES,
    DEFAULT_INDUSTRY_PREFIXES,
)


@dataclass(frozen=True)
class LayoffRecord:
    """Canonical layoff event record.

    ``None`` marks an absent value. ``industry`` may hold an empty
    string until blank sentinels are resolved.

    Attributes:
        company: Company name, the natural key for backfill.
        location: Office or metro area label.
        industry: Free-text industry category.
        total_laid_off: Headcount laid off, non-negative.
        percentage_laid_off: Fraction of workforce laid off in [0, 1].
        event_date: Calendar date of the layoff event.
        stage: Funding or lifecycle stage label.
        country: Country name.
        funds_raised_millions: Funding raised in millions.
    """

    company: str
    location: str | None
    industry: str | None
    total_laid_off: int | None
    percentage_laid_off: float | None
    event_date: date | None
    stage: str | None
    country: str | None
    funds_raised_millions: float | None

    def field_tuple(self) -> tuple[object, ...]:
        """Return all nine field values in schema order."""
        return (
            self.company,
            self.location,
            self.industry,
            self.total_laid_off,
            self.percentage_laid_off,
            self.event_date,
            self.stage,
            self.country,
            self.funds_raised_millions,
        )


@dataclass(frozen=True)
class RawRow:
    """Raw source row before parsing.

    Attributes:
        source_uri: File path or URI the row was read from.
        line_number: One-based data row number within the source.
        values: Column name to raw value mapping.
        extra_values: Values found beyond the header columns.
        missing_fields: Schema fields the row did not carry at all.
    """

    source_uri: str
    line_number: int
    values: Mapping[str, object]
    extra_values: tuple[object, ...] = ()
    missing_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class RejectedRecord:
    """Diagnostic for a source row that could not be parsed.

    Attributes:
        source_uri: Source of the rejected row.
        line_number: One-based data row number.
        field_name: Field that failed validation.
        raw_value: Offending raw value rendered as text.
        reason: Human-readable rejection reason.
    """

    source_uri: str
    line_number: int
    field_name: str
    raw_value: str
    reason: str


@dataclass(frozen=True)
class StageReport:
    """Audit counts for one cleaning stage.

    Attributes:
        stage: Stage name.
        input_count: Records entering the stage.
        output_count: Records leaving the stage.
        changed_count: Records rewritten by the stage.
    """

    stage: str
    input_count: int
    output_count: int
    changed_count: int = 0

    @property
    def dropped_count(self) -> int:
        """Records removed by this stage."""
        return self.input_count - self.output_count


@dataclass(frozen=True)
class IndustryRule:
    """Prefix rule collapsing industry spellings to one label."""

    prefix: str
    label: str


@dataclass(frozen=True)
class CleaningRules:
    """Externally supplied standardization rules.

    Attributes:
        industry_rules: Ordered prefix rules; the first match wins.
        country_suffix_prefixes: Country prefixes whose trailing periods are trimmed.
    """

    industry_rules: tuple[IndustryRule, ...] = tuple(
        IndustryRule(prefix=prefix, label=label) for prefix, label in DEFAULT_INDUSTRY_PREFIXES
    )
    country_suffix_prefixes: tuple[str, ...] = DEFAULT_COUNTRY_SUFFIX_PREFIXES


@dataclass(frozen=True)
class CleanOptions:
    """Clean command options.

    Attributes:
        dataset_name: Dataset name to create a version for.
        source_uri: Input file, directory, or S3 URI.
        rules_path: Optional YAML rules file overriding config.
        output_uri: Optional S3 URI for snapshot export.
        on_malformed: Optional malformed-row policy overriding config.
        tie_break: Optional backfill tie-break policy overriding config.
        final_deduplication: Re-run deduplication after standardization.
    """

    dataset_name: str
    source_uri: str
    rules_path: str | None = None
    output_uri: str | None = None
    on_malformed: str | None = None
    tie_break: str | None = None
    final_deduplication: bool = True


@dataclass(frozen=True)
class CleaningResult:
    """Outcome of running every cleaning stage.

    Attributes:
        records: Cleaned records in stable order.
        stage_reports: Ordered per-stage audit counts.
        rejections: Malformed source rows skipped during ingest.
        source_fingerprint: Digest of the raw source rows.
    """

    records: tuple[LayoffRecord, ...]
    stage_reports: tuple[StageReport, ...]
    rejections: tuple[RejectedRecord, ...] = ()
    source_fingerprint: str = ""


@dataclass(frozen=True)
class SnapshotManifest:
    """Immutable snapshot metadata for versioning.

    Attributes:
        dataset_name: Logical dataset identifier.
        version_id: Immutable snapshot id.
        created_at: UTC creation timestamp.
        source_uri: Source the snapshot was cleaned from.
        source_fingerprint: Digest of the raw source rows.
        recipe_steps: Ordered stage names used to create the snapshot.
        stage_reports: Per-stage audit counts.
        record_count: Number of records in snapshot.
        rejected_count: Number of malformed rows skipped.
    """

    dataset_name: str
    version_id: str
    created_at: datetime
    source_uri: str
    source_fingerprint: str
    recipe_steps: tuple[str, ...]
    stage_reports: tuple[StageReport, ...]
    record_count: int
    rejected_count: int


@dataclass(frozen=True)
class SnapshotWriteRequest:
    """Request payload for snapshot persistence."""

    dataset_name: str
    source_uri: str
    result: CleaningResult


@dataclass(frozen=True)
class VersionExportRequest:
    """Request payload for exporting a version directory to S3."""

    dataset_name: str
    version_id: str
    output_uri: str


@dataclass(frozen=True)
class CsvExportRequest:
    """Request payload for exporting cleaned records as CSV.

    Attributes:
        dataset_name: Dataset identifier.
        output_path: Destination CSV file path.
        version_id: Optional version id; latest if omitted.
    """

    dataset_name: str
    output_path: str
    version_id: str | None = None

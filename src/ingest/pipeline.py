"""Cleaning orchestration for layoff datasets.

This module coordinates source loading, the ordered cleaning stages,
and snapshot writes. Each stage consumes a record sequence and returns
a new one, so a failing stage never leaves a half-cleaned table behind.
"""

from __future__ import annotations

from typing import Callable, Sequence

from core.cleaning_rules import load_cleaning_rules
from core.config import SiftConfig, parse_malformed_policy, parse_tie_break_policy
from core.constants import DEFAULT_TIE_BREAK_POLICY
from core.errors import SiftError, SiftTransformError
from core.logging_config import get_logger
from core.types import (
    CleaningResult,
    CleaningRules,
    CleanOptions,
    LayoffRecord,
    SnapshotManifest,
    SnapshotWriteRequest,
    StageReport,
    VersionExportRequest,
)
from ingest.working_copy import WorkingCopy, load_working_copy
from store.snapshot_store import SnapshotStore
from transforms.deduplication import remove_duplicates
from transforms.null_resolution import resolve_nulls
from transforms.pruning import prune_unmeasured
from transforms.standardization import standardize_records

_LOGGER = get_logger(__name__)

StageFunction = Callable[[Sequence[LayoffRecord]], list[LayoffRecord]]


class CleaningPipelineRunner:
    """Runner for one clean-and-snapshot execution."""

    def __init__(self, options: CleanOptions, config: SiftConfig) -> None:
        self._options = options
        self._config = config
        self._store = SnapshotStore(config)
        rules_path = options.rules_path or config.rules_path
        self._rules = load_cleaning_rules(rules_path)
        self._on_malformed = parse_malformed_policy(options.on_malformed or config.on_malformed)
        self._tie_break = parse_tie_break_policy(options.tie_break or config.tie_break)

    def run(self) -> SnapshotManifest:
        """Execute the cleaning pipeline and return the created snapshot manifest."""
        working_copy = load_working_copy(
            self._options.source_uri, self._config, self._on_malformed
        )
        result = self._clean_working_copy(working_copy)
        manifest = self._store.create_snapshot(
            SnapshotWriteRequest(
                dataset_name=self._options.dataset_name,
                source_uri=self._options.source_uri,
                result=result,
            )
        )
        self._export_if_requested(manifest.version_id)
        _LOGGER.info(
            "clean_completed",
            dataset_name=self._options.dataset_name,
            source_uri=self._options.source_uri,
            input_count=working_copy.source_row_count,
            output_count=len(result.records),
            rejected_count=len(result.rejections),
            version_id=manifest.version_id,
            output_uri=self._options.output_uri,
        )
        return manifest

    def _clean_working_copy(self, working_copy: WorkingCopy) -> CleaningResult:
        ingest_report = StageReport(
            stage="ingestion",
            input_count=working_copy.source_row_count,
            output_count=len(working_copy.records),
        )
        _log_stage(ingest_report)
        result = clean_records(
            working_copy.records,
            self._rules,
            tie_break=self._tie_break,
            final_deduplication=self._options.final_deduplication,
        )
        return CleaningResult(
            records=result.records,
            stage_reports=(ingest_report,) + result.stage_reports,
            rejections=working_copy.rejections,
            source_fingerprint=working_copy.source_fingerprint,
        )

    def _export_if_requested(self, version_id: str) -> None:
        if not self._options.output_uri:
            return
        export_request = VersionExportRequest(
            dataset_name=self._options.dataset_name,
            version_id=version_id,
            output_uri=self._options.output_uri,
        )
        self._store.export_version_to_s3(export_request)


def clean_dataset(options: CleanOptions, config: SiftConfig) -> SnapshotManifest:
    """Run the cleaning pipeline and persist a snapshot.

    Args:
        options: Clean request options.
        config: Runtime configuration.

    Returns:
        Created snapshot manifest.

    Raises:
        SiftIngestError: If the source cannot be read or a row aborts the run.
        SiftTransformError: If a cleaning stage fails.
        SiftStoreError: If snapshot persistence fails.
    """
    runner = CleaningPipelineRunner(options, config)
    return runner.run()


def clean_records(
    records: Sequence[LayoffRecord],
    rules: CleaningRules,
    tie_break: str = DEFAULT_TIE_BREAK_POLICY,
    final_deduplication: bool = True,
) -> CleaningResult:
    """Run every cleaning stage over an in-memory working copy.

    Args:
        records: Working copy records.
        rules: Standardization rules.
        tie_break: Backfill tie-break policy.
        final_deduplication: Re-run deduplication before pruning.

    Returns:
        Cleaned records with per-stage reports.

    Raises:
        SiftTransformError: If any stage fails.
    """
    stages: list[tuple[str, StageFunction]] = [
        ("deduplication", remove_duplicates),
        ("standardization", lambda rows: standardize_records(rows, rules)),
        ("null_resolution", lambda rows: resolve_nulls(rows, tie_break)),
    ]
    if final_deduplication:
        stages.append(("final_deduplication", remove_duplicates))
    stages.append(("pruning", prune_unmeasured))
    current: tuple[LayoffRecord, ...] = tuple(records)
    reports: list[StageReport] = []
    for stage_name, stage_function in stages:
        output = _run_stage(stage_name, stage_function, current)
        report = StageReport(
            stage=stage_name,
            input_count=len(current),
            output_count=len(output),
            changed_count=_count_changed(current, output),
        )
        _log_stage(report)
        reports.append(report)
        current = output
    return CleaningResult(records=current, stage_reports=tuple(reports))


def _run_stage(
    stage_name: str,
    stage_function: StageFunction,
    records: tuple[LayoffRecord, ...],
) -> tuple[LayoffRecord, ...]:
    """Run one stage as an all-or-nothing step."""
    try:
        return tuple(stage_function(records))
    except SiftError:
        raise
    except Exception as error:
        raise SiftTransformError(
            f"Cleaning stage '{stage_name}' failed: {error}. "
            "No snapshot was written; fix the input or rules and rerun."
        ) from error


def _count_changed(
    before: tuple[LayoffRecord, ...],
    after: tuple[LayoffRecord, ...],
) -> int:
    """Count rewritten records for stages that keep record count."""
    if len(before) != len(after):
        return 0
    return sum(1 for old, new in zip(before, after) if old is not new)


def _log_stage(report: StageReport) -> None:
    _LOGGER.info(
        "stage_completed",
        stage=report.stage,
        input_count=report.input_count,
        output_count=report.output_count,
        dropped_count=report.dropped_count,
        changed_count=report.changed_count,
    )

"""Python SDK for dataset operations.

This module exposes high-level APIs for cleaning, loading, exporting,
and version inspection backed by the snapshot store.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Iterable

from core.cleaning_rules import load_cleaning_rules
from core.config import SiftConfig, parse_tie_break_policy
from core.types import (
    CleaningResult,
    CleanOptions,
    CsvExportRequest,
    LayoffRecord,
    RejectedRecord,
    SnapshotManifest,
    VersionExportRequest,
)
from ingest.pipeline import clean_dataset, clean_records
from ingest.working_copy import build_working_copy
from store.csv_export import export_records_csv
from store.snapshot_store import SnapshotStore


class SiftClient:
    """Primary SDK entry point for cleaning workflows."""

    def __init__(self, config: SiftConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or SiftConfig.from_env()
        self._store = SnapshotStore(self._config)

    def clean(self, options: CleanOptions) -> str:
        """Clean a source into a new dataset version.

        Args:
            options: Clean options.

        Returns:
            Created version id.

        Raises:
            SiftIngestError: If the source cannot be read.
            SiftTransformError: If a cleaning stage fails.
            SiftStoreError: If snapshot persistence fails.
        """
        return clean_dataset(options, self._config).version_id

    def clean_records(
        self,
        records: Iterable[LayoffRecord],
        rules_path: str | None = None,
        tie_break: str | None = None,
    ) -> CleaningResult:
        """Clean in-memory records without persisting a snapshot.

        Args:
            records: Records to clean.
            rules_path: Optional YAML rules file overriding config.
            tie_break: Optional backfill tie-break policy overriding config.

        Returns:
            Cleaned records with stage reports.
        """
        rules = load_cleaning_rules(rules_path or self._config.rules_path)
        policy = parse_tie_break_policy(tie_break or self._config.tie_break)
        return clean_records(build_working_copy(records), rules, tie_break=policy)

    def dataset(self, dataset_name: str) -> "Dataset":
        """Get dataset handle by name."""
        return Dataset(dataset_name, self._store)

    def with_data_root(self, data_root: str) -> "SiftClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        return SiftClient(replace(self._config, data_root=resolved_root))


class Dataset:
    """Dataset handle for loading and exporting snapshots."""

    def __init__(self, dataset_name: str, store: SnapshotStore) -> None:
        self._dataset_name = dataset_name
        self._store = store

    @property
    def name(self) -> str:
        """Dataset identifier."""
        return self._dataset_name

    def list_versions(self) -> list[SnapshotManifest]:
        """List snapshot manifests oldest first."""
        return self._store.list_versions(self._dataset_name)

    def manifest(self, version_id: str | None = None) -> SnapshotManifest:
        """Return a snapshot manifest, the latest when ``version_id`` is omitted."""
        return self._store.get_manifest(self._dataset_name, version_id)

    def load_records(self, version_id: str | None = None) -> list[LayoffRecord]:
        """Load cleaned records from a snapshot."""
        _, records = self._store.load_records(self._dataset_name, version_id)
        return records

    def rejections(self, version_id: str | None = None) -> list[RejectedRecord]:
        """Load source rows rejected while building a snapshot."""
        return self._store.load_rejections(self._dataset_name, version_id)

    def export_csv(self, output_path: str, version_id: str | None = None) -> Path:
        """Export a snapshot as a CSV table.

        Args:
            output_path: Destination CSV path.
            version_id: Optional version id; latest when omitted.

        Returns:
            Path of the written file.
        """
        request = CsvExportRequest(
            dataset_name=self._dataset_name,
            output_path=output_path,
            version_id=version_id,
        )
        _, records = self._store.load_records(request.dataset_name, request.version_id)
        return export_records_csv(request.output_path, records)

    def export_to_s3(self, output_uri: str, version_id: str | None = None) -> None:
        """Upload a snapshot version directory to S3."""
        manifest = self._store.get_manifest(self._dataset_name, version_id)
        self._store.export_version_to_s3(
            VersionExportRequest(
                dataset_name=self._dataset_name,
                version_id=manifest.version_id,
                output_uri=output_uri,
            )
        )

"""Snapshot store and metadata catalog.

This module persists immutable cleaned dataset versions with their
stage audit reports. It provides load, list, and export operations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

from core.config import SiftConfig
from core.constants import CATALOG_FILE_NAME, DATASETS_DIR_NAME, VERSIONS_DIR_NAME
from core.errors import SiftStoreError
from core.logging_config import get_logger
from core.s3_uri import S3Location, create_s3_client, parse_s3_uri
from core.types import (
    LayoffRecord,
    RejectedRecord,
    SnapshotManifest,
    SnapshotWriteRequest,
    VersionExportRequest,
)
from store.catalog_io import (
    build_version_id,
    manifest_from_dict,
    read_catalog_file,
    update_catalog,
    write_manifest_file,
)
from store.lance_dataset import (
    read_version_payload,
    read_version_rejections,
    write_version_payload,
)

_LOGGER = get_logger(__name__)


class SnapshotStore:
    """Immutable snapshot store implementation.

    This class owns dataset directories, version manifests,
    and catalog updates for cleaned datasets.
    """

    def __init__(self, config: SiftConfig) -> None:
        """Initialize snapshot store from config.

        Args:
            config: Runtime configuration.
        """
        self._config = config
        self._datasets_root = config.data_root / DATASETS_DIR_NAME
        self._datasets_root.mkdir(parents=True, exist_ok=True)

    def create_snapshot(self, request: SnapshotWriteRequest) -> SnapshotManifest:
        """Create a new immutable dataset snapshot.

        Args:
            request: Snapshot write request payload.

        Returns:
            Persisted snapshot manifest.

        Raises:
            SiftStoreError: If persistence fails.
        """
        result = request.result
        dataset_root = self._dataset_root(request.dataset_name)
        version_id = build_version_id(request.dataset_name, result.records)
        version_dir = dataset_root / VERSIONS_DIR_NAME / version_id
        version_dir.mkdir(parents=True, exist_ok=False)
        lance_written = write_version_payload(
            version_dir, list(result.records), list(result.rejections)
        )
        manifest = SnapshotManifest(
            dataset_name=request.dataset_name,
            version_id=version_id,
            created_at=datetime.now(timezone.utc),
            source_uri=request.source_uri,
            source_fingerprint=result.source_fingerprint,
            recipe_steps=tuple(report.stage for report in result.stage_reports),
            stage_reports=result.stage_reports,
            record_count=len(result.records),
            rejected_count=len(result.rejections),
        )
        write_manifest_file(version_dir, manifest, lance_written)
        update_catalog(dataset_root / CATALOG_FILE_NAME, manifest)
        _LOGGER.info(
            "snapshot_created",
            dataset_name=request.dataset_name,
            version_id=version_id,
            record_count=manifest.record_count,
            rejected_count=manifest.rejected_count,
            lance_written=lance_written,
        )
        return manifest

    def list_versions(self, dataset_name: str) -> list[SnapshotManifest]:
        """List manifests for a dataset sorted by creation time.

        Args:
            dataset_name: Dataset identifier.

        Returns:
            Ordered manifest list.

        Raises:
            SiftStoreError: If dataset catalog does not exist.
        """
        catalog_path = self._dataset_root(dataset_name) / CATALOG_FILE_NAME
        catalog = read_catalog_file(catalog_path)
        version_payloads = cast(list[dict[str, Any]], catalog["versions"])
        versions = [manifest_from_dict(item) for item in version_payloads]
        return sorted(versions, key=lambda item: item.created_at)

    def get_manifest(self, dataset_name: str, version_id: str | None = None) -> SnapshotManifest:
        """Resolve one manifest, the latest when ``version_id`` is omitted.

        Raises:
            SiftStoreError: If catalog or target version is missing.
        """
        manifests = self.list_versions(dataset_name)
        if not manifests:
            raise SiftStoreError(
                f"No versions exist for dataset '{dataset_name}'. "
                "Run clean before reading snapshots."
            )
        if version_id is None:
            return manifests[-1]
        for manifest in manifests:
            if manifest.version_id == version_id:
                return manifest
        raise SiftStoreError(
            f"Version '{version_id}' not found for dataset '{dataset_name}'. "
            "Use list_versions to discover valid version ids."
        )

    def load_records(
        self,
        dataset_name: str,
        version_id: str | None = None,
    ) -> tuple[SnapshotManifest, list[LayoffRecord]]:
        """Load cleaned records for a dataset snapshot.

        Args:
            dataset_name: Dataset identifier.
            version_id: Optional snapshot version; latest when omitted.

        Returns:
            Pair of manifest and loaded records.

        Raises:
            SiftStoreError: If dataset/version is missing.
        """
        manifest = self.get_manifest(dataset_name, version_id)
        version_dir = self._version_dir(dataset_name, manifest.version_id)
        return manifest, read_version_payload(version_dir)

    def load_rejections(
        self,
        dataset_name: str,
        version_id: str | None = None,
    ) -> list[RejectedRecord]:
        """Load rejected source rows stored with a snapshot."""
        manifest = self.get_manifest(dataset_name, version_id)
        version_dir = self._version_dir(dataset_name, manifest.version_id)
        return read_version_rejections(version_dir)

    def export_version_to_s3(self, request: VersionExportRequest) -> None:
        """Export a version directory to S3.

        Args:
            request: Export request payload.

        Raises:
            SiftStoreError: If export fails.
        """
        location = parse_s3_uri(request.output_uri, SiftStoreError)
        version_dir = self._version_dir(request.dataset_name, request.version_id)
        s3_client = create_s3_client(self._config, "export versions to s3:// destinations")
        _upload_directory(s3_client, version_dir, location)
        _LOGGER.info(
            "snapshot_exported",
            dataset_name=request.dataset_name,
            version_id=request.version_id,
            output_uri=request.output_uri,
        )

    def _dataset_root(self, dataset_name: str) -> Path:
        """Return dataset root path and ensure base directories."""
        dataset_root = self._datasets_root / dataset_name
        (dataset_root / VERSIONS_DIR_NAME).mkdir(parents=True, exist_ok=True)
        return dataset_root

    def _version_dir(self, dataset_name: str, version_id: str) -> Path:
        """Return snapshot version directory.

        Raises:
            SiftStoreError: If version directory is missing.
        """
        version_dir = self._dataset_root(dataset_name) / VERSIONS_DIR_NAME / version_id
        if not version_dir.exists():
            raise SiftStoreError(
                f"Missing snapshot directory for {dataset_name}:{version_id} at {version_dir}. "
                "Recreate the snapshot before loading or exporting."
            )
        return version_dir


def _upload_directory(s3_client: Any, version_dir: Path, location: S3Location) -> None:
    """Upload all version files to S3.

    Raises:
        SiftStoreError: If upload fails.
    """
    for local_file in sorted(version_dir.rglob("*")):
        if not local_file.is_file():
            continue
        relative_path = local_file.relative_to(version_dir)
        object_key = location.child_key(relative_path.as_posix())
        try:
            s3_client.upload_file(str(local_file), location.bucket, object_key)
        except Exception as error:
            raise SiftStoreError(
                f"Failed to export snapshot file {local_file} to {location.object_uri(object_key)}: "
                f"{error}. Check AWS credentials and retry export."
            ) from error

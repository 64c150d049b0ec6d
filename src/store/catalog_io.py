"""Catalog and manifest persistence helpers.

This module isolates JSON catalog IO and version id generation.
It keeps snapshot store orchestration focused on business flow.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

from core.constants import HASH_ALGORITHM, MANIFEST_FILE_NAME
from core.errors import SiftStoreError
from core.types import LayoffRecord, SnapshotManifest, StageReport


def build_version_id(dataset_name: str, records: tuple[LayoffRecord, ...]) -> str:
    """Build a version id from dataset name, timestamp, and record digest.

    Args:
        dataset_name: Dataset identifier.
        records: Snapshot records.

    Returns:
        Version id string.
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    hasher = hashlib.new(HASH_ALGORITHM)
    for record in records:
        hasher.update(repr(record.field_tuple()).encode("utf-8"))
    return f"{dataset_name}-{timestamp}-{hasher.hexdigest()[:10]}"


def manifest_to_dict(manifest: SnapshotManifest) -> dict[str, Any]:
    """Serialize a manifest into a JSON-safe dictionary."""
    return {
        "dataset_name": manifest.dataset_name,
        "version_id": manifest.version_id,
        "created_at": manifest.created_at.isoformat(),
        "source_uri": manifest.source_uri,
        "source_fingerprint": manifest.source_fingerprint,
        "recipe_steps": list(manifest.recipe_steps),
        "stage_reports": [
            {
                "stage": report.stage,
                "input_count": report.input_count,
                "output_count": report.output_count,
                "changed_count": report.changed_count,
            }
            for report in manifest.stage_reports
        ],
        "record_count": manifest.record_count,
        "rejected_count": manifest.rejected_count,
    }


def manifest_from_dict(payload: dict[str, Any]) -> SnapshotManifest:
    """Deserialize manifest payload from dictionary.

    Args:
        payload: Manifest dictionary.

    Returns:
        Typed snapshot manifest.
    """
    report_rows = cast(list[dict[str, Any]], payload.get("stage_reports", []))
    return SnapshotManifest(
        dataset_name=str(payload["dataset_name"]),
        version_id=str(payload["version_id"]),
        created_at=datetime.fromisoformat(str(payload["created_at"])),
        source_uri=str(payload.get("source_uri", "")),
        source_fingerprint=str(payload.get("source_fingerprint", "")),
        recipe_steps=tuple(str(step) for step in payload["recipe_steps"]),
        stage_reports=tuple(
            StageReport(
                stage=str(row["stage"]),
                input_count=int(row["input_count"]),
                output_count=int(row["output_count"]),
                changed_count=int(row.get("changed_count", 0)),
            )
            for row in report_rows
        ),
        record_count=int(payload["record_count"]),
        rejected_count=int(payload.get("rejected_count", 0)),
    )


def write_manifest_file(version_dir: Path, manifest: SnapshotManifest, lance_written: bool) -> None:
    """Write per-version manifest file.

    Args:
        version_dir: Snapshot version directory.
        manifest: Manifest payload.
        lance_written: Whether a Lance dataset was created.
    """
    manifest_dict = manifest_to_dict(manifest)
    manifest_dict["lance_written"] = lance_written
    manifest_path = version_dir / MANIFEST_FILE_NAME
    manifest_path.write_text(json.dumps(manifest_dict, indent=2) + "\n", encoding="utf-8")


def update_catalog(catalog_path: Path, manifest: SnapshotManifest) -> None:
    """Append manifest entry to dataset catalog.

    Args:
        catalog_path: Catalog JSON path.
        manifest: Manifest to append.
    """
    if catalog_path.exists():
        catalog = read_catalog_file(catalog_path)
    else:
        catalog = {"latest_version": None, "versions": []}
    versions = cast(list[dict[str, Any]], catalog["versions"])
    versions.append(manifest_to_dict(manifest))
    catalog["latest_version"] = manifest.version_id
    catalog_path.write_text(json.dumps(catalog, indent=2) + "\n", encoding="utf-8")


def read_catalog_file(catalog_path: Path) -> dict[str, Any]:
    """Read and validate dataset catalog payload.

    Args:
        catalog_path: Catalog JSON path.

    Returns:
        Parsed catalog object.

    Raises:
        SiftStoreError: If catalog is missing or invalid.
    """
    if not catalog_path.exists():
        raise SiftStoreError(
            f"Dataset catalog not found at {catalog_path}. "
            "Run clean before requesting versions."
        )
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise SiftStoreError(
            f"Failed to parse dataset catalog at {catalog_path}: {error.msg}. "
            "Recreate the dataset catalog from source snapshots."
        ) from error
    if not isinstance(payload, dict):
        raise SiftStoreError(
            f"Failed to parse dataset catalog at {catalog_path}: "
            "expected JSON object at top level. Recreate the catalog."
        )
    return payload

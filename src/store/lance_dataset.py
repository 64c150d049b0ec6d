"""Snapshot payload persistence helpers.

This module writes cleaned records to JSONL and, when available, to an
Apache Lance dataset. JSONL stays the source of truth for loading.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import LANCE_DIR_NAME, RECORDS_FILE_NAME, REJECTIONS_FILE_NAME
from core.errors import SiftStoreError
from core.types import LayoffRecord, RejectedRecord
from store.record_payload import (
    layoff_record_from_payload,
    layoff_record_to_payload,
    read_jsonl,
    rejected_record_from_payload,
    rejected_record_to_payload,
    write_jsonl,
)


def write_version_payload(
    version_dir: Path,
    records: list[LayoffRecord],
    rejections: list[RejectedRecord],
) -> bool:
    """Persist snapshot records and attempt Lance conversion.

    Args:
        version_dir: Snapshot version directory.
        records: Cleaned records to persist.
        rejections: Rejected source rows to persist alongside.

    Returns:
        ``True`` when Lance export succeeded, else ``False``.

    Raises:
        SiftStoreError: If JSONL persistence fails.
    """
    records_path = version_dir / RECORDS_FILE_NAME
    rejections_path = version_dir / REJECTIONS_FILE_NAME
    try:
        write_jsonl(records_path, [layoff_record_to_payload(record) for record in records])
        write_jsonl(
            rejections_path,
            [rejected_record_to_payload(rejection) for rejection in rejections],
        )
    except OSError as error:
        raise SiftStoreError(
            f"Failed to persist snapshot payload at {version_dir}: {error}. "
            "Check write permissions and available disk space."
        ) from error
    return _try_write_lance_dataset(version_dir, records)


def read_version_payload(version_dir: Path) -> list[LayoffRecord]:
    """Load snapshot records from the JSONL file.

    Args:
        version_dir: Snapshot version directory.

    Returns:
        Parsed records in persisted order.

    Raises:
        SiftStoreError: If records file is missing or invalid.
    """
    payloads = _read_payloads(version_dir, RECORDS_FILE_NAME)
    return [layoff_record_from_payload(payload) for payload in payloads]


def read_version_rejections(version_dir: Path) -> list[RejectedRecord]:
    """Load rejection diagnostics stored with a snapshot."""
    payloads = _read_payloads(version_dir, REJECTIONS_FILE_NAME)
    return [rejected_record_from_payload(payload) for payload in payloads]


def _read_payloads(version_dir: Path, file_name: str) -> list[dict[str, object]]:
    payload_path = version_dir / file_name
    if not payload_path.exists():
        raise SiftStoreError(f"Failed to load snapshot at {version_dir}: missing {file_name}.")
    try:
        return read_jsonl(payload_path)
    except ValueError as error:
        raise SiftStoreError(
            f"Failed to parse snapshot payload at {payload_path}: {error}. "
            "Recreate the dataset snapshot."
        ) from error


def _try_write_lance_dataset(version_dir: Path, records: list[LayoffRecord]) -> bool:
    """Attempt to write records to Apache Lance.

    Args:
        version_dir: Snapshot version directory.
        records: Snapshot records.

    Returns:
        Whether Lance export succeeded.
    """
    if not records:
        return False
    try:
        import lance
        import pyarrow as pa
    except ImportError:
        return False

    table = pa.table(
        {
            "company": pa.array([record.company for record in records], pa.string()),
            "location": pa.array([record.location for record in records], pa.string()),
            "industry": pa.array([record.industry for record in records], pa.string()),
            "total_laid_off": pa.array([record.total_laid_off for record in records], pa.int64()),
            "percentage_laid_off": pa.array(
                [record.percentage_laid_off for record in records], pa.float64()
            ),
            "event_date": pa.array([record.event_date for record in records], pa.date32()),
            "stage": pa.array([record.stage for record in records], pa.string()),
            "country": pa.array([record.country for record in records], pa.string()),
            "funds_raised_millions": pa.array(
                [record.funds_raised_millions for record in records], pa.float64()
            ),
        }
    )
    lance_uri = str(version_dir / LANCE_DIR_NAME)
    try:
        lance.write_dataset(table, lance_uri, mode="overwrite")
    except Exception as error:
        raise SiftStoreError(
            f"Failed to write Lance dataset at {lance_uri}: {error}. "
            "Validate lance/pyarrow compatibility and retry clean."
        ) from error
    return True

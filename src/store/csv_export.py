"""CSV export helpers for cleaned snapshots.

This module writes snapshot records as a nine-column CSV table so
downstream reporting tools can consume the cleaned dataset directly.
"""

from __future__ import annotations

import csv
from pathlib import Path

from core.constants import LAYOFF_FIELDS
from core.errors import SiftStoreError
from core.types import LayoffRecord
from store.record_payload import layoff_record_to_payload


def export_records_csv(output_path: str, records: list[LayoffRecord]) -> Path:
    """Write records to a CSV file with the layoff schema header.

    Absent values are written as empty cells.

    Args:
        output_path: Destination file path.
        records: Records to export.

    Returns:
        Resolved path of the written file.

    Raises:
        SiftStoreError: If the file cannot be written.
    """
    destination = Path(output_path).expanduser().resolve()
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=list(LAYOFF_FIELDS))
            writer.writeheader()
            for record in records:
                payload = layoff_record_to_payload(record)
                writer.writerow({key: "" if value is None else value for key, value in payload.items()})
    except OSError as error:
        raise SiftStoreError(
            f"Failed to export CSV to {destination}: {error}. "
            "Check write permissions and retry export."
        ) from error
    return destination

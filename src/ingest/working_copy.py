"""Working copy construction for the cleaning pipeline.

This module reads the source once and hands later stages an
independent, immutable copy. The source itself is never written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from core.config import SiftConfig
from core.logging_config import get_logger
from core.types import LayoffRecord, RejectedRecord
from ingest.input_reader import read_source_rows
from ingest.record_parser import fingerprint_source, parse_rows

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class WorkingCopy:
    """Immutable working copy of a source table.

    Attributes:
        records: Parsed records in source order.
        rejections: Malformed rows left out of the copy.
        source_row_count: Number of raw rows read from the source.
        source_fingerprint: Digest of the raw source rows.
    """

    records: tuple[LayoffRecord, ...]
    rejections: tuple[RejectedRecord, ...]
    source_row_count: int
    source_fingerprint: str


def build_working_copy(records: Iterable[LayoffRecord]) -> tuple[LayoffRecord, ...]:
    """Copy records into an independent immutable sequence.

    Args:
        records: Source records.

    Returns:
        Tuple holding the same records in the same order.
    """
    return tuple(records)


def load_working_copy(source_uri: str, config: SiftConfig, on_malformed: str) -> WorkingCopy:
    """Read, parse, and copy a source table.

    Args:
        source_uri: Local path or ``s3://`` URI.
        config: Runtime configuration.
        on_malformed: Malformed-row policy.

    Returns:
        Working copy with rejection diagnostics.

    Raises:
        SiftIngestError: If the source is unavailable or a row aborts the run.
    """
    rows = read_source_rows(source_uri, config)
    outcome = parse_rows(rows, on_malformed=on_malformed)
    _LOGGER.info(
        "source_loaded",
        source_uri=source_uri,
        row_count=len(rows),
        record_count=len(outcome.records),
    )
    if outcome.rejections:
        _LOGGER.warning(
            "records_rejected",
            source_uri=source_uri,
            rejected_count=len(outcome.rejections),
            first_reason=outcome.rejections[0].reason,
        )
    return WorkingCopy(
        records=build_working_copy(outcome.records),
        rejections=outcome.rejections,
        source_row_count=len(rows),
        source_fingerprint=fingerprint_source(rows),
    )

"""Shared JSONL serialization for layoff record payloads.

This module centralizes LayoffRecord and RejectedRecord JSON logic.
It is reused by snapshot persistence, snapshot loading, and exports.
"""

from __future__ import annotations

from datetime import date
import json
from pathlib import Path
from typing import Any

from core.types import LayoffRecord, RejectedRecord


def layoff_record_to_payload(record: LayoffRecord) -> dict[str, object]:
    """Serialize LayoffRecord into JSON-safe payload.

    Args:
        record: Layoff record instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "company": record.company,
        "location": record.location,
        "industry": record.industry,
        "total_laid_off": record.total_laid_off,
        "percentage_laid_off": record.percentage_laid_off,
        "event_date": record.event_date.isoformat() if record.event_date else None,
        "stage": record.stage,
        "country": record.country,
        "funds_raised_millions": record.funds_raised_millions,
    }


def layoff_record_from_payload(payload: dict[str, Any]) -> LayoffRecord:
    """Deserialize JSON payload into LayoffRecord.

    Args:
        payload: Serialized record payload.

    Returns:
        Parsed LayoffRecord.
    """
    raw_date = payload.get("event_date")
    return LayoffRecord(
        company=str(payload["company"]),
        location=_optional_str(payload.get("location")),
        industry=_optional_str(payload.get("industry")),
        total_laid_off=_optional_int(payload.get("total_laid_off")),
        percentage_laid_off=_optional_float(payload.get("percentage_laid_off")),
        event_date=date.fromisoformat(str(raw_date)) if raw_date else None,
        stage=_optional_str(payload.get("stage")),
        country=_optional_str(payload.get("country")),
        funds_raised_millions=_optional_float(payload.get("funds_raised_millions")),
    )


def rejected_record_to_payload(rejection: RejectedRecord) -> dict[str, object]:
    """Serialize a rejection diagnostic into JSON-safe payload."""
    return {
        "source_uri": rejection.source_uri,
        "line_number": rejection.line_number,
        "field_name": rejection.field_name,
        "raw_value": rejection.raw_value,
        "reason": rejection.reason,
    }


def rejected_record_from_payload(payload: dict[str, Any]) -> RejectedRecord:
    """Deserialize a rejection diagnostic payload."""
    return RejectedRecord(
        source_uri=str(payload.get("source_uri", "")),
        line_number=int(payload.get("line_number", 0)),
        field_name=str(payload.get("field_name", "")),
        raw_value=str(payload.get("raw_value", "")),
        reason=str(payload.get("reason", "")),
    )


def write_jsonl(records_path: Path, payloads: list[dict[str, object]]) -> None:
    """Write payload dictionaries to a JSONL file.

    Args:
        records_path: Output JSONL file path.
        payloads: JSON-safe payloads.
    """
    lines = [json.dumps(payload, sort_keys=True) for payload in payloads]
    body = "\n".join(lines) + "\n" if lines else ""
    records_path.write_text(body, encoding="utf-8")


def read_jsonl(records_path: Path) -> list[dict[str, Any]]:
    """Read payload dictionaries from a JSONL file.

    Args:
        records_path: Input JSONL file path.

    Returns:
        Parsed payloads.

    Raises:
        ValueError: If JSONL rows are invalid.
    """
    payloads: list[dict[str, Any]] = []
    for line_number, line in enumerate(records_path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            continue
        payloads.append(_parse_payload_line(line, line_number))
    return payloads


def _parse_payload_line(line: str, line_number: int) -> dict[str, Any]:
    """Parse and validate one JSONL payload row.

    Raises:
        ValueError: If JSON row is invalid.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON at line {line_number}: {error.msg}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid payload at line {line_number}: expected JSON object")
    return payload


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def _optional_int(value: object) -> int | None:
    return None if value is None else int(str(value))


def _optional_float(value: object) -> float | None:
    return None if value is None else float(str(value))

"""Raw row parsing into typed layoff records.

This module converts untyped source rows into immutable records.
Rows that cannot be converted become rejection diagnostics instead
of aborting the batch, unless the caller asks to abort.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
import hashlib
import json
import math
from typing import Iterable

from core.constants import DATE_FORMATS, HASH_ALGORITHM, LAYOFF_FIELDS, NULL_TOKENS
from core.errors import SiftIngestError
from core.types import LayoffRecord, RawRow, RejectedRecord


@dataclass(frozen=True)
class ParseOutcome:
    """Parsed records and the rows rejected along the way."""

    records: tuple[LayoffRecord, ...]
    rejections: tuple[RejectedRecord, ...]


class _FieldError(ValueError):
    """Internal signal for one invalid field value."""

    def __init__(self, field_name: str, raw_value: object, reason: str) -> None:
        super().__init__(reason)
        self.field_name = field_name
        self.raw_value = raw_value
        self.reason = reason


def parse_rows(rows: Iterable[RawRow], on_malformed: str = "reject") -> ParseOutcome:
    """Parse raw rows into layoff records.

    Args:
        rows: Raw source rows in source order.
        on_malformed: ``reject`` to collect diagnostics, ``abort`` to raise.

    Returns:
        Parsed records with rejection diagnostics.

    Raises:
        SiftIngestError: If a row is malformed and ``on_malformed`` is ``abort``.
    """
    records: list[LayoffRecord] = []
    rejections: list[RejectedRecord] = []
    for row in rows:
        try:
            records.append(_parse_row(row))
        except _FieldError as error:
            rejection = RejectedRecord(
                source_uri=row.source_uri,
                line_number=row.line_number,
                field_name=error.field_name,
                raw_value=_render_raw(error.raw_value),
                reason=error.reason,
            )
            if on_malformed == "abort":
                raise SiftIngestError(
                    f"Malformed record at {row.source_uri}:{row.line_number}: "
                    f"field '{error.field_name}' {error.reason}. "
                    "Fix the source row or rerun with --on-malformed reject."
                ) from error
            rejections.append(rejection)
    return ParseOutcome(records=tuple(records), rejections=tuple(rejections))


def _parse_row(row: RawRow) -> LayoffRecord:
    """Parse one raw row.

    Raises:
        _FieldError: If any field value is invalid.
    """
    if row.extra_values:
        raise _FieldError("row", row.extra_values, "has more values than header columns")
    if row.missing_fields:
        raise _FieldError(row.missing_fields[0], None, "is missing from the record")
    values = row.values
    company = _parse_text(values.get("company"))
    if company is None or not company.strip():
        raise _FieldError("company", values.get("company"), "is required")
    total_laid_off = _parse_int(values.get("total_laid_off"), "total_laid_off")
    if total_laid_off is not None and total_laid_off < 0:
        raise _FieldError("total_laid_off", values.get("total_laid_off"), "must be non-negative")
    percentage = _parse_float(values.get("percentage_laid_off"), "percentage_laid_off")
    if percentage is not None and not 0.0 <= percentage <= 1.0:
        raise _FieldError(
            "percentage_laid_off", values.get("percentage_laid_off"), "must be within [0, 1]"
        )
    return LayoffRecord(
        company=company,
        location=_parse_text(values.get("location")),
        industry=_parse_text(values.get("industry")),
        total_laid_off=total_laid_off,
        percentage_laid_off=percentage,
        event_date=_parse_date(values.get("event_date")),
        stage=_parse_text(values.get("stage")),
        country=_parse_text(values.get("country")),
        funds_raised_millions=_parse_float(
            values.get("funds_raised_millions"), "funds_raised_millions"
        ),
    )


def fingerprint_source(rows: Iterable[RawRow]) -> str:
    """Build a stable digest over raw row values.

    Args:
        rows: Raw source rows.

    Returns:
        Hex digest identifying the source content.
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    for row in rows:
        ordered = [_render_raw(row.values.get(name)) for name in LAYOFF_FIELDS]
        hasher.update(json.dumps(ordered).encode("utf-8"))
        hasher.update(b"\n")
    return hasher.hexdigest()


def _is_null(raw_value: object) -> bool:
    if raw_value is None:
        return True
    if isinstance(raw_value, float) and raw_value != raw_value:
        return True
    return isinstance(raw_value, str) and raw_value.strip() in NULL_TOKENS


def _is_absent(raw_value: object) -> bool:
    return _is_null(raw_value) or (isinstance(raw_value, str) and not raw_value.strip())


def _parse_text(raw_value: object) -> str | None:
    # Blank text stays "" so the null resolver can treat it as a sentinel.
    if _is_null(raw_value):
        return None
    return str(raw_value)


def _parse_int(raw_value: object, field_name: str) -> int | None:
    if _is_absent(raw_value):
        return None
    if isinstance(raw_value, bool):
        raise _FieldError(field_name, raw_value, "must be an integer")
    if isinstance(raw_value, int):
        return raw_value
    try:
        number = float(str(raw_value).strip())
    except ValueError as error:
        raise _FieldError(field_name, raw_value, "must be an integer") from error
    if not math.isfinite(number) or not number.is_integer():
        raise _FieldError(field_name, raw_value, "must be a whole number")
    return int(number)


def _parse_float(raw_value: object, field_name: str) -> float | None:
    if _is_absent(raw_value):
        return None
    if isinstance(raw_value, bool):
        raise _FieldError(field_name, raw_value, "must be numeric")
    try:
        number = float(str(raw_value).strip())
    except ValueError as error:
        raise _FieldError(field_name, raw_value, "must be numeric") from error
    if not math.isfinite(number):
        raise _FieldError(field_name, raw_value, "must be a finite number")
    return number


def _parse_date(raw_value: object) -> date | None:
    if _is_absent(raw_value):
        return None
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    text = str(raw_value).strip()
    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue
    raise _FieldError(
        "event_date", raw_value, f"must match one of {', '.join(DATE_FORMATS)}"
    )


def _render_raw(raw_value: object) -> str:
    if raw_value is None:
        return ""
    if isinstance(raw_value, (date, datetime)):
        return raw_value.isoformat()
    if isinstance(raw_value, tuple):
        return ",".join(_render_raw(value) for value in raw_value)
    return str(raw_value)

"""Source table readers for ingestion.

This module loads raw layoff rows from local paths or S3 objects.
It validates the column header and yields untyped rows for parsing.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from core.config import SiftConfig
from core.constants import LAYOFF_FIELDS, SOURCE_FIELD_ALIASES, SUPPORTED_SOURCE_EXTENSIONS
from core.errors import SiftDependencyError, SiftIngestError
from core.s3_uri import S3Location, create_s3_client, is_s3_uri, parse_s3_uri
from core.types import RawRow


def read_source_rows(source_uri: str, config: SiftConfig) -> list[RawRow]:
    """Load raw rows from local files or S3.

    Args:
        source_uri: Local file, local directory, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Ordered list of raw rows.

    Raises:
        SiftIngestError: If the source cannot be read or has a bad header.
    """
    if is_s3_uri(source_uri):
        return _read_s3_rows(source_uri, config)
    return _read_local_rows(Path(source_uri).expanduser())


def _read_local_rows(source_path: Path) -> list[RawRow]:
    """Read rows from the local file system.

    Args:
        source_path: Input file or directory.

    Returns:
        Collected raw rows.

    Raises:
        SiftIngestError: If path is missing or holds no supported files.
    """
    if not source_path.exists():
        raise SiftIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return _read_file_rows(source_path)
    rows: list[RawRow] = []
    found_file = False
    for file_path in sorted(source_path.rglob("*")):
        if file_path.is_file() and _is_supported_name(file_path.name):
            found_file = True
            rows.extend(_read_file_rows(file_path))
    if not found_file:
        raise SiftIngestError(
            f"No readable source tables found under {source_path}. "
            f"Supported extensions: {SUPPORTED_SOURCE_EXTENSIONS}."
        )
    return rows


def _read_file_rows(file_path: Path) -> list[RawRow]:
    """Read rows from a single local file.

    Args:
        file_path: Path to a CSV, JSONL, or Parquet file.

    Returns:
        Raw rows in file order.

    Raises:
        SiftIngestError: If the extension is unsupported or the file is unreadable.
    """
    if not _is_supported_name(file_path.name):
        raise SiftIngestError(
            f"Unsupported source file {file_path}. "
            f"Supported extensions: {SUPPORTED_SOURCE_EXTENSIONS}."
        )
    if file_path.suffix.lower() == ".parquet":
        return _rows_from_parquet(str(file_path), file_path)
    try:
        body = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as error:
        raise SiftIngestError(
            f"Failed to read source at {file_path}: {error}. Check the file and retry."
        ) from error
    return _rows_from_text_body(str(file_path), file_path.name, body)


def _rows_from_text_body(source_uri: str, name: str, body: str) -> list[RawRow]:
    """Parse a text body into rows based on its extension.

    Args:
        source_uri: Fully-qualified source path or URI.
        name: File name or object key for extension detection.
        body: Decoded text content.

    Returns:
        Parsed raw rows.
    """
    if name.lower().endswith(".jsonl"):
        return _rows_from_jsonl(source_uri, body)
    return _rows_from_csv(source_uri, body)


def _rows_from_csv(source_uri: str, body: str) -> list[RawRow]:
    """Parse CSV text with a header line.

    Args:
        source_uri: Source path or URI for diagnostics.
        body: CSV text.

    Returns:
        Raw rows keyed by canonical field names.

    Raises:
        SiftIngestError: If the header is missing or invalid.
    """
    reader = csv.DictReader(io.StringIO(body, newline=""))
    if reader.fieldnames is None:
        raise SiftIngestError(
            f"Source {source_uri} is empty. Provide a CSV with a header row."
        )
    column_map = _build_column_map(source_uri, reader.fieldnames)
    rows: list[RawRow] = []
    for row_number, row in enumerate(reader, 1):
        extra_values = tuple(row.pop(None, None) or ())
        rows.append(
            RawRow(
                source_uri=source_uri,
                line_number=row_number,
                values=_rename_columns(row, column_map),
                extra_values=extra_values,
            )
        )
    return rows


def _rows_from_jsonl(source_uri: str, body: str) -> list[RawRow]:
    """Parse JSONL text, one object per line.

    Args:
        source_uri: Source path or URI for diagnostics.
        body: JSONL text.

    Returns:
        Raw rows keyed by canonical field names.

    Raises:
        SiftIngestError: If a line is not a JSON object or carries unknown keys.
    """
    rows: list[RawRow] = []
    for line_number, line in enumerate(body.splitlines(), 1):
        if not line.strip():
            continue
        payload = _parse_jsonl_line(source_uri, line, line_number)
        column_map = _build_column_map(
            f"{source_uri}:{line_number}", list(payload), allow_missing=True
        )
        values = _rename_columns(payload, column_map)
        rows.append(
            RawRow(
                source_uri=source_uri,
                line_number=line_number,
                values=values,
                missing_fields=tuple(name for name in LAYOFF_FIELDS if name not in values),
            )
        )
    return rows


def _parse_jsonl_line(source_uri: str, line: str, line_number: int) -> dict[str, Any]:
    """Parse and validate a JSONL row.

    Raises:
        SiftIngestError: If line is invalid.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise SiftIngestError(
            f"Failed to parse JSONL record at {source_uri}:{line_number}: "
            f"{error.msg}. Fix the JSON syntax and retry."
        ) from error
    if not isinstance(payload, dict):
        raise SiftIngestError(
            f"Invalid JSONL record at {source_uri}:{line_number}: "
            "expected a JSON object per line."
        )
    return payload


def _rows_from_parquet(source_uri: str, source: Any) -> list[RawRow]:
    """Read rows from a Parquet file or buffer with pyarrow.

    Args:
        source_uri: Source path or URI for diagnostics.
        source: Local path or binary buffer accepted by pyarrow.

    Returns:
        Raw rows keyed by canonical field names.

    Raises:
        SiftDependencyError: If pyarrow is missing.
        SiftIngestError: If the file cannot be decoded.
    """
    try:
        import pyarrow.parquet as pq
    except ImportError as error:
        raise SiftDependencyError(
            "Parquet sources require pyarrow, but it is not installed. "
            "Install pyarrow or convert the source to CSV."
        ) from error
    try:
        table = pq.read_table(source)
    except (OSError, ValueError) as error:
        raise SiftIngestError(
            f"Failed to read Parquet source at {source_uri}: {error}."
        ) from error
    column_map = _build_column_map(source_uri, table.column_names)
    return [
        RawRow(
            source_uri=source_uri,
            line_number=row_number,
            values=_rename_columns(row, column_map),
        )
        for row_number, row in enumerate(table.to_pylist(), 1)
    ]


def _build_column_map(
    source_uri: str,
    column_names: Iterable[str],
    allow_missing: bool = False,
) -> dict[str, str]:
    """Map source column names onto canonical field names.

    Args:
        source_uri: Source path or URI for diagnostics.
        column_names: Column names as found in the source.
        allow_missing: Leave absent fields to the row parser instead of failing.

    Returns:
        Source column name to canonical field name mapping.

    Raises:
        SiftIngestError: If columns are missing or unknown.
    """
    column_map: dict[str, str] = {}
    for column_name in column_names:
        normalized = column_name.strip().lower()
        column_map[column_name] = SOURCE_FIELD_ALIASES.get(normalized, normalized)
    mapped_fields = set(column_map.values())
    missing_fields = [] if allow_missing else [
        name for name in LAYOFF_FIELDS if name not in mapped_fields
    ]
    unknown_fields = sorted(mapped_fields - set(LAYOFF_FIELDS))
    if missing_fields or unknown_fields:
        raise SiftIngestError(
            f"Source {source_uri} does not match the layoff schema: "
            f"missing columns {missing_fields or '-'}, unknown columns {unknown_fields or '-'}. "
            f"Expected columns: {', '.join(LAYOFF_FIELDS)}."
        )
    return column_map


def _rename_columns(row: Mapping[str, object], column_map: dict[str, str]) -> dict[str, object]:
    """Return a row keyed by canonical field names."""
    return {column_map[name]: value for name, value in row.items()}


def _read_s3_rows(source_uri: str, config: SiftConfig) -> list[RawRow]:
    """Read rows from S3 objects under a key or prefix.

    Args:
        source_uri: S3 object or prefix URI.
        config: Runtime configuration for region/profile.

    Returns:
        Raw rows loaded from objects.

    Raises:
        SiftIngestError: If S3 read fails or no tables are found.
    """
    location = parse_s3_uri(source_uri, SiftIngestError)
    s3_client = create_s3_client(config, "clean s3:// sources")
    object_keys = _list_s3_keys(s3_client, location)
    if not object_keys:
        raise SiftIngestError(
            f"No readable source tables found for {source_uri}. "
            "Upload .csv/.jsonl/.parquet files and retry."
        )
    rows: list[RawRow] = []
    for key in object_keys:
        object_uri = location.object_uri(key)
        body = _read_s3_object(s3_client, location.bucket, key, object_uri)
        if key.lower().endswith(".parquet"):
            rows.extend(_rows_from_parquet(object_uri, io.BytesIO(body)))
            continue
        try:
            text = body.decode("utf-8-sig")
        except UnicodeDecodeError as error:
            raise SiftIngestError(
                f"Failed to read source at {object_uri}: {error}. Check the file and retry."
            ) from error
        rows.extend(_rows_from_text_body(object_uri, key, text))
    return rows


def _read_s3_object(s3_client: Any, bucket: str, key: str, object_uri: str) -> bytes:
    """Download one S3 object body.

    Raises:
        SiftIngestError: If the object cannot be fetched.
    """
    try:
        return s3_client.get_object(Bucket=bucket, Key=key)["Body"].read()
    except Exception as error:
        raise SiftIngestError(
            f"Failed to read source at {object_uri}: {error}. "
            "Check AWS credentials and object permissions."
        ) from error


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List supported object keys under an S3 prefix.

    Args:
        s3_client: Boto3 S3 client.
        location: Target bucket/prefix.

    Returns:
        Sorted keys matching supported extensions.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.key)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if _is_supported_name(key):
                keys.append(key)
    return sorted(keys)


def _is_supported_name(name: str) -> bool:
    """Return whether a file name or object key extension is supported."""
    return Path(name).suffix.lower() in SUPPORTED_SOURCE_EXTENSIONS

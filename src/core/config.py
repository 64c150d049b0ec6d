"""Runtime configuration model for Sift.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_MALFORMED_POLICY,
    DEFAULT_TIE_BREAK_POLICY,
    MALFORMED_POLICIES,
    TIE_BREAK_POLICIES,
)
from core.errors import SiftConfigError


@dataclass(frozen=True)
class SiftConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for catalogs and snapshots.
        rules_path: Optional YAML cleaning rules file.
        on_malformed: ``reject`` to collect bad rows, ``abort`` to fail.
        tie_break: Policy for ambiguous industry backfill.
        s3_region: Optional default AWS region for S3 operations.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    rules_path: Path | None
    on_malformed: str
    tie_break: str
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "SiftConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SiftConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("SIFT_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        rules_path_value = os.getenv("SIFT_RULES_PATH")
        on_malformed = parse_malformed_policy(
            os.getenv("SIFT_ON_MALFORMED", DEFAULT_MALFORMED_POLICY)
        )
        tie_break = parse_tie_break_policy(os.getenv("SIFT_TIE_BREAK", DEFAULT_TIE_BREAK_POLICY))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            rules_path=Path(rules_path_value).expanduser() if rules_path_value else None,
            on_malformed=on_malformed,
            tie_break=tie_break,
            s3_region=os.getenv("SIFT_S3_REGION"),
            s3_profile=os.getenv("SIFT_S3_PROFILE"),
        )


def parse_malformed_policy(raw_value: str) -> str:
    """Validate the malformed-record policy value.

    Args:
        raw_value: Raw policy string from environment or CLI.

    Returns:
        Normalized policy name.

    Raises:
        SiftConfigError: If the policy is not supported.
    """
    value = raw_value.strip().lower()
    if value not in MALFORMED_POLICIES:
        raise SiftConfigError(
            "Invalid SIFT_ON_MALFORMED value: "
            f"expected one of {', '.join(MALFORMED_POLICIES)}, got '{raw_value}'."
        )
    return value


def parse_tie_break_policy(raw_value: str) -> str:
    """Validate the industry backfill tie-break policy value.

    Args:
        raw_value: Raw policy string from environment or CLI.

    Returns:
        Normalized policy name.

    Raises:
        SiftConfigError: If the policy is not supported.
    """
    value = raw_value.strip().lower()
    if value not in TIE_BREAK_POLICIES:
        raise SiftConfigError(
            "Invalid SIFT_TIE_BREAK value: "
            f"expected one of {', '.join(TIE_BREAK_POLICIES)}, got '{raw_value}'."
        )
    return value

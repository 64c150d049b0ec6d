"""S3 URI and client helpers shared by source reading and snapshot export."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.config import SiftConfig
from core.errors import SiftDependencyError, SiftError

S3_SCHEME = "s3://"


@dataclass(frozen=True)
class S3Location:
    """Bucket and key (or key prefix) addressed by an ``s3://`` URI."""

    bucket: str
    key: str

    def child_key(self, relative_path: str) -> str:
        """Join a relative path below this location's key."""
        return f"{self.key.rstrip('/')}/{relative_path}"

    def object_uri(self, key: str) -> str:
        """Render a full URI for another key in the same bucket."""
        return f"{S3_SCHEME}{self.bucket}/{key}"


def is_s3_uri(uri: str) -> bool:
    """Return whether a source or destination points at S3."""
    return uri.startswith(S3_SCHEME)


def parse_s3_uri(uri: str, error_type: type[SiftError]) -> S3Location:
    """Split an ``s3://bucket/key`` URI into its parts.

    Args:
        uri: URI to parse.
        error_type: Domain error raised when the URI is malformed.

    Returns:
        Parsed S3 location.

    Raises:
        SiftError: The given ``error_type`` when bucket or key is missing.
    """
    bucket, _, key = uri.removeprefix(S3_SCHEME).partition("/")
    if not is_s3_uri(uri) or not bucket or not key:
        raise error_type(
            f"Invalid S3 URI '{uri}': expected s3://bucket/key. "
            "Provide both bucket and object key or prefix."
        )
    return S3Location(bucket=bucket, key=key)


def create_s3_client(config: SiftConfig, purpose: str) -> Any:
    """Create a boto3 S3 client from configured profile and region.

    Args:
        config: Runtime configuration.
        purpose: Short action name used in the missing-dependency message.

    Returns:
        Boto3 S3 client.

    Raises:
        SiftDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise SiftDependencyError(
            f"S3 support requires boto3, but it is not installed. "
            f"Install boto3 to {purpose}."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")

"""Sift exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SiftError(Exception):
    """Base exception for all Sift failures."""


class SiftConfigError(SiftError):
    """Raised for invalid runtime configuration or cleaning rules."""


class SiftIngestError(SiftError):
    """Raised for source reading and record parsing failures."""


class SiftTransformError(SiftError):
    """Raised when a cleaning stage fails."""


class SiftStoreError(SiftError):
    """Raised for snapshot store and export failures."""


class SiftDependencyError(SiftError):
    """Raised when an optional runtime dependency is missing."""

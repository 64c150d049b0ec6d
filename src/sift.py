"""Public SDK surface for Sift.

This module provides a stable import path for library users.
It re-exports the primary client and typed option models.
"""

from __future__ import annotations

from core.cleaning_rules import load_cleaning_rules
from core.config import SiftConfig
from core.types import (
    CleaningResult,
    CleaningRules,
    CleanOptions,
    IndustryRule,
    LayoffRecord,
    StageReport,
)
from store.dataset_sdk import Dataset, SiftClient

__all__ = [
    "CleanOptions",
    "CleaningResult",
    "CleaningRules",
    "Dataset",
    "IndustryRule",
    "LayoffRecord",
    "SiftClient",
    "SiftConfig",
    "StageReport",
    "load_cleaning_rules",
]

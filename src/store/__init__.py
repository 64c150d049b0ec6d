"""Storage and versioning layer.

This package persists immutable cleaned snapshots and their catalogs.
It powers dataset loading, auditing, and export for the SDK.
"""

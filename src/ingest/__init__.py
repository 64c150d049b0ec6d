"""Source ingestion and cleaning orchestration.

This package reads raw layoff tables into an immutable working copy
and runs the ordered cleaning stages over it.
"""

"""Unit tests for the dataset SDK."""

from __future__ import annotations

import csv
from dataclasses import replace
from datetime import date

from core.config import SiftConfig
from core.types import CleanOptions, LayoffRecord
from store.dataset_sdk import SiftClient
from tests.fixture_paths import fixture_path


def _client(tmp_path) -> SiftClient:
    return SiftClient(replace(SiftConfig.from_env(), data_root=tmp_path / "data"))


def test_clean_returns_loadable_version(tmp_path) -> None:
    """Clean should create a version that can be loaded back."""
    client = _client(tmp_path)
    version_id = client.clean(
        CleanOptions(dataset_name="jsonl", source_uri=str(fixture_path("raw/layoffs_sample.jsonl")))
    )

    records = client.dataset("jsonl").load_records(version_id)

    assert [record.industry for record in records] == ["Finance", "Finance"]


def test_clean_records_runs_without_store(tmp_path) -> None:
    """In-memory cleaning should return cleaned records and reports."""
    record = LayoffRecord(
        company=" Casper",
        location="SF Bay Area",
        industry="Retail",
        total_laid_off=None,
        percentage_laid_off=None,
        event_date=date(2022, 1, 1),
        stage="Series A",
        country="United States",
        funds_raised_millions=None,
    )

    result = _client(tmp_path).clean_records([record])

    assert result.records == ()
    assert result.stage_reports[-1].dropped_count == 1


def test_export_csv_writes_schema_header(tmp_path) -> None:
    """CSV export should write the nine columns with empty absent cells."""
    client = _client(tmp_path)
    client.clean(
        CleanOptions(dataset_name="layoffs", source_uri=str(fixture_path("raw/layoffs_sample.csv")))
    )
    output_path = client.dataset("layoffs").export_csv(str(tmp_path / "out" / "clean.csv"))

    with output_path.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))

    assert list(rows[0]) == [
        "company",
        "location",
        "industry",
        "total_laid_off",
        "percentage_laid_off",
        "event_date",
        "stage",
        "country",
        "funds_raised_millions",
    ]
    assert len(rows) == 9


def test_with_data_root_isolates_catalogs(tmp_path) -> None:
    """Clients with different data roots should not share versions."""
    client = _client(tmp_path)
    client.clean(
        CleanOptions(dataset_name="jsonl", source_uri=str(fixture_path("raw/layoffs_sample.jsonl")))
    )
    other = client.with_data_root(str(tmp_path / "other"))

    assert len(client.dataset("jsonl").list_versions()) == 1
    assert (tmp_path / "other" / "datasets").exists()
    assert other.dataset("jsonl").name == "jsonl"

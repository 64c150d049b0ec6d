"""Unit tests for cleaning pipeline orchestration."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from core.config import SiftConfig
from core.errors import SiftConfigError, SiftIngestError, SiftTransformError
from core.types import CleaningRules, CleanOptions, LayoffRecord
from ingest import pipeline
from ingest.pipeline import clean_dataset, clean_records
from ingest.working_copy import load_working_copy
from tests.fixture_paths import fixture_path


def _config(tmp_path: Path) -> SiftConfig:
    return replace(SiftConfig.from_env(), data_root=tmp_path)


def _record(**overrides: object) -> LayoffRecord:
    record = LayoffRecord(
        company="Casper",
        location="SF Bay Area",
        industry="Retail",
        total_laid_off=100,
        percentage_laid_off=0.1,
        event_date=date(2022, 1, 1),
        stage="Series A",
        country="United States.",
        funds_raised_millions=50.0,
    )
    return replace(record, **overrides)


def test_clean_records_collapses_casper_duplicates() -> None:
    """Identical Casper rows should leave one record with a trimmed country."""
    result = clean_records([_record(), _record()], CleaningRules())

    assert len(result.records) == 1
    assert result.records[0].country == "United States"


def test_clean_records_final_dedup_merges_rows_equal_after_standardization() -> None:
    """Rows differing only in a trailing period should merge after trimming."""
    records = [_record(), _record(country="United States")]

    with_final = clean_records(records, CleaningRules())
    without_final = clean_records(records, CleaningRules(), final_deduplication=False)

    assert (len(with_final.records), len(without_final.records)) == (1, 2)


def test_clean_records_reports_every_stage() -> None:
    """Each stage should produce an audit report in order."""
    result = clean_records([_record()], CleaningRules())

    assert [report.stage for report in result.stage_reports] == [
        "deduplication",
        "standardization",
        "null_resolution",
        "final_deduplication",
        "pruning",
    ]


def test_clean_records_wraps_stage_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unexpected stage errors should surface as transform errors."""

    def _explode(records):
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline, "prune_unmeasured", _explode)

    with pytest.raises(SiftTransformError, match="pruning"):
        clean_records([_record()], CleaningRules())


def test_clean_dataset_counts_match_sample(tmp_path: Path) -> None:
    """Stage reports should account for every dropped and changed record."""
    options = CleanOptions(
        dataset_name="layoffs",
        source_uri=str(fixture_path("raw/layoffs_sample.csv")),
    )

    manifest = clean_dataset(options, _config(tmp_path))
    counts = {
        report.stage: (report.input_count, report.output_count, report.changed_count)
        for report in manifest.stage_reports
    }

    assert counts == {
        "ingestion": (12, 12, 0),
        "deduplication": (12, 11, 0),
        "standardization": (11, 11, 5),
        "null_resolution": (11, 11, 2),
        "final_deduplication": (11, 11, 0),
        "pruning": (11, 9, 0),
    }


def test_clean_dataset_rejects_malformed_rows(tmp_path: Path) -> None:
    """Malformed rows should be counted, not fatal, by default."""
    options = CleanOptions(
        dataset_name="layoffs",
        source_uri=str(fixture_path("raw/layoffs_malformed.csv")),
    )

    manifest = clean_dataset(options, _config(tmp_path))

    assert (manifest.record_count, manifest.rejected_count) == (1, 3)


def test_clean_dataset_validates_option_policies(tmp_path: Path) -> None:
    """Invalid option overrides should fail before reading the source."""
    options = CleanOptions(
        dataset_name="layoffs",
        source_uri=str(fixture_path("raw/layoffs_sample.csv")),
        tie_break="coin-flip",
    )

    with pytest.raises(SiftConfigError):
        clean_dataset(options, _config(tmp_path))


_HEADER = (
    "company,location,industry,total_laid_off,percentage_laid_off,"
    "date,stage,country,funds_raised_millions\n"
)


def test_load_working_copy_rejects_csv_row_with_extra_values(tmp_path: Path) -> None:
    """A row longer than the header should be rejected, not fail the batch."""
    source = tmp_path / "overflow.csv"
    source.write_text(
        _HEADER
        + "Casper,SF Bay Area,Retail,100,0.1,2022-01-01,Series A,United States,50\n"
        + "Bad,SF Bay Area,Retail,100,0.1,2022-01-01,Series A,United States,5,EXTRA\n",
        encoding="utf-8",
    )

    working_copy = load_working_copy(str(source), _config(tmp_path), "reject")

    assert [record.company for record in working_copy.records] == ["Casper"]
    assert working_copy.rejections[0].field_name == "row"
    assert working_copy.rejections[0].line_number == 2


def test_load_working_copy_rejects_incomplete_jsonl_line(tmp_path: Path) -> None:
    """A JSONL object lacking schema keys should become one rejection."""
    source = tmp_path / "partial.jsonl"
    source.write_text(
        '{"company": "Stripe", "location": "SF Bay Area", "industry": "Finance", '
        '"total_laid_off": 1100, "percentage_laid_off": 0.14, "event_date": "2022-11-03", '
        '"stage": "Private Equity", "country": "United States", "funds_raised_millions": 2300}\n'
        '{"company": "Plaid", "location": "SF Bay Area", "industry": "Finance", '
        '"total_laid_off": 260}\n',
        encoding="utf-8",
    )

    working_copy = load_working_copy(str(source), _config(tmp_path), "reject")

    assert len(working_copy.records) == 1
    assert working_copy.rejections[0].field_name == "percentage_laid_off"
    assert working_copy.rejections[0].line_number == 2


def test_load_working_copy_aborts_on_extra_values_when_requested(tmp_path: Path) -> None:
    """Abort policy should still stop on an overlong row."""
    source = tmp_path / "overflow.csv"
    source.write_text(
        _HEADER + "Bad,SF Bay Area,Retail,100,0.1,2022-01-01,Series A,United States,5,EXTRA\n",
        encoding="utf-8",
    )

    with pytest.raises(SiftIngestError, match="overflow.csv:1"):
        load_working_copy(str(source), _config(tmp_path), "abort")

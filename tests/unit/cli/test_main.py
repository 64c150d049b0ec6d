"""Unit tests for CLI command wiring."""

from __future__ import annotations

import pytest

from cli.main import build_parser, main
from core.errors import SiftConfigError, SiftIngestError
from tests.fixture_paths import fixture_path


def test_clean_command_prints_version_id(tmp_path, capsys) -> None:
    """Clean command should print the created version id."""
    exit_code = main(
        [
            "--data-root",
            str(tmp_path),
            "clean",
            str(fixture_path("raw/layoffs_sample.csv")),
            "--dataset",
            "layoffs",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip().startswith("layoffs-")


def test_report_command_prints_stage_rows(tmp_path, capsys) -> None:
    """Report command should print one tab-separated row per stage."""
    data_root = str(tmp_path)
    main(["--data-root", data_root, "clean", str(fixture_path("raw/layoffs_sample.csv")), "--dataset", "layoffs"])
    capsys.readouterr()

    main(["--data-root", data_root, "report", "--dataset", "layoffs"])
    lines = capsys.readouterr().out.splitlines()

    assert lines[2] == "stage\tinput\toutput\tdropped\tchanged"
    assert "pruning\t11\t9\t2\t0" in lines


def test_report_command_lists_rejections(tmp_path, capsys) -> None:
    """Report command should list rejected rows with their source line."""
    data_root = str(tmp_path)
    main(["--data-root", data_root, "clean", str(fixture_path("raw/layoffs_malformed.csv")), "--dataset", "bad"])
    capsys.readouterr()

    main(["--data-root", data_root, "report", "--dataset", "bad", "--show-rejections"])
    rejected = [line for line in capsys.readouterr().out.splitlines() if line.startswith("rejected")]

    assert len(rejected) == 3


def test_clean_command_aborts_on_malformed_rows(tmp_path) -> None:
    """Abort policy should stop the run on the first malformed row."""
    with pytest.raises(SiftIngestError):
        main(
            [
                "--data-root",
                str(tmp_path),
                "clean",
                str(fixture_path("raw/layoffs_malformed.csv")),
                "--dataset",
                "bad",
                "--on-malformed",
                "abort",
            ]
        )


def test_rules_command_prints_defaults(capsys) -> None:
    """Rules command should print the built-in rule set as YAML."""
    exit_code = main(["rules"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "prefix: Crypto" in output
    assert "United States" in output


def test_rules_command_rejects_unstable_rules() -> None:
    """Rules whose labels would be re-collapsed should fail validation."""
    with pytest.raises(SiftConfigError, match="Fintech"):
        main(["rules", "--rules", str(fixture_path("rules/unstable_rules.yaml"))])


def test_parser_rejects_unknown_tie_break() -> None:
    """Parser should reject tie-break policies it does not know."""
    parser = build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["clean", "raw.csv", "--dataset", "x", "--tie-break", "random"])

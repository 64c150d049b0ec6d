"""Sift CLI entry points.
This module exposes commands for cleaning and snapshot operations.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

import yaml

from core.cleaning_rules import dump_cleaning_rules, load_cleaning_rules
from core.config import SiftConfig
from core.constants import MALFORMED_POLICIES, TIE_BREAK_POLICIES
from core.s3_uri import is_s3_uri
from core.types import CleanOptions
from store.dataset_sdk import SiftClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="sift", description="Layoff dataset cleaning CLI")
    parser.add_argument("--data-root", help="Override SIFT_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_clean_command(subparsers)
    _add_versions_command(subparsers)
    _add_report_command(subparsers)
    _add_export_command(subparsers)
    _add_rules_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Sift CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.data_root)
    if args.command == "rules":
        return _run_rules_command(config, args)
    client = SiftClient(config)
    if args.command == "clean":
        return _run_clean_command(client, args)
    if args.command == "versions":
        return _run_versions_command(client, args)
    if args.command == "report":
        return _run_report_command(client, args)
    if args.command == "export":
        return _run_export_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> SiftConfig:
    """Build runtime config with optional data-root override."""
    config = SiftConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _run_clean_command(client: SiftClient, args: argparse.Namespace) -> int:
    """Handle clean command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = CleanOptions(
        dataset_name=args.dataset,
        source_uri=args.source,
        rules_path=args.rules,
        output_uri=args.output_uri,
        on_malformed=args.on_malformed,
        tie_break=args.tie_break,
        final_deduplication=not args.skip_final_dedup,
    )
    version_id = client.clean(options)
    print(version_id)
    return 0


def _run_versions_command(client: SiftClient, args: argparse.Namespace) -> int:
    """Handle versions command."""
    dataset = client.dataset(args.dataset)
    for manifest in dataset.list_versions():
        print(
            f"{manifest.version_id}\t"
            f"{manifest.record_count}\t"
            f"{manifest.rejected_count}\t"
            f"{manifest.created_at.isoformat()}"
        )
    return 0


def _run_report_command(client: SiftClient, args: argparse.Namespace) -> int:
    """Handle report command.

    Prints one row per stage with input, output, dropped, and changed
    counts, followed by rejected source rows when requested.
    """
    dataset = client.dataset(args.dataset)
    manifest = dataset.manifest(args.version_id)
    print(f"version_id={manifest.version_id}")
    print(f"source_uri={manifest.source_uri}")
    print("stage\tinput\toutput\tdropped\tchanged")
    for report in manifest.stage_reports:
        print(
            f"{report.stage}\t{report.input_count}\t{report.output_count}\t"
            f"{report.dropped_count}\t{report.changed_count}"
        )
    if args.show_rejections:
        for rejection in dataset.rejections(manifest.version_id):
            print(
                f"rejected\t{rejection.source_uri}:{rejection.line_number}\t"
                f"{rejection.field_name}\t{rejection.reason}"
            )
    return 0


def _run_export_command(client: SiftClient, args: argparse.Namespace) -> int:
    """Handle export command."""
    dataset = client.dataset(args.dataset)
    if is_s3_uri(args.output):
        dataset.export_to_s3(args.output, args.version_id)
        print(args.output)
        return 0
    print(dataset.export_csv(args.output, args.version_id))
    return 0


def _run_rules_command(config: SiftConfig, args: argparse.Namespace) -> int:
    """Handle rules command by printing the effective rules as YAML."""
    rules = load_cleaning_rules(args.rules or config.rules_path)
    print(yaml.safe_dump(dump_cleaning_rules(rules), sort_keys=False).rstrip())
    return 0


def _add_clean_command(subparsers: Any) -> None:
    """Register clean subcommand."""
    parser = subparsers.add_parser("clean", help="Clean a source table into a new version")
    parser.add_argument("source", help="Source file, directory, or s3://bucket/key")
    parser.add_argument("--dataset", required=True, help="Dataset name")
    parser.add_argument("--rules", help="YAML cleaning rules file")
    parser.add_argument("--output-uri", help="Optional s3:// export destination")
    parser.add_argument(
        "--on-malformed",
        choices=MALFORMED_POLICIES,
        help="Reject malformed rows with diagnostics or abort the run",
    )
    parser.add_argument(
        "--tie-break",
        choices=TIE_BREAK_POLICIES,
        help="Industry backfill policy when a company has several industries",
    )
    parser.add_argument(
        "--skip-final-dedup",
        action="store_true",
        help="Do not re-run deduplication after standardization",
    )


def _add_versions_command(subparsers: Any) -> None:
    """Register versions subcommand."""
    parser = subparsers.add_parser("versions", help="List dataset versions")
    parser.add_argument("--dataset", required=True, help="Dataset name")


def _add_report_command(subparsers: Any) -> None:
    """Register report subcommand."""
    parser = subparsers.add_parser("report", help="Show per-stage cleaning counts")
    parser.add_argument("--dataset", required=True, help="Dataset name")
    parser.add_argument("--version-id", help="Optional specific version id")
    parser.add_argument(
        "--show-rejections",
        action="store_true",
        help="List rejected source rows",
    )


def _add_export_command(subparsers: Any) -> None:
    """Register export subcommand."""
    parser = subparsers.add_parser("export", help="Export a version as CSV or to S3")
    parser.add_argument("--dataset", required=True, help="Dataset name")
    parser.add_argument("--output", required=True, help="CSV file path or s3:// prefix")
    parser.add_argument("--version-id", help="Optional specific version id")


def _add_rules_command(subparsers: Any) -> None:
    """Register rules subcommand."""
    parser = subparsers.add_parser("rules", help="Print effective cleaning rules")
    parser.add_argument("--rules", help="YAML cleaning rules file")

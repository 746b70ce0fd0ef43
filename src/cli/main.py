"""Atlas CLI entry points.

This module exposes commands for loading collision data, querying
filtered hex bins and key findings, and clearing the snapshot cache.
It maps argparse commands onto DashboardSession calls.
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from aggregate.insights import build_key_findings
from core.config import AtlasConfig
from core.constants import CACHE_KEY, DEFAULT_SAMPLING_RATIO, SEVERITY_FILTER_ALL, SEVERITY_TYPES
from core.errors import AtlasError
from core.filter_spec import load_filter_state
from core.types import AggregateSnapshot, FilterState, IngestOptions
from session.controller import DashboardSession
from store.cache_store import SnapshotCache
from store.snapshot_payload import hexbin_to_payload, snapshot_to_payload


class _StderrIndicator:
    """Loading indicator printing progress lines to stderr."""

    def update(self, percent: float, message: str) -> None:
        print(f"[{round(percent):>3}%] {message}", file=sys.stderr)

    def hide(self) -> None:
        return None


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="atlas", description="NYC collision atlas CLI")
    parser.add_argument("--data-root", help="Override ATLAS_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_load_command(subparsers)
    _add_hexbins_command(subparsers)
    _add_insights_command(subparsers)
    _add_cache_clear_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Atlas CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.data_root)
        if args.command == "load":
            return _run_load_command(config, args)
        if args.command == "hexbins":
            return _run_hexbins_command(config, args)
        if args.command == "insights":
            return _run_insights_command(config, args)
        if args.command == "cache-clear":
            return _run_cache_clear_command(config)
    except AtlasError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> AtlasConfig:
    """Build runtime config with optional data-root override."""
    config = AtlasConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _add_load_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", help="Collision CSV path or s3:// URI")
    parser.add_argument(
        "--sampling-ratio",
        type=int,
        default=DEFAULT_SAMPLING_RATIO,
        help="Keep one row out of this many",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Skip reading and writing the snapshot cache",
    )


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Load collision data and print summary")
    _add_load_source_arguments(parser)


def _add_hexbins_command(subparsers: Any) -> None:
    """Register hexbins subcommand."""
    parser = subparsers.add_parser("hexbins", help="Print filtered hex bins as JSON")
    _add_load_source_arguments(parser)
    parser.add_argument("--filter-file", help="YAML filter preset applied before flags")
    parser.add_argument("--hour", type=int, help="Exact hour of day, 0-23")
    parser.add_argument("--year-min", type=int, help="Inclusive lower year bound")
    parser.add_argument("--year-max", type=int, help="Inclusive upper year bound")
    parser.add_argument(
        "--severity",
        choices=(SEVERITY_FILTER_ALL, *SEVERITY_TYPES),
        help="Severity bucket",
    )
    parser.add_argument(
        "--exclude-pedestrian",
        action="store_true",
        help="Drop collisions involving pedestrians",
    )
    parser.add_argument(
        "--exclude-cyclist",
        action="store_true",
        help="Drop collisions involving cyclists",
    )
    parser.add_argument(
        "--exclude-motorist",
        action="store_true",
        help="Drop collisions involving motorists",
    )


def _add_insights_command(subparsers: Any) -> None:
    """Register insights subcommand."""
    parser = subparsers.add_parser("insights", help="Print key findings as JSON")
    _add_load_source_arguments(parser)


def _add_cache_clear_command(subparsers: Any) -> None:
    """Register cache-clear subcommand."""
    subparsers.add_parser("cache-clear", help="Delete the cached snapshot")


def _run_load_command(config: AtlasConfig, args: argparse.Namespace) -> int:
    """Handle load command."""
    session, snapshot = _load_session(config, args)
    payload = snapshot_to_payload(snapshot)
    summary = {
        "record_count": len(session.state.raw_records),
        "hexbin_count": len(snapshot.hexbins),
        "severity": payload["severity"],
        "stats": payload["stats"],
    }
    _print_json(summary)
    return 0


def _run_hexbins_command(config: AtlasConfig, args: argparse.Namespace) -> int:
    """Handle hexbins command."""
    filter_state = _filter_state_from_args(args)
    session, _ = _load_session(config, args)
    hexbins = session.set_filters(filter_state)
    _print_json(
        {
            "record_count": len(session.filtered_records),
            "hexbins": [hexbin_to_payload(hexbin) for hexbin in hexbins],
        }
    )
    return 0


def _run_insights_command(config: AtlasConfig, args: argparse.Namespace) -> int:
    """Handle insights command."""
    _, snapshot = _load_session(config, args)
    findings = build_key_findings(snapshot)
    _print_json(
        [
            {"kind": finding.kind, "title": finding.title, "description": finding.description}
            for finding in findings
        ]
    )
    return 0


def _run_cache_clear_command(config: AtlasConfig) -> int:
    """Handle cache-clear command."""
    removed = SnapshotCache(config.cache_dir).delete(CACHE_KEY)
    print(f"cache_cleared={str(removed).lower()}")
    return 0


def _load_session(
    config: AtlasConfig, args: argparse.Namespace
) -> tuple[DashboardSession, AggregateSnapshot]:
    """Build a session from CLI args and run one load."""
    source_uri = args.source or config.source_uri
    session = DashboardSession(
        config,
        indicator=_StderrIndicator(),
        ingest_options=IngestOptions(source_uri=source_uri, sampling_ratio=args.sampling_ratio),
    )
    snapshot = asyncio.run(session.load(use_cache=not args.no_cache))
    return session, snapshot


def _filter_state_from_args(args: argparse.Namespace) -> FilterState:
    """Merge an optional YAML preset with explicit filter flags."""
    filter_state = FilterState()
    if args.filter_file:
        filter_state = load_filter_state(args.filter_file, filter_state)
    overrides: dict[str, object] = {}
    if args.hour is not None:
        overrides["hour"] = args.hour
    if args.year_min is not None:
        overrides["year_min"] = args.year_min
    if args.year_max is not None:
        overrides["year_max"] = args.year_max
    if args.severity is not None:
        overrides["severity"] = args.severity
    if args.exclude_pedestrian:
        overrides["pedestrian"] = False
    if args.exclude_cyclist:
        overrides["cyclist"] = False
    if args.exclude_motorist:
        overrides["motorist"] = False
    return replace(filter_state, **overrides)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))

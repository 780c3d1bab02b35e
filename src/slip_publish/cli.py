"""Command line interface for slip-publish."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import polars as pl

from slip_publish.audit_index import load_audit_index
from slip_publish.board import board_payload
from slip_publish.derived_stats import BASE_STATS, COMBO_STATS, stat_series
from slip_publish.enrich import enrich_rows
from slip_publish.errors import CLIError, GitPublishError, PublishError
from slip_publish.io_utils import atomic_write_json
from slip_publish.legs import parse_leg_text
from slip_publish.publish import run_publish
from slip_publish.runtime_config import (
    RuntimeConfig,
    current_runtime_config,
    load_runtime_config,
    set_current_runtime_config,
)
from slip_publish.settings import Settings
from slip_publish.sources import read_recommendation_rows
from slip_publish.time_utils import utc_now_str


def _load_config(args: argparse.Namespace) -> RuntimeConfig:
    raw = str(getattr(args, "config", "") or "").strip()
    try:
        if raw:
            config = load_runtime_config(Path(raw))
            set_current_runtime_config(config)
            return config
        return current_runtime_config()
    except RuntimeError as exc:
        raise CLIError(str(exc)) from exc


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, sort_keys=True, indent=2))


def _cmd_publish(args: argparse.Namespace) -> int:
    config = _load_config(args)
    overrides: dict[str, Any] = {}
    if args.top_n is not None:
        overrides["top_n"] = int(args.top_n)
    if args.no_git:
        overrides["git_enabled"] = False
    config = config.with_overrides(**overrides)
    set_current_runtime_config(config)
    settings = Settings.from_runtime()

    result = run_publish(config, settings, dry_run=bool(args.dry_run), push=not args.no_push)
    status = result.status
    audit = status.get("audit", {})
    print(f"audit_status={audit.get('status', '')} audit_players={audit.get('players', 0)}")
    for name, entry in sorted(status.get("sources", {}).items()):
        print(
            f"source={name} status={entry['status']} rows_in={entry['rows_in']} "
            f"rows_dropped={entry['rows_dropped']} rows_published={entry['rows_published']}"
        )
    print(f"data_dir={result.data_dir}")
    print(f"dry_run={str(result.dry_run).lower()}")
    print(f"written={','.join(result.written) if result.written else 'none'}")
    if result.removed:
        print(f"invalidated={','.join(result.removed)}")
    if result.git is not None:
        print(
            f"git_committed={str(result.git.committed).lower()} "
            f"git_pushed={str(result.git.pushed).lower()} git_commit={result.git.commit or 'none'}"
        )
    return 0


def _cmd_enrich(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"missing recommendation file: {input_path}")
    index = load_audit_index(Path(args.audit))
    try:
        rows = read_recommendation_rows(input_path)
    except pl.exceptions.PolarsError as exc:
        raise CLIError(f"unreadable recommendation file: {input_path}: {exc}") from exc
    enriched = enrich_rows(rows, index, apply_filter=bool(args.filter_cold), window=args.window)
    payload = board_payload(input_path.stem, enriched, generated_at_utc=utc_now_str())
    if args.out:
        out_path = Path(args.out)
        atomic_write_json(out_path, payload)
        print(f"audit_status={index.status} audit_players={len(index)}")
        print(f"rows_in={len(rows)} rows_out={len(enriched)} out={out_path}")
        return 0
    _print_json(payload)
    return 0


def _cmd_audit_show(args: argparse.Namespace) -> int:
    index = load_audit_index(Path(args.audit))
    record = index.lookup(args.player)
    if record is None:
        raise CLIError(f"player not found in audit ({index.status}): {args.player}")
    payload = record.to_dict()
    payload["derived"] = {
        code: list(stat_series(record, code)) for code in (*BASE_STATS, *COMBO_STATS)
    }
    _print_json(payload)
    return 0


def _cmd_leg_parse(args: argparse.Namespace) -> int:
    leg = parse_leg_text(args.text)
    _print_json(
        {
            "id": leg.id,
            "player": leg.player,
            "direction": leg.direction,
            "stat": leg.stat,
            "line": leg.line,
            "tier": leg.tier,
            "leg_text": leg.raw_text,
        }
    )
    return 0 if leg.parsed else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slip-publish")
    parser.add_argument(
        "--config",
        default="",
        help="Path to runtime config TOML (default: config/runtime.toml).",
    )
    subparsers = parser.add_subparsers(dest="command")

    publish = subparsers.add_parser("publish", help="Enrich Atlas slips and publish boards")
    publish.add_argument("--dry-run", action="store_true", help="Stage and validate only.")
    publish.add_argument("--no-git", action="store_true", help="Skip git even if enabled.")
    publish.add_argument("--no-push", action="store_true", help="Commit without pull/push.")
    publish.add_argument("--top-n", type=int, default=None)
    publish.set_defaults(func=_cmd_publish)

    enrich = subparsers.add_parser("enrich", help="Enrich one recommendation file")
    enrich.add_argument("--audit", required=True)
    enrich.add_argument("--input", required=True)
    enrich.add_argument("--filter-cold", action="store_true")
    enrich.add_argument("--window", type=int, default=5)
    enrich.add_argument("--out", default="")
    enrich.set_defaults(func=_cmd_enrich)

    audit = subparsers.add_parser("audit", help="Inspect the last-5 audit table")
    audit_subparsers = audit.add_subparsers(dest="audit_command")
    audit_show = audit_subparsers.add_parser("show", help="Show one player's series")
    audit_show.add_argument("player")
    audit_show.add_argument("--audit", required=True)
    audit_show.set_defaults(func=_cmd_audit_show)

    leg = subparsers.add_parser("leg", help="Leg text helpers")
    leg_subparsers = leg.add_subparsers(dest="leg_command")
    leg_parse = leg_subparsers.add_parser("parse", help="Parse one encoded leg string")
    leg_parse.add_argument("text")
    leg_parse.set_defaults(func=_cmd_leg_parse)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return int(func(args))
    except (CLIError, PublishError, GitPublishError, FileNotFoundError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

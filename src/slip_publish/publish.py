"""Stage, validate and publish enriched slip boards into the dashboard data dir."""

from __future__ import annotations

import json
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from slip_publish.audit_index import AUDIT_MISSING, AUDIT_UNREADABLE, load_audit_index
from slip_publish.board import (
    board_payload,
    cap_rows,
    combine_sources,
    rank_rows,
    validate_board_payload,
)
from slip_publish.enrich import enrich_rows
from slip_publish.errors import PublishError
from slip_publish.git_sink import GitPublishResult, GitTarget, commit_and_push, preflight
from slip_publish.io_utils import atomic_write_bytes, json_bytes, sha256_bytes
from slip_publish.runtime_config import RuntimeConfig
from slip_publish.settings import Settings
from slip_publish.sources import SourceLoad, load_source
from slip_publish.time_utils import utc_now_str

COMBINED_BOARD = "all"
STATUS_FILENAME = "status.json"


def board_filename(name: str) -> str:
    return f"slips_{name}.json"


@dataclass
class PublishResult:
    data_dir: Path
    status: dict[str, Any]
    written: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    dry_run: bool = False
    git: GitPublishResult | None = None


def _source_status(load: SourceLoad, *, rows_enriched: int, rows_published: int) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "status": load.status,
        "path": str(load.path),
        "filter_cold": load.filter_cold,
        "rows_in": len(load.rows),
        "rows_enriched": rows_enriched,
        "rows_dropped": len(load.rows) - rows_enriched,
        "rows_published": rows_published,
        "invalidated": not load.available,
    }
    if load.error:
        entry["error"] = load.error
    return entry


def build_boards(
    config: RuntimeConfig, *, generated_at_utc: str
) -> tuple[dict[str, dict[str, Any]], dict[str, Any], list[str]]:
    """Enrich every configured source and build board payloads in memory.

    Returns ``(boards by filename, status payload, filenames to invalidate)``.
    """
    index = load_audit_index(config.audit_csv)
    loads = [load_source(source) for source in config.sources]
    audit_absent = index.status in {AUDIT_MISSING, AUDIT_UNREADABLE}
    if audit_absent and not any(load.available for load in loads):
        raise PublishError(
            f"nothing to publish: audit {index.status} at {config.audit_csv} "
            "and no recommendation source is readable"
        )

    boards: dict[str, dict[str, Any]] = {}
    invalidated: list[str] = []
    per_source: dict[str, list[dict[str, Any]]] = {}
    sources_status: dict[str, Any] = {}
    for load in loads:
        filename = board_filename(load.name)
        if not load.available:
            invalidated.append(filename)
            sources_status[load.name] = _source_status(load, rows_enriched=0, rows_published=0)
            continue
        enriched = enrich_rows(
            load.rows, index, apply_filter=load.filter_cold, window=config.window
        )
        per_source[load.name] = enriched
        published = cap_rows(rank_rows(enriched, score_fields=config.score_fields), config.top_n)
        boards[filename] = board_payload(
            load.name, published, generated_at_utc=generated_at_utc
        )
        sources_status[load.name] = _source_status(
            load, rows_enriched=len(enriched), rows_published=len(published)
        )

    combined = combine_sources(per_source, score_fields=config.score_fields, top_n=config.top_n)
    boards[board_filename(COMBINED_BOARD)] = board_payload(
        COMBINED_BOARD, combined, generated_at_utc=generated_at_utc
    )
    status = {
        "generated_at_utc": generated_at_utc,
        "audit": index.summary(),
        "sources": sources_status,
        "top_n": config.top_n,
        "window": config.window,
    }
    return boards, status, invalidated


def _stage(staging_root: Path, boards: dict[str, dict[str, Any]]) -> tuple[Path, dict[str, bytes]]:
    """Write boards to a private staging dir and validate them by re-reading."""
    run_dir = staging_root / f"run-{uuid.uuid4().hex}"
    run_dir.mkdir(parents=True, exist_ok=False)
    staged: dict[str, bytes] = {}
    try:
        for filename, payload in sorted(boards.items()):
            data = json_bytes(payload)
            path = run_dir / filename
            path.write_bytes(data)
            try:
                reloaded = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise PublishError(f"staged board is not valid JSON: {path}") from exc
            errors = validate_board_payload(reloaded)
            if errors:
                raise PublishError(
                    f"staged board {filename} failed validation: {'; '.join(errors)}"
                )
            staged[filename] = data
    except BaseException:
        shutil.rmtree(run_dir, ignore_errors=True)
        raise
    return run_dir, staged


def publish_board(
    config: RuntimeConfig,
    *,
    generated_at_utc: str | None = None,
    dry_run: bool = False,
) -> PublishResult:
    """Build, stage, validate and (unless ``dry_run``) write all boards."""
    generated = generated_at_utc or utc_now_str()
    boards, status, invalidated = build_boards(config, generated_at_utc=generated)
    data_dir = config.data_dir
    run_dir, staged = _stage(config.staging_dir, boards)
    try:
        status["files"] = {name: sha256_bytes(data) for name, data in staged.items()}
        result = PublishResult(data_dir=data_dir, status=status, dry_run=dry_run)
        if dry_run:
            result.written = sorted(staged)
            return result

        for filename, data in staged.items():
            atomic_write_bytes(data_dir / filename, data)
            result.written.append(filename)
        for filename in invalidated:
            stale = data_dir / filename
            if stale.exists():
                stale.unlink()
                result.removed.append(filename)
        atomic_write_bytes(data_dir / STATUS_FILENAME, json_bytes(status))
        result.written.append(STATUS_FILENAME)
        return result
    finally:
        shutil.rmtree(run_dir, ignore_errors=True)


def git_target(settings: Settings) -> GitTarget:
    return GitTarget(
        repo_dir=Path(settings.dashboard_dir),
        remote=settings.git_remote,
        branch=settings.git_branch,
        timeout_s=settings.git_timeout_s,
    )


def run_publish(
    config: RuntimeConfig,
    settings: Settings,
    *,
    dry_run: bool = False,
    push: bool = True,
    generated_at_utc: str | None = None,
) -> PublishResult:
    """Full publish: git preflight, write boards, then commit and push."""
    use_git = settings.git_enabled and not dry_run
    target = git_target(settings)
    if use_git:
        preflight(target, pull=push)
    result = publish_board(config, generated_at_utc=generated_at_utc, dry_run=dry_run)
    if use_git:
        message = settings.git_commit_message.format(
            generated_at_utc=result.status["generated_at_utc"]
        )
        result.git = commit_and_push(target, [config.data_dir], message=message, push=push)
    return result

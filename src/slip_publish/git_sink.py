"""Git publish sink for the dashboard repository."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from slip_publish.errors import GitPublishError


@dataclass(frozen=True)
class GitTarget:
    repo_dir: Path
    remote: str = "origin"
    branch: str = "main"
    timeout_s: float = 120.0


@dataclass(frozen=True)
class GitPublishResult:
    committed: bool
    pushed: bool
    commit: str = ""


def _git_bin() -> str:
    binary = shutil.which("git")
    if not binary:
        raise GitPublishError("git binary is required; install git and retry")
    return binary


def _run_git(target: GitTarget, *args: str) -> subprocess.CompletedProcess[str]:
    command = [_git_bin(), "-C", str(target.repo_dir), *args]
    try:
        completed = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
            timeout=target.timeout_s,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitPublishError(f"git {args[0]} timed out", command=command) from exc
    if completed.returncode != 0:
        stderr = completed.stderr.strip()
        raise GitPublishError(f"git {args[0]} failed: {stderr}", command=command, stderr=stderr)
    return completed


def _relative(target: GitTarget, paths: list[Path]) -> list[str]:
    root = target.repo_dir.resolve()
    out: list[str] = []
    for path in paths:
        resolved = path.resolve()
        try:
            out.append(resolved.relative_to(root).as_posix())
        except ValueError as exc:
            raise GitPublishError(f"path is outside the dashboard repo: {path}") from exc
    return out


def ensure_repo(target: GitTarget) -> None:
    completed = _run_git(target, "rev-parse", "--is-inside-work-tree")
    if completed.stdout.strip() != "true":
        raise GitPublishError(f"not a git work tree: {target.repo_dir}")


def dirty_paths(target: GitTarget) -> list[str]:
    completed = _run_git(target, "status", "--porcelain")
    return [line[3:] for line in completed.stdout.splitlines() if line.strip()]


def preflight(target: GitTarget, *, pull: bool = True) -> None:
    """Refuse to publish into a dirty tree, then fast-forward from the remote."""
    ensure_repo(target)
    dirty = dirty_paths(target)
    if dirty:
        raise GitPublishError(
            f"dashboard repo has uncommitted changes: {', '.join(sorted(dirty)[:5])}"
        )
    if pull:
        _run_git(target, "pull", "--ff-only", target.remote, target.branch)


def commit_and_push(
    target: GitTarget, paths: list[Path], *, message: str, push: bool = True
) -> GitPublishResult:
    """Stage ``paths``, commit when they changed, and push the branch."""
    relative = _relative(target, paths)
    if not relative:
        return GitPublishResult(committed=False, pushed=False)
    changes = _run_git(target, "status", "--porcelain", "--", *relative)
    if not changes.stdout.strip():
        return GitPublishResult(committed=False, pushed=False)
    _run_git(target, "add", "--all", "--", *relative)
    _run_git(target, "commit", "-m", message, "--", *relative)
    commit = _run_git(target, "rev-parse", "HEAD").stdout.strip()
    if push:
        _run_git(target, "push", target.remote, f"HEAD:{target.branch}")
    return GitPublishResult(committed=True, pushed=push, commit=commit)

"""Runtime configuration loader (config-first, flag-overrides)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"

DEFAULT_SCORE_FIELDS: tuple[str, ...] = ("ev", "expected_value", "edge", "hit_prob")
DEFAULT_COMMIT_MESSAGE = "Publish slips {generated_at_utc}"


@dataclass(frozen=True)
class SourceConfig:
    """One upstream recommendation file and whether cold slips are dropped."""

    name: str
    path: Path
    filter_cold: bool = False


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path
    audit_csv: Path
    dashboard_dir: Path
    data_subdir: str
    staging_dir: Path
    top_n: int
    window: int
    score_fields: tuple[str, ...]
    git_enabled: bool
    git_remote: str
    git_branch: str
    git_commit_message: str
    sources: tuple[SourceConfig, ...]

    @property
    def data_dir(self) -> Path:
        """Directory inside the dashboard repo that receives the JSON boards."""
        return self.dashboard_dir / self.data_subdir

    def with_overrides(
        self,
        *,
        top_n: int | None = None,
        git_enabled: bool | None = None,
    ) -> RuntimeConfig:
        """Return copy with explicit CLI overrides applied."""
        return replace(
            self,
            top_n=self.top_n if top_n is None else top_n,
            git_enabled=self.git_enabled if git_enabled is None else git_enabled,
        )


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"invalid runtime config TOML: {path}") from exc
    if not isinstance(payload, dict):
        raise RuntimeError(f"runtime config root must be a table: {path}")
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    return default


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_csv_list(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(values, list):
        cleaned = [str(value).strip() for value in values if str(value).strip()]
        return tuple(cleaned) if cleaned else default
    if isinstance(values, str):
        cleaned = [part.strip() for part in values.split(",") if part.strip()]
        return tuple(cleaned) if cleaned else default
    return default


def _resolve_path(raw: Any, *, default: str, base_dir: Path) -> Path:
    value = _as_str(raw, default=default)
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return path


def _as_sources(values: Any, *, base_dir: Path) -> tuple[SourceConfig, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise RuntimeError("runtime config [[sources]] must be an array of tables")
    sources: list[SourceConfig] = []
    seen: set[str] = set()
    for idx, item in enumerate(values):
        if not isinstance(item, dict):
            raise RuntimeError(f"runtime config sources[{idx}] must be a table")
        name = _as_str(item.get("name"), default="").lower()
        if not name:
            raise RuntimeError(f"runtime config sources[{idx}] requires a name")
        if name == "all" or name in seen:
            raise RuntimeError(f"runtime config source name is reserved or duplicated: {name}")
        seen.add(name)
        raw_path = _as_str(item.get("path"), default="")
        if not raw_path:
            raise RuntimeError(f"runtime config source {name} requires a path")
        sources.append(
            SourceConfig(
                name=name,
                path=_resolve_path(raw_path, default=raw_path, base_dir=base_dir),
                filter_cold=_as_bool(item.get("filter_cold"), default=False),
            )
        )
    return tuple(sources)


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override."""
    source = (config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
    if not source.exists():
        raise RuntimeError(f"runtime config file not found: {source}")

    payload = _read_toml(source)
    if source == DEFAULT_CONFIG_PATH and DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))

    paths = _as_table(payload, "paths")
    publish = _as_table(payload, "publish")
    git = _as_table(payload, "git")
    base_dir = source.parent

    return RuntimeConfig(
        config_path=source,
        audit_csv=_resolve_path(
            paths.get("audit_csv"),
            default="atlas/out/last5_audit.csv",
            base_dir=base_dir,
        ),
        dashboard_dir=_resolve_path(
            paths.get("dashboard_dir"),
            default="dashboard",
            base_dir=base_dir,
        ),
        data_subdir=_as_str(paths.get("data_subdir"), default="data"),
        staging_dir=_resolve_path(
            paths.get("staging_dir"),
            default="runtime/staging",
            base_dir=base_dir,
        ),
        top_n=_as_int(publish.get("top_n"), default=25),
        window=_as_int(publish.get("window"), default=5),
        score_fields=_as_csv_list(publish.get("score_fields"), default=DEFAULT_SCORE_FIELDS),
        git_enabled=_as_bool(git.get("enabled"), default=False),
        git_remote=_as_str(git.get("remote"), default="origin"),
        git_branch=_as_str(git.get("branch"), default="main"),
        git_commit_message=_as_str(git.get("commit_message"), default=DEFAULT_COMMIT_MESSAGE),
        sources=_as_sources(payload.get("sources"), base_dir=base_dir),
    )

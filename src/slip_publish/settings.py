"""Application settings for slip-publish."""

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from slip_publish.runtime_config import DEFAULT_COMMIT_MESSAGE, current_runtime_config


class Settings(BaseSettings):
    """Runtime settings for the git publish sink."""

    model_config = SettingsConfigDict(
        env_prefix="SLIP_PUBLISH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    git_enabled: bool = False
    git_remote: str = "origin"
    git_branch: str = Field(
        default="main",
        validation_alias=AliasChoices("GIT_BRANCH", "SLIP_PUBLISH_GIT_BRANCH"),
    )
    git_commit_message: str = DEFAULT_COMMIT_MESSAGE
    git_timeout_s: float = 120.0
    dashboard_dir: str = "dashboard"

    @classmethod
    def from_runtime(cls) -> "Settings":
        """Construct settings from runtime config + direct branch env override."""
        runtime = current_runtime_config()

        direct_branch = (
            os.environ.get("GIT_BRANCH", "").strip()
            or os.environ.get("SLIP_PUBLISH_GIT_BRANCH", "").strip()
        )

        return cls(
            git_enabled=runtime.git_enabled,
            git_remote=runtime.git_remote,
            git_branch=direct_branch or runtime.git_branch,
            git_commit_message=runtime.git_commit_message,
            dashboard_dir=str(runtime.dashboard_dir),
        )

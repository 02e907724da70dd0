"""Configuration loading from git config and environment.

Each setting is looked up in this order:

1. ``GIT_PR_RELEASE_<KEY>`` environment variable;
2. ``pr-release.<key>`` in the repository's ``.git-pr-release`` file;
3. ``pr-release.<host>.<key>`` in git config on an enterprise host, or
   ``pr-release.<key>`` on the default host;
4. the default below.

Never commit a token to ``.git-pr-release``.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from pr_release.services.git import lookup_config

# git config key -> settings field
CONFIG_KEYS = {
    "branch.production": "branch_production",
    "branch.staging": "branch_staging",
    "template": "template",
    "labels": "labels",
    "token": "token",
    "client-id": "client_id",
}


class ReleaseSettings(BaseSettings):
    """Branch pair, body template, labels, API token and login client ID."""

    model_config = SettingsConfigDict(env_prefix="GIT_PR_RELEASE_", extra="ignore")

    branch_production: str = Field(default="master", description="Branch the release PR merges into")
    branch_staging: str = Field(default="staging", description="Branch the release PR merges from")
    template: str | None = Field(default=None, description="Path to a jinja2 body template")
    labels: str | None = Field(default=None, description="Comma-separated labels for the release PR")
    token: str | None = Field(default=None, description="API token; prefer env or global git config")
    client_id: str | None = Field(default=None, description="OAuth app client ID for device-flow login")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from git config (passed as init kwargs)
        return env_settings, init_settings, file_secret_settings

    @property
    def label_list(self) -> list[str]:
        """Labels split on commas, blanks dropped."""
        if not self.labels:
            return []
        return [label.strip() for label in self.labels.split(",") if label.strip()]


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


def read_git_settings(
    repo_dir: Path | None = None,
    host: str | None = None,
    log: logging.Logger | None = None,
) -> dict[str, Any]:
    """Collect every ``pr-release.*`` key that is set, keyed by settings field."""
    values: dict[str, Any] = {}
    for key, field in CONFIG_KEYS.items():
        value = lookup_config(key, repo_dir=repo_dir, host=host, log=log)
        if value is not None:
            values[field] = value
    return values


def load_settings(
    repo_dir: Path | None = None,
    host: str | None = None,
    log: logging.Logger | None = None,
) -> ReleaseSettings:
    """Build ReleaseSettings from git config with environment overrides."""
    return ReleaseSettings(**read_git_settings(repo_dir=repo_dir, host=host, log=log))

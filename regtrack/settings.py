"""Settings resolution with named per-repository tracker profiles."""

import os
from collections.abc import Mapping
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from regtrack.models import DryRunScope, IssueTemplates, OperationConfig

CONFIG_PATH = Path.home() / ".config" / "regtrack" / "config.toml"


class RegtrackSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REGTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tracker: str | None = None  # profile name

    # GitHub
    github_token: SecretStr | None = None
    github_auth: str = "token"  # "token" | "gh-cli"
    org: str | None = None
    repo: str | None = None

    # Behaviour
    dry_run: bool = False
    dry_run_scope: DryRunScope = DryRunScope.ALL
    label: str = "auto:perf"
    stale_after_days: int = 10

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Profile values arrive as init kwargs; env vars and .env override them
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def operation_config(self) -> OperationConfig:
        return OperationConfig(
            org=self.org or "",
            repo=self.repo or "",
            dry_run=self.dry_run,
            dry_run_scope=self.dry_run_scope,
        )

    def templates(self) -> IssueTemplates:
        return IssueTemplates(label=self.label, stale_after=timedelta(days=self.stale_after_days))


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/regtrack/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(tracker: str | None = None) -> RegtrackSettings:
    """Resolve the active tracker profile and return a fully populated RegtrackSettings.

    Precedence (highest to lowest):
    1. tracker argument (--tracker CLI flag)
    2. REGTRACK_DEFAULT_TRACKER env var
    3. default_tracker key in ~/.config/regtrack/config.toml
    4. First profile defined in ~/.config/regtrack/config.toml

    Environment variables always override values from the profile block.
    """
    toml_config = _load_toml()

    active = (
        tracker
        or os.environ.get("REGTRACK_DEFAULT_TRACKER")
        or toml_config.get("default_tracker")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        elif active not in toml_config:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    settings = RegtrackSettings(**profile_defaults)

    if not settings.org or not settings.repo:
        typer.echo(
            "Missing repository. Set REGTRACK_ORG and REGTRACK_REPO or "
            f"org/repo in the [{active or 'profile'}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)
    if settings.github_auth == "token" and not settings.github_token:
        typer.echo(
            "Missing GitHub credentials. Set REGTRACK_GITHUB_TOKEN or "
            f"github_token in the [{active or 'profile'}] section of {CONFIG_PATH}, "
            'or set github_auth = "gh-cli" to use the gh CLI.'
        )
        raise typer.Exit(1)

    return settings

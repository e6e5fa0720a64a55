"""Pydantic schemas for vpm configuration.

Settings are read from (highest priority first):
- VPM_* environment variables
- the YAML config file (~/.config/vpm/config.yaml by default)
- built-in defaults
"""

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_HOST = "github.com"
DEFAULT_JOBS = 8
DEFAULT_PLUGINS_SUBDIR = "bundle"
DEFAULT_MANIFEST_NAME = "plugins.txt"


class Settings(BaseSettings):
    """Runtime configuration for vpm."""

    model_config = SettingsConfigDict(
        env_prefix="VPM_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    editor_root: Path = Path("~/.vim")
    plugins_dir: Path | None = None
    manifest: Path | None = None
    host: str = DEFAULT_HOST
    jobs: int = Field(default=DEFAULT_JOBS, ge=1)
    editor: str | None = Field(
        default=None,
        validation_alias=AliasChoices("VPM_EDITOR", "VISUAL", "EDITOR"),
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Values from the config file arrive as init kwargs; the environment wins.
        return (env_settings, init_settings)

    @field_validator("editor_root", "plugins_dir", "manifest", mode="after")
    @classmethod
    def expand_home(cls, value: Path | None) -> Path | None:
        """Expand a leading ~ in configured paths."""
        if value is None:
            return None
        return value.expanduser()

    @field_validator("host")
    @classmethod
    def strip_host(cls, value: str) -> str:
        """Normalize the shorthand host (no scheme, no trailing slash)."""
        host = value.strip().rstrip("/")
        if "://" in host:
            host = host.split("://", 1)[1]
        if not host:
            raise ValueError("host must not be empty")
        return host

    @property
    def plugins_root(self) -> Path:
        """Directory holding one subdirectory (or symlink) per plugin."""
        if self.plugins_dir is not None:
            return self.plugins_dir
        return self.editor_root / DEFAULT_PLUGINS_SUBDIR

    @property
    def manifest_path(self) -> Path:
        """Path to the plugin manifest."""
        if self.manifest is not None:
            return self.manifest
        return self.editor_root / DEFAULT_MANIFEST_NAME

"""
Typed settings management using pydantic-settings.

Settings are grouped into small nested sections, each of which reads its own
environment variables (and the project's ``.env`` file):

- ``TelemetrySettings``: ``AGENT_PRO_TELEMETRY_ENABLED`` gates usage logging
- ``PathSettings``: XDG-aware per-user storage and state locations
- ``BundleSettings``: where the shipped resource bundle lives and its version

Usage:
    from agent_pro.settings import get_settings

    settings = get_settings()
    if settings.telemetry.enabled:
        ...
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Bundle shipped inside the package
DEFAULT_BUNDLE_ROOT = Path(__file__).parent / "bundle"

RESOURCES_DIRNAME = "resources"
STATE_FILENAME = "state.json"


def _get_xdg_dir(env_var: str) -> Path:
    """Get XDG directory, defaulting to ~/.agent_pro if not set."""
    xdg_base = os.getenv(env_var)
    if xdg_base:
        return Path(xdg_base) / "agent_pro"
    return Path.home() / ".agent_pro"


def _package_version() -> str:
    from agent_pro import __version__

    return __version__


# =============================================================================
# Telemetry
# =============================================================================


class TelemetrySettings(BaseSettings):
    """Local usage analytics. Does not affect resource synchronization."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_PRO_TELEMETRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Record per-tool invocation counts in the state store",
    )


# =============================================================================
# Paths
# =============================================================================


class PathSettings(BaseSettings):
    """XDG-compliant path configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_PRO_",
        extra="ignore",
    )

    # Computed at runtime based on XDG environment variables
    @property
    def data_dir(self) -> Path:
        """XDG_DATA_HOME/agent_pro or ~/.agent_pro"""
        return _get_xdg_dir("XDG_DATA_HOME")

    @property
    def state_dir(self) -> Path:
        """XDG_STATE_HOME/agent_pro or ~/.agent_pro"""
        return _get_xdg_dir("XDG_STATE_HOME")

    @property
    def storage_dir(self) -> Path:
        """Per-user storage root that receives the synchronized bundle."""
        return self.data_dir / "globalStorage"

    @property
    def resources_dir(self) -> Path:
        return self.storage_dir / RESOURCES_DIRNAME

    @property
    def state_file(self) -> Path:
        return self.state_dir / STATE_FILENAME

    def ensure_directories(self) -> None:
        """Create all necessary directories with secure permissions."""
        for directory in [self.data_dir, self.state_dir, self.storage_dir]:
            directory.mkdir(parents=True, exist_ok=True, mode=0o700)


# =============================================================================
# Bundle
# =============================================================================


class BundleSettings(BaseSettings):
    """Location and version of the resource bundle to install."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_PRO_BUNDLE_",
        extra="ignore",
    )

    root: Path = Field(
        default=DEFAULT_BUNDLE_ROOT,
        description="Directory holding agents/, prompts/, skills/, ...",
    )
    version: str = Field(
        default_factory=_package_version,
        description="Version recorded in the state store after a sync",
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("bundle version must not be empty")
        return v


# =============================================================================
# Master Settings
# =============================================================================


class Settings(BaseSettings):
    """Master settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AGENT_PRO_",
        extra="ignore",
        case_sensitive=False,
    )

    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    bundle: BundleSettings = Field(default_factory=BundleSettings)

    def ensure_directories(self) -> None:
        """Create all necessary directories."""
        self.paths.ensure_directories()


# =============================================================================
# Cached Singleton Accessors
# =============================================================================


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    The settings are loaded once and cached for the process lifetime.
    To reload, call clear_settings_cache() first.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""
    get_settings.cache_clear()

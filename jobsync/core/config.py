"""
jobsync configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code, e.g. CLI flags)
2. Environment variables (JOBSYNC_*)
3. Project config (./jobsync.toml)
4. User config (~/.jobsync/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    JOBSYNC_STORE_PATH → store.path
    JOBSYNC_AGENT_LABEL → agent.label
    JOBSYNC_PROFILE → sync.profile
    JOBSYNC_WORKSPACE → sync.workspace

The environment is only consulted here. The reconciler receives every
path it needs as an explicit argument.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from jobsync.core.errors import ConfigError

DEFAULT_AGENT_LABEL = "Jane"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class StoreConfig(BaseModel):
    """Where the external scheduler keeps its job store."""

    path: str = "~/.openclaw/cron/jobs.json"
    reference_name: str = "openclaw-cron-jobs.json"
    indent: int = 2


class AgentConfig(BaseModel):
    """Agent label substituted into generated job text."""

    label: str = DEFAULT_AGENT_LABEL


class SyncConfig(BaseModel):
    """Reconciliation defaults."""

    profile: str = "core"
    force: bool = False
    workspace: str = "."


class LoggingConfig(BaseModel):
    """Log file location and console verbosity."""

    dir: str = "~/.jobsync/logs"
    console_level: str = "WARNING"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class JobSyncConfig(BaseModel):
    """Root configuration for jobsync."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> JobSyncConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.jobsync/config.toml)
        user_config_path = user_path or Path.home() / ".jobsync" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./jobsync.toml)
        project_config_path = project_path or Path.cwd() / "jobsync.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return JobSyncConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def get_store_path(self) -> Path:
        """Resolved path of the job store file."""
        return Path(self.store.path).expanduser()

    def get_workspace(self) -> Path:
        """Resolved workspace directory."""
        return Path(self.sync.workspace).expanduser().resolve()

    def get_log_dir(self) -> Path:
        return Path(self.logging.dir).expanduser()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from JOBSYNC_* environment variables."""
    result: dict[str, Any] = {}

    # (section, key, convert); string fields pass through untouched
    env_mapping = {
        "JOBSYNC_STORE_PATH": ("store", "path", False),
        "JOBSYNC_AGENT_LABEL": ("agent", "label", False),
        "JOBSYNC_PROFILE": ("sync", "profile", False),
        "JOBSYNC_FORCE": ("sync", "force", True),
        "JOBSYNC_WORKSPACE": ("sync", "workspace", False),
        "JOBSYNC_LOG_DIR": ("logging", "dir", False),
        "JOBSYNC_LOG_LEVEL": ("logging", "console_level", False),
    }

    for env_var, (section, key, convert) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result.setdefault(section, {})[key] = _convert_value(value) if convert else value

    return result


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes", "1"):
        return True
    if value.lower() in ("false", "no", "0"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _substitute(value: str) -> str:
    for var_name in _ENV_PATTERN.findall(value):
        value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
    return value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            data[key] = _substitute(value)

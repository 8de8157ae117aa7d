"""Configuration: Pydantic models for shellwright settings."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = "~/.shellwright.json"


class SessionConfig(BaseModel):
    """Interactive session manager limits and timings.

    The settle intervals are best-effort heuristics: they bound how long
    ``start`` and ``write`` wait before snapshotting output, nothing more.
    """

    max_sessions: int = Field(default=10, ge=1, description="Concurrent session cap")
    max_output_lines: int = Field(
        default=1000, ge=1, description="Lines kept per session (oldest dropped first)"
    )
    start_settle_ms: int = Field(
        default=500, ge=0, description="Wait after spawn before returning initial output"
    )
    write_settle_ms: int = Field(
        default=300, ge=0, description="Wait after writing input before returning output"
    )
    read_poll_ms: int = Field(
        default=100, gt=0, description="Upper bound on each wait inside read"
    )
    read_timeout_ms: int = Field(
        default=5000, ge=0, description="Default read timeout when the caller gives none"
    )
    kill_grace_ms: int = Field(
        default=1000, ge=0, description="SIGTERM grace period before SIGKILL"
    )
    reap_interval_s: float = Field(
        default=300.0, gt=0, description="Period of the dead-session sweep"
    )


class ShellConfig(BaseModel):
    """One-shot shell and file tool settings."""

    default_timeout_ms: int = Field(default=30_000, gt=0)
    max_file_read_mb: int = Field(default=10, gt=0)


class ShellwrightConfig(BaseModel):
    """Top-level shellwright configuration."""

    sessions: SessionConfig = Field(default_factory=SessionConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    default_cwd: str = Field(
        default="~", description="Working directory when a call gives none"
    )

    @classmethod
    def load(cls, config_path: str | None = None) -> ShellwrightConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.  Without an explicit
        path, ``~/.shellwright.json`` is used when it exists.

        Env vars:
            SHELLWRIGHT_MAX_SESSIONS      - Concurrent interactive session cap
            SHELLWRIGHT_MAX_OUTPUT_LINES  - Lines kept per session
            SHELLWRIGHT_REAP_INTERVAL_S   - Dead-session sweep period (seconds)
            SHELLWRIGHT_DEFAULT_CWD       - Default working directory
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        path = Path(os.path.expanduser(config_path or DEFAULT_CONFIG_PATH))
        if path.is_file():
            with open(path) as f:
                config_data = json.load(f)
        elif config_path:
            raise FileNotFoundError(f"Config file not found: {path}")

        sessions = config_data.get("sessions", {})

        env_max_sessions = os.environ.get("SHELLWRIGHT_MAX_SESSIONS")
        if env_max_sessions:
            sessions["max_sessions"] = int(env_max_sessions)

        env_max_lines = os.environ.get("SHELLWRIGHT_MAX_OUTPUT_LINES")
        if env_max_lines:
            sessions["max_output_lines"] = int(env_max_lines)

        env_reap = os.environ.get("SHELLWRIGHT_REAP_INTERVAL_S")
        if env_reap:
            sessions["reap_interval_s"] = float(env_reap)

        if sessions:
            config_data["sessions"] = sessions

        env_cwd = os.environ.get("SHELLWRIGHT_DEFAULT_CWD")
        if env_cwd:
            config_data["default_cwd"] = env_cwd

        return cls.model_validate(config_data)

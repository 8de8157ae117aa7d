"""Shared fixtures for shellwright tests."""

from __future__ import annotations

import shlex
import sys
from collections.abc import AsyncIterator

import pytest

from shellwright.config import SessionConfig
from shellwright.interactive.manager import SessionManager


def python_cmd(*args: str) -> str:
    """Shell command line running the current interpreter with ``args``."""
    return shlex.join([sys.executable, *args])


SLEEPER = python_cmd("-c", "import time; time.sleep(30)")


def fast_config(**overrides: object) -> SessionConfig:
    values: dict[str, object] = {
        "start_settle_ms": 100,
        "write_settle_ms": 300,
        "read_poll_ms": 20,
        "kill_grace_ms": 300,
    }
    values.update(overrides)
    return SessionConfig.model_validate(values)


@pytest.fixture
async def manager() -> AsyncIterator[SessionManager]:
    async with SessionManager(fast_config()) as m:
        yield m

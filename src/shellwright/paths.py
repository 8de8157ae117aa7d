"""Path normalization for caller-supplied paths."""

from __future__ import annotations

import os


def normalize_path(path: str, base: str | None = None) -> str:
    """Expand ``~`` and environment variables, then make ``path`` absolute.

    Relative paths resolve against ``base`` (itself normalized) or the
    process working directory.
    """
    result = os.path.expanduser(os.path.expandvars(path))
    if not os.path.isabs(result):
        root = normalize_path(base) if base else os.getcwd()
        result = os.path.join(root, result)
    return os.path.normpath(result)


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 B"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            break
        value /= 1024
    else:
        unit = "TB"
    return f"{round(value, 1):g} {unit}"

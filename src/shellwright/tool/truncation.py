"""Output truncation and sanitization for captured process output."""

from __future__ import annotations

import re

MAX_LINES = 2000
MAX_BYTES = 50 * 1024  # 50KB

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]|\x1b\][^\x07]*\x07")


def truncate_output(
    text: str,
    max_lines: int = MAX_LINES,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Bound output before it is handed back to a caller.

    Keeps the tail of the text (the most recent output is usually the
    interesting part) and prefixes a notice describing what was dropped.
    """
    if not text:
        return text

    lines = text.split("\n")
    byte_count = len(text.encode("utf-8", errors="replace"))

    if len(lines) <= max_lines and byte_count <= max_bytes:
        return text

    if len(lines) > max_lines:
        kept = lines[-max_lines:]
        skipped = len(lines) - max_lines
    else:
        kept = lines
        skipped = 0

    result = "\n".join(kept)
    result_bytes = result.encode("utf-8", errors="replace")
    if len(result_bytes) > max_bytes:
        # Keep the tail, cut at a safe UTF-8 boundary
        result = result_bytes[-max_bytes:].decode("utf-8", errors="ignore")
        skipped_bytes = len(result_bytes) - max_bytes
    else:
        skipped_bytes = 0

    notice_parts = []
    if skipped > 0:
        notice_parts.append(f"{skipped} lines skipped")
    if skipped_bytes > 0:
        notice_parts.append(f"{skipped_bytes} bytes skipped")

    notice = (
        f"[Output truncated: {', '.join(notice_parts)}. "
        f"Total: {len(lines)} lines, {byte_count} bytes]"
    )
    return f"{notice}\n{result}"


def strip_ansi(text: str) -> str:
    """Strip ANSI CSI and OSC escape sequences from text."""
    return _ANSI_RE.sub("", text)


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def sanitize_binary_output(text: str) -> str:
    """Remove binary garbage from output.

    Keeps printable chars, tabs, newlines, and carriage returns.
    Strips everything else (control chars, undefined code points, format chars).
    """
    cleaned = []
    for ch in text:
        cp = ord(ch)
        if ch in ("\t", "\n", "\r"):
            cleaned.append(ch)
        elif cp >= 32 and cp not in range(0x7F, 0xA0):
            # Skip C1 controls and the interlinear annotation format chars
            if cp not in range(0xFFF9, 0xFFFC):
                cleaned.append(ch)
    return "".join(cleaned)


def clean_output(text: str) -> str:
    """Full cleanup pipeline applied to raw decoded process output."""
    return sanitize_binary_output(strip_ansi(normalize_newlines(text)))

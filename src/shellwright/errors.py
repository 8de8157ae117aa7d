"""Error taxonomy: stable codes shared by the session manager and tools."""

from __future__ import annotations

import enum
from typing import Any, ClassVar


class ErrorCode(enum.StrEnum):
    # Interactive session manager
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    PROCESS_DIED = "PROCESS_DIED"
    PROCESS_ERROR = "PROCESS_ERROR"
    WRITE_ERROR = "WRITE_ERROR"
    INVALID_PARAMS = "INVALID_PARAMS"
    # Filesystem / one-shot shell collaborators
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_A_FILE = "NOT_A_FILE"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    TIMEOUT = "TIMEOUT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    TEXT_NOT_FOUND = "TEXT_NOT_FOUND"
    PROCESS_NOT_FOUND = "PROCESS_NOT_FOUND"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ShellwrightError(Exception):
    """Base error carrying a stable code, a message and optional details.

    Subclasses pin ``default_code``; the base class can be raised with any
    code for collaborator failures (see ``from_os_error``).
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.code = code or self.default_code

    def to_dict(self) -> dict[str, Any]:
        """Structured error payload returned to callers."""
        payload: dict[str, Any] = {
            "error": True,
            "code": str(self.code),
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload

    @classmethod
    def from_os_error(cls, err: OSError, path: str | None = None) -> ShellwrightError:
        """Map an ``OSError`` to a collaborator error code."""
        where = f": {path}" if path else ""
        if isinstance(err, FileNotFoundError):
            return cls(f"File or directory not found{where}", code=ErrorCode.FILE_NOT_FOUND)
        if isinstance(err, PermissionError):
            return cls(f"Permission denied{where}", code=ErrorCode.PERMISSION_DENIED)
        if isinstance(err, NotADirectoryError):
            return cls(f"Not a directory{where}", code=ErrorCode.NOT_A_DIRECTORY)
        if isinstance(err, IsADirectoryError):
            return cls(f"Is a directory{where}", code=ErrorCode.NOT_A_FILE)
        if isinstance(err, FileExistsError):
            return cls(f"Already exists{where}", code=ErrorCode.ALREADY_EXISTS)
        if isinstance(err, TimeoutError):
            return cls(f"Operation timed out{where}", code=ErrorCode.TIMEOUT)
        return cls(
            err.strerror or str(err) or f"Unknown error{where}",
            details={"errno": err.errno},
            code=ErrorCode.UNKNOWN_ERROR,
        )


class SessionLimitError(ShellwrightError):
    default_code = ErrorCode.LIMIT_EXCEEDED


class SessionNotFoundError(ShellwrightError):
    default_code = ErrorCode.NOT_FOUND


class ProcessDiedError(ShellwrightError):
    default_code = ErrorCode.PROCESS_DIED


class ProcessSpawnError(ShellwrightError):
    default_code = ErrorCode.PROCESS_ERROR


class WriteError(ShellwrightError):
    default_code = ErrorCode.WRITE_ERROR


class InvalidParamsError(ShellwrightError):
    default_code = ErrorCode.INVALID_PARAMS

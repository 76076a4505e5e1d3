"""SARotate exception classes and error kinds."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Every failure the rotator knows how to classify."""

    NOT_FOUND = "not_found"
    EMPTY_CREDENTIAL_SET = "empty_credential_set"
    MALFORMED_CREDENTIAL = "malformed_credential"
    RECOVERY_LOOKUP_FAILED = "recovery_lookup_failed"
    SWAP_COMMAND_FAILED = "swap_command_failed"
    RESULT_PARSE_FAILED = "result_parse_failed"
    NOTIFICATION_DISPATCH_FAILED = "notification_dispatch_failed"


_FATAL_KINDS = frozenset(
    {
        ErrorKind.NOT_FOUND,
        ErrorKind.EMPTY_CREDENTIAL_SET,
        ErrorKind.MALFORMED_CREDENTIAL,
        ErrorKind.RESULT_PARSE_FAILED,
    }
)


def is_fatal(kind: ErrorKind) -> bool:
    """Return True if an error of this kind must abort the process."""
    return kind in _FATAL_KINDS


class SARotateError(RuntimeError):
    """Base exception for SARotate errors."""

    kind: ErrorKind | None = None


class UserError(SARotateError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class CommandFailureError(SARotateError):
    """Command failed - error message already reported, just need to exit."""

    def __init__(self, rc: int = 1):
        super().__init__("")
        self.rc = rc


class CredentialDirectoryNotFoundError(SARotateError):
    """A configured credential directory does not exist."""

    kind = ErrorKind.NOT_FOUND


class EmptyCredentialSetError(SARotateError):
    """A credential directory exists but holds no usable credential files."""

    kind = ErrorKind.EMPTY_CREDENTIAL_SET


class MalformedCredentialError(SARotateError):
    """A credential file could not be parsed into a credential record."""

    kind = ErrorKind.MALFORMED_CREDENTIAL


class ResultParseError(SARotateError):
    """rclone reported success but its result payload has an unexpected shape."""

    kind = ErrorKind.RESULT_PARSE_FAILED

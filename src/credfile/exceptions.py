"""Exception hierarchy for credfile.

All exceptions inherit from :class:`CredfileError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`credfile.exit_codes`.
The top-level error handler in :func:`credfile.app.main` catches
``CredfileError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Messages never contain plaintext credential values; they name the field,
machine, or secret that failed instead.

Subclass hierarchy::

    CredfileError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SecretError         (exit 3)
    +-- ParseError          (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from credfile.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_SECRET_ERROR,
)


class CredfileError(Exception):
    """Base exception for all credfile errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`credfile.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CredfileError):
    """Raised for missing or malformed values at the API boundary (e.g. an empty hostname)."""

    exit_code = EXIT_INVALID_USAGE


class SecretError(CredfileError):
    """Raised when a secret handle cannot be resolved to plaintext."""

    exit_code = EXIT_SECRET_ERROR


class ParseError(CredfileError):
    """Raised when an auto-login configuration cannot be parsed.

    Args:
        message: Human-readable error description.
        expected: The token the grammar expected at the failure point.
        line: 1-based line number of the failure point.
        column: 1-based column number of the failure point.
    """

    exit_code = EXIT_PARSE_ERROR

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.line = line
        self.column = column


class ConfigError(CredfileError):
    """Raised for configuration problems (invalid JSON, bad settings, unreadable input files)."""

    exit_code = EXIT_GENERIC_FAILURE

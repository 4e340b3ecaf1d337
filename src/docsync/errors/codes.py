"""Stable error codes for docsync failures.

Codes follow kebab-case naming and remain stable across releases so that
wrappers scripting the CLI can match on them.

Examples
--------
>>> from docsync.errors.codes import ErrorCode
>>> str(ErrorCode.PRIMARY_PARSE_ERROR)
'primary-parse-error'
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

__all__ = ["ErrorCode", "ExitStatus"]


class ErrorCode(StrEnum):
    """Stable error codes for docsync exceptions.

    Attributes
    ----------
    RUNTIME_ERROR
        Unclassified failure.
    CONFIGURATION_ERROR
        Settings validation failed or a grammar package is missing.
    PATTERN_EXPANSION_ERROR
        A path pattern could not be expanded.
    FILE_OPERATION_ERROR
        Reading, decoding or writing a file failed.
    PRIMARY_PARSE_ERROR
        A Rust source contains syntax errors.
    SECONDARY_PARSE_ERROR
        A C source could not be parsed.
    RENDER_ERROR
        A structured comment could not be rendered.
    OVERLAPPING_RANGES
        Two insertion sites in one file overlap.
    """

    RUNTIME_ERROR = "runtime-error"
    CONFIGURATION_ERROR = "configuration-error"
    PATTERN_EXPANSION_ERROR = "pattern-expansion-error"
    FILE_OPERATION_ERROR = "file-operation-error"
    PRIMARY_PARSE_ERROR = "primary-parse-error"
    SECONDARY_PARSE_ERROR = "secondary-parse-error"
    RENDER_ERROR = "render-error"
    OVERLAPPING_RANGES = "overlapping-ranges"

    def __str__(self) -> str:
        """Return the code value as a string.

        Returns
        -------
        str
            The error code value (e.g., "render-error").
        """
        return self.value


class ExitStatus(IntEnum):
    """Process exit codes for the CLI."""

    SUCCESS = 0
    ERROR = 1
    CONFIG = 2

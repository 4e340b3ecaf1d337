"""Typed exception hierarchy for documentation synchronization.

All docsync exceptions inherit from :class:`DocSyncError`, which carries a
stable :class:`~docsync.errors.codes.ErrorCode`, the process exit status the
CLI should use, and a structured context mapping.

Examples
--------
>>> from docsync.errors import ErrorCode, PrimaryParseError
>>> try:
...     raise PrimaryParseError("lib.rs:3:1: syntax error")
... except PrimaryParseError as e:
...     assert e.code == ErrorCode.PRIMARY_PARSE_ERROR
"""

from __future__ import annotations

from collections.abc import Mapping

from docsync.errors.codes import ErrorCode, ExitStatus

__all__ = [
    "ConfigurationError",
    "DocRenderError",
    "DocSyncError",
    "OverlappingRangesError",
    "PatternExpansionError",
    "PrimaryParseError",
    "SecondaryParseError",
    "SourceIOError",
]


class DocSyncError(Exception):
    """Base exception for all docsync errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Stable error code. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    exit_status : ExitStatus, optional
        Exit status used by the CLI. Defaults to ``ExitStatus.ERROR``.
    cause : Exception | None, optional
        Underlying exception. Defaults to None.
    context : Mapping[str, object] | None, optional
        Additional structured details (paths, positions). Defaults to None.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    exit_status : ExitStatus
        Exit status for the CLI.
    context : dict[str, object]
        Additional context dictionary for error details.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        exit_status: ExitStatus = ExitStatus.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_status = exit_status
        self.context = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return formatted error string.

        Returns
        -------
        str
            Formatted error string (e.g., "DocRenderError[render-error]: bad XML").
        """
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class ConfigurationError(DocSyncError):
    """Error during configuration validation or grammar loading.

    Examples
    --------
    >>> raise ConfigurationError("DOCSYNC_LOG_LEVEL must be a logging level name")
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            exit_status=ExitStatus.CONFIG,
            cause=cause,
            context=context,
        )


class PatternExpansionError(DocSyncError):
    """Raised when a primary or secondary path pattern cannot be expanded."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.PATTERN_EXPANSION_ERROR,
            cause=cause,
            context=context,
        )


class SourceIOError(DocSyncError):
    """Raised when a source file cannot be read, decoded or written."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.FILE_OPERATION_ERROR,
            cause=cause,
            context=context,
        )


class PrimaryParseError(DocSyncError):
    """Raised when a Rust source file contains syntax errors.

    One malformed primary file aborts the whole batch.
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.PRIMARY_PARSE_ERROR,
            cause=cause,
            context=context,
        )


class SecondaryParseError(DocSyncError):
    """Raised when a C source file cannot be parsed."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.SECONDARY_PARSE_ERROR,
            cause=cause,
            context=context,
        )


class DocRenderError(DocSyncError):
    """Raised when a structured comment cannot be rendered.

    Examples
    --------
    >>> raise DocRenderError("mismatched tag: line 1, column 20", context={"name": "c_foo"})
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.RENDER_ERROR,
            cause=cause,
            context=context,
        )


class OverlappingRangesError(DocSyncError):
    """Raised when two insertion sites in one file overlap or leave the buffer."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.OVERLAPPING_RANGES,
            cause=cause,
            context=context,
        )

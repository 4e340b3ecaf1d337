"""Exception hierarchy for docsync.

Examples
--------
>>> from docsync.errors import DocSyncError, ErrorCode
>>> try:
...     raise DocSyncError("Operation failed", code=ErrorCode.RUNTIME_ERROR)
... except DocSyncError as e:
...     assert e.exit_status == 1
"""

from __future__ import annotations

from docsync.errors.codes import ErrorCode, ExitStatus
from docsync.errors.exceptions import (
    ConfigurationError,
    DocRenderError,
    DocSyncError,
    OverlappingRangesError,
    PatternExpansionError,
    PrimaryParseError,
    SecondaryParseError,
    SourceIOError,
)

__all__ = [
    "ConfigurationError",
    "DocRenderError",
    "DocSyncError",
    "ErrorCode",
    "ExitStatus",
    "OverlappingRangesError",
    "PatternExpansionError",
    "PrimaryParseError",
    "SecondaryParseError",
    "SourceIOError",
]

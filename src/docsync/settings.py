"""Runtime settings with typed configuration and fail-fast validation.

Settings are read from ``DOCSYNC_*`` environment variables through
``pydantic_settings``. Validation failures surface as
:class:`~docsync.errors.ConfigurationError` so the CLI can report them with a
dedicated exit status.

Examples
--------
>>> from docsync.settings import load_settings
>>> settings = load_settings(doc_marker="//!")
>>> settings.doc_marker
'//!'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docsync.errors import ConfigurationError
from docsync.logging import get_logger

__all__ = ["DocSyncSettings", "RunConfig", "load_settings"]

logger = get_logger(__name__)


class DocSyncSettings(BaseSettings):
    """Tool configuration (``DOCSYNC_*`` namespace)."""

    model_config = SettingsConfigDict(env_prefix="DOCSYNC_", extra="forbid", frozen=True)

    log_level: str = Field(
        default="WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    encoding: str = Field(default="utf-8", description="Encoding of primary and secondary sources")
    doc_marker: str = Field(
        default="///", min_length=1, description="Comment marker prefixed to rendered lines"
    )
    backup_suffix: str = Field(
        default=".bk", description="Extension given to backups of rewritten files"
    )
    strict_secondary_parse: bool = Field(
        default=False,
        description="Treat syntax errors in secondary sources as fatal instead of warnings",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if not isinstance(logging.getLevelName(normalized), int):
            msg = f"unknown log level {value!r}"
            raise ValueError(msg)
        return normalized

    @field_validator("backup_suffix")
    @classmethod
    def _check_backup_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2 or "/" in value:  # noqa: PLR2004
            msg = f"backup suffix must look like '.ext', got {value!r}"
            raise ValueError(msg)
        return value


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Options for one synchronization run, as given on the command line.

    Attributes
    ----------
    rust_patterns : tuple[str, ...]
        Glob patterns selecting the primary (Rust) corpus.
    c_patterns : tuple[str, ...]
        Glob patterns selecting the secondary (C) corpus.
    in_place : bool
        Rewrite changed primary files instead of printing them.
    backup : bool
        Write the untouched original next to each rewritten file first.
    """

    rust_patterns: tuple[str, ...] = ()
    c_patterns: tuple[str, ...] = ()
    in_place: bool = False
    backup: bool = False
    settings: DocSyncSettings = field(default_factory=lambda: load_settings())

    @property
    def write_backups(self) -> bool:
        """Backups only apply to in-place runs."""
        return self.in_place and self.backup


def load_settings(**overrides: object) -> DocSyncSettings:
    """Load :class:`DocSyncSettings` with optional overrides.

    Parameters
    ----------
    **overrides : object
        Field values taking precedence over the environment.

    Returns
    -------
    DocSyncSettings
        Validated settings.

    Raises
    ------
    ConfigurationError
        If any value fails validation.
    """
    try:
        return DocSyncSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        logger.exception(
            "Settings validation failed",
            extra={"operation": "settings", "error_type": type(exc).__name__},
        )
        raise ConfigurationError(msg, cause=exc, context={"validation_error": str(exc)}) from exc

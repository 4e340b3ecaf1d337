"""Shared pytest fixtures for the docsync test suite."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo handlers installed by ``setup_logging`` during CLI tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _clean_docsync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DOCSYNC_LOG_LEVEL",
        "DOCSYNC_ENCODING",
        "DOCSYNC_DOC_MARKER",
        "DOCSYNC_BACKUP_SUFFIX",
        "DOCSYNC_STRICT_SECONDARY_PARSE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing ``content`` to ``tmp_path / name``."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write

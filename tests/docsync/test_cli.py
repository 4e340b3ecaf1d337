"""Tests for the docsync command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from docsync.cli import app
from docsync.comments import StructuredComment

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

runner = CliRunner()

SOURCE = '#[doc(alias = "c_foo")]\npub fn foo() {}\n'
HEADER = "/**\n * Does foo.\n */\nvoid c_foo(void);\n"
EXPECTED = '/// Does foo.\n#[doc(alias = "c_foo")]\npub fn foo() {}\n'


@pytest.fixture
def files(write_file: Callable[[str, str], Path]) -> tuple[Path, Path]:
    return write_file("lib.rs", SOURCE), write_file("foo.h", HEADER)


def test_help_lists_options() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for option in ("--in-place", "--backup", "--c-srcs"):
        assert option in result.stdout


def test_prints_path_and_content(files: tuple[Path, Path]) -> None:
    rust, header = files
    result = runner.invoke(app, [str(rust), "-c", str(header)])
    assert result.exit_code == 0, result.output
    assert result.stdout == f"{rust}:\n{EXPECTED}\n"
    assert rust.read_text(encoding="utf-8") == SOURCE


def test_repeated_c_sources(files: tuple[Path, Path], write_file: Callable[[str, str], Path]) -> None:
    rust, header = files
    other = write_file("other.h", "/** Other. */\nvoid c_other(void);\n")
    result = runner.invoke(app, [str(rust), "--c-srcs", str(other), "--c-srcs", str(header)])
    assert result.exit_code == 0, result.output
    assert EXPECTED in result.stdout


def test_in_place_rewrites_without_output(files: tuple[Path, Path]) -> None:
    rust, header = files
    result = runner.invoke(app, ["-i", str(rust), "-c", str(header)])
    assert result.exit_code == 0, result.output
    assert result.stdout == ""
    assert rust.read_text(encoding="utf-8") == EXPECTED
    assert not rust.with_suffix(".bk").exists()


def test_in_place_backup(files: tuple[Path, Path]) -> None:
    rust, header = files
    result = runner.invoke(app, ["-i", "-b", str(rust), "-c", str(header)])
    assert result.exit_code == 0, result.output
    assert rust.with_suffix(".bk").read_text(encoding="utf-8") == SOURCE
    assert rust.read_text(encoding="utf-8") == EXPECTED


def test_backup_without_in_place_only_warns(files: tuple[Path, Path]) -> None:
    rust, header = files
    result = runner.invoke(app, ["-b", str(rust), "-c", str(header)])
    assert result.exit_code == 0, result.output
    assert not rust.with_suffix(".bk").exists()
    assert rust.read_text(encoding="utf-8") == SOURCE


def test_empty_match_exits_zero(tmp_path: Path) -> None:
    result = runner.invoke(app, [str(tmp_path / "*.rs")])
    assert result.exit_code == 0
    assert result.stdout == ""


def test_parse_error_exits_non_zero(write_file: Callable[[str, str], Path]) -> None:
    broken = write_file("broken.rs", "fn broken( {\n")
    result = runner.invoke(app, [str(broken)])
    assert result.exit_code == 1
    assert "unable to parse Rust source" in result.output
    assert f"{broken}:" in result.output


def test_invalid_configuration_exits_with_config_status(
    files: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    rust, _ = files
    monkeypatch.setenv("DOCSYNC_BACKUP_SUFFIX", "bk")
    result = runner.invoke(app, [str(rust)])
    assert result.exit_code == 2
    assert "error:" in result.output


def test_unknown_log_level_is_a_configuration_error(files: tuple[Path, Path]) -> None:
    rust, _ = files
    result = runner.invoke(app, ["--log-level", "chatty", str(rust)])
    assert result.exit_code == 2


def test_render_error_exits_without_output(
    files: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    rust, header = files
    monkeypatch.setattr(
        "docsync.resolver.parse_comment",
        lambda texts, name, kind: StructuredComment(name=name, kind=kind, xml="<Function>"),
    )
    result = runner.invoke(app, [str(rust), "-c", str(header)])
    assert result.exit_code == 1
    assert f"{rust}:" not in result.output
    assert "Unable to render documentation for 'c_foo'" in result.output

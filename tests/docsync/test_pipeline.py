"""Tests for the scan, resolve and splice run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsync.comments import CommentKind, StructuredComment
from docsync.errors import DocRenderError, PatternExpansionError, PrimaryParseError
from docsync.paths import expand_patterns
from docsync.pipeline import run
from docsync.settings import RunConfig, load_settings

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

HEADER = (
    "/**\n"
    " * Counts items.\n"
    " * \\param n limit\n"
    " * \\return the count\n"
    " */\n"
    "size_t c_count(size_t n);\n"
    "\n"
    "/// Does foo.\n"
    "void c_foo(void);\n"
)

LIB = (
    "pub struct Bag;\n"
    "\n"
    "impl Bag {\n"
    "    /// Stale docs.\n"
    '    #[doc(alias = "c_count")]\n'
    "    pub fn count(&self, n: usize) -> usize { n }\n"
    "}\n"
    "\n"
    '#[doc(alias = "c_foo")]\n'
    "pub fn foo() {}\n"
    "\n"
    '#[doc(alias = "c_missing")]\n'
    "pub fn missing() {}\n"
)

EXPECTED = (
    "pub struct Bag;\n"
    "\n"
    "impl Bag {\n"
    "    /// Counts items.\n"
    "    ///\n"
    "    /// # Parameters\n"
    "    ///\n"
    "    /// * `n`\n"
    "    ///\n"
    "    ///   limit\n"
    "    ///\n"
    "    /// # Returns\n"
    "    ///\n"
    "    /// the count\n"
    '    #[doc(alias = "c_count")]\n'
    "    pub fn count(&self, n: usize) -> usize { n }\n"
    "}\n"
    "\n"
    "/// Does foo.\n"
    '#[doc(alias = "c_foo")]\n'
    "pub fn foo() {}\n"
    "\n"
    '#[doc(alias = "c_missing")]\n'
    "pub fn missing() {}\n"
)


@pytest.fixture
def corpus(write_file: Callable[[str, str], Path]) -> tuple[Path, Path]:
    return write_file("src/lib.rs", LIB), write_file("include/api.h", HEADER)


def _config(rust: Path, c: Path, **kwargs: bool) -> RunConfig:
    return RunConfig(
        rust_patterns=(str(rust),), c_patterns=(str(c),), settings=load_settings(), **kwargs
    )


def test_run_prints_spliced_sources(corpus: tuple[Path, Path]) -> None:
    rust, c = corpus
    emitted: list[str] = []
    report = run(_config(rust, c), emit=emitted.append)
    assert emitted == [f"{rust}:\n{EXPECTED}"]
    assert report.resolved == ["c_count", "c_foo"]
    assert report.unresolved == ["c_missing"]
    assert report.changed == [rust]
    assert rust.read_text(encoding="utf-8") == LIB


def test_run_is_idempotent(corpus: tuple[Path, Path]) -> None:
    rust, c = corpus
    run(_config(rust, c, in_place=True), emit=pytest.fail)
    assert rust.read_text(encoding="utf-8") == EXPECTED
    run(_config(rust, c, in_place=True), emit=pytest.fail)
    assert rust.read_text(encoding="utf-8") == EXPECTED


def test_in_place_with_backup(corpus: tuple[Path, Path]) -> None:
    rust, c = corpus
    report = run(_config(rust, c, in_place=True, backup=True), emit=pytest.fail)
    (outcome,) = report.files
    assert outcome.written
    assert outcome.backup == rust.with_suffix(".bk")
    assert rust.with_suffix(".bk").read_text(encoding="utf-8") == LIB
    assert rust.read_text(encoding="utf-8") == EXPECTED


def test_unchanged_files_are_not_rewritten(write_file: Callable[[str, str], Path]) -> None:
    rust = write_file("plain.rs", "fn plain() {}\n")
    c = write_file("api.h", HEADER)
    report = run(_config(rust, c, in_place=True, backup=True), emit=pytest.fail)
    (outcome,) = report.files
    assert not outcome.changed
    assert not outcome.written
    assert not rust.with_suffix(".bk").exists()


def test_unchanged_files_are_still_printed(write_file: Callable[[str, str], Path]) -> None:
    rust = write_file("plain.rs", "fn plain() {}\n")
    emitted: list[str] = []
    run(RunConfig(rust_patterns=(str(rust),), settings=load_settings()), emit=emitted.append)
    assert emitted == [f"{rust}:\nfn plain() {{}}\n"]


def test_shared_alias_documents_every_declaration(write_file: Callable[[str, str], Path]) -> None:
    rust = write_file(
        "shared.rs",
        'trait Foo {\n    #[doc(alias = "c_foo")]\n    fn foo(&self);\n}\n'
        'impl Foo for () {\n    #[doc(alias = "c_foo")]\n    fn foo(&self) {}\n}\n',
    )
    c = write_file("api.h", HEADER)
    emitted: list[str] = []
    run(_config(rust, c), emit=emitted.append)
    assert emitted[0].count("    /// Does foo.\n    #[doc(alias") == 2


def test_empty_match_succeeds_silently(tmp_path: Path) -> None:
    emitted: list[str] = []
    report = run(
        RunConfig(rust_patterns=(str(tmp_path / "*.rs"),), settings=load_settings()),
        emit=emitted.append,
    )
    assert emitted == []
    assert report.files == []


def test_primary_parse_error_aborts(write_file: Callable[[str, str], Path]) -> None:
    good = write_file("a.rs", '#[doc(alias = "c_foo")]\nfn foo() {}\n')
    write_file("b.rs", "fn broken( {\n")
    emitted: list[str] = []
    with pytest.raises(PrimaryParseError):
        run(
            RunConfig(rust_patterns=(str(good.parent / "*.rs"),), settings=load_settings()),
            emit=emitted.append,
        )
    assert emitted == []


def test_expand_patterns_sorts_and_deduplicates(write_file: Callable[[str, str], Path]) -> None:
    b = write_file("src/b.rs", "")
    a = write_file("src/a.rs", "")
    nested = write_file("src/deep/c.rs", "")
    root = a.parent
    assert expand_patterns([str(root / "*.rs"), str(a), str(root / "**" / "*.rs")]) == [a, b, nested]


def test_expand_patterns_rejects_empty_pattern() -> None:
    with pytest.raises(PatternExpansionError):
        expand_patterns([""])


def test_unresolved_aliases_leave_sources_byte_identical(
    write_file: Callable[[str, str], Path],
) -> None:
    text = 'impl S {\r\n    /// Keep.\r\n    #[doc(alias = "c_nowhere")]\r\n    fn f() {}\r\n}\r\n'
    rust = write_file("crlf.rs", "")
    rust.write_bytes(text.encode("utf-8"))
    c = write_file("api.h", HEADER)
    emitted: list[str] = []
    report = run(_config(rust, c), emit=emitted.append)
    assert emitted == [f"{rust}:\n{text}"]
    assert report.unresolved == ["c_nowhere"]


def _unrenderable(texts: list[str], name: str, kind: CommentKind) -> StructuredComment:
    return StructuredComment(name=name, kind=kind, xml="<Function><Abstract>")


def test_render_error_aborts_before_output(
    corpus: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    rust, c = corpus
    monkeypatch.setattr("docsync.resolver.parse_comment", _unrenderable)
    emitted: list[str] = []
    with pytest.raises(DocRenderError, match="c_count"):
        run(_config(rust, c), emit=emitted.append)
    assert emitted == []
    with pytest.raises(DocRenderError):
        run(_config(rust, c, in_place=True, backup=True), emit=emitted.append)
    assert rust.read_text(encoding="utf-8") == LIB
    assert not rust.with_suffix(".bk").exists()


def test_insertions_follow_crlf_line_endings(write_file: Callable[[str, str], Path]) -> None:
    rust = write_file("crlf.rs", "")
    rust.write_bytes(LIB.replace("\n", "\r\n").encode("utf-8"))
    c = write_file("api.h", HEADER)
    run(_config(rust, c, in_place=True), emit=pytest.fail)
    assert rust.read_bytes() == EXPECTED.replace("\n", "\r\n").encode("utf-8")

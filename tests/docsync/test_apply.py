"""Tests for reindenting and splicing documentation into sources."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsync.apply import Replacement, apply_docs, detect_newline, reindent, splice, write_result
from docsync.errors import OverlappingRangesError
from docsync.positions import InsertionSite, TextRange

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("body", "column", "expected"),
    [
        ("/// a", 0, "/// a\n"),
        ("/// a\n/// b", 0, "/// a\n/// b\n"),
        ("/// a\n/// b", 4, "/// a\n    /// b\n    "),
        ("/// a\n///\n/// b", 2, "/// a\n  ///\n  /// b\n  "),
    ],
)
def test_reindent(body: str, column: int, expected: str) -> None:
    assert reindent(body, column) == expected


def test_splice_applies_back_to_front() -> None:
    text = "0123456789"
    replacements = [
        Replacement("a", TextRange(1, 3)),
        Replacement("bb", TextRange(5, 5)),
        Replacement("", TextRange(8, 10)),
    ]
    assert splice(text, replacements) == "0a34bb567"


@pytest.mark.parametrize(
    "ranges",
    [
        [TextRange(0, 4), TextRange(2, 6)],
        [TextRange(3, 3), TextRange(3, 3)],
        [TextRange(0, 20)],
    ],
)
def test_splice_rejects_overlaps_and_out_of_bounds(ranges: list[TextRange]) -> None:
    with pytest.raises(OverlappingRangesError):
        splice("0123456789", [Replacement("x", item) for item in ranges])


def test_adjacent_ranges_are_disjoint() -> None:
    replacements = [Replacement("x", TextRange(0, 2)), Replacement("y", TextRange(2, 4))]
    assert splice("abcdef", replacements) == "xyef"


def test_apply_docs_inserts_at_every_site_of_alias() -> None:
    text = "fn a() {}\nfn b() {}\n"
    sites = {
        "c_x": [
            InsertionSite(0, TextRange.empty(0)),
            InsertionSite(0, TextRange.empty(10)),
        ]
    }
    result = apply_docs(text, sites, {"c_x": "/// X."})
    assert result.changed
    assert result.replacements == 2
    assert result.text == "/// X.\nfn a() {}\n/// X.\nfn b() {}\n"


def test_apply_docs_replaces_existing_block() -> None:
    text = "impl S {\n    /// Old.\n    fn f() {}\n}\n"
    start = text.index("/// Old.")
    end = text.index("fn f")
    result = apply_docs(
        text, {"c_f": [InsertionSite(4, TextRange(start, end))]}, {"c_f": "/// New.\n/// Two."}
    )
    assert result.text == "impl S {\n    /// New.\n    /// Two.\n    fn f() {}\n}\n"


def test_empty_or_missing_bodies_leave_text_untouched() -> None:
    text = "fn a() {}\n"
    sites = {"c_a": [InsertionSite(0, TextRange.empty(0))], "c_b": [InsertionSite(0, TextRange.empty(0))]}
    result = apply_docs(text, sites, {"c_a": ""})
    assert not result.changed
    assert result.text is text


def test_write_result_with_backup(tmp_path: Path) -> None:
    path = tmp_path / "lib.rs"
    path.write_text("old\r\n", encoding="utf-8", newline="")
    backup = write_result(path, "old\r\n", "new\r\n", backup_suffix=".bk")
    assert backup == tmp_path / "lib.bk"
    assert backup.read_bytes() == b"old\r\n"
    assert path.read_bytes() == b"new\r\n"


def test_write_result_without_backup(tmp_path: Path) -> None:
    path = tmp_path / "lib.rs"
    path.write_text("old", encoding="utf-8")
    assert write_result(path, "old", "new") is None
    assert path.read_text(encoding="utf-8") == "new"
    assert sorted(item.name for item in tmp_path.iterdir()) == ["lib.rs"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [("a\r\nb\n", "\r\n"), ("a\nb\r\n", "\n"), ("", "\n"), ("\nx", "\n")],
)
def test_detect_newline(text: str, expected: str) -> None:
    assert detect_newline(text) == expected


def test_reindent_with_crlf() -> None:
    assert reindent("/// a\n/// b", 4, "\r\n") == "/// a\r\n    /// b\r\n    "


def test_apply_docs_keeps_crlf_line_endings() -> None:
    text = 'fn a() {}\r\n#[doc(alias = "c_foo")]\r\nfn foo() {}\r\n'
    offset = text.index("#[doc")
    result = apply_docs(
        text, {"c_foo": [InsertionSite(0, TextRange.empty(offset))]}, {"c_foo": "/// A.\n/// B."}
    )
    assert result.text == 'fn a() {}\r\n/// A.\r\n/// B.\r\n#[doc(alias = "c_foo")]\r\nfn foo() {}\r\n'

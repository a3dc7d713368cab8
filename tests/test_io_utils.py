from __future__ import annotations

import json
from pathlib import Path

import pytest

from i18nsite.io_utils import (
    read_json_lenient,
    read_json_relaxed,
    strip_comments,
    write_text_if_changed,
    write_yaml,
)


def test_read_json_supports_line_comments(tmp_path: Path) -> None:
    p = tmp_path / "ja.json"
    p.write_text(
        '{\n  // comment\n  "title": "x", ## hash comment\n  "desc": "y"\n}\n',
        encoding="utf-8",
    )
    data = read_json_relaxed(p)
    assert data == {"title": "x", "desc": "y"}


def test_read_json_supports_block_comments(tmp_path: Path) -> None:
    p = tmp_path / "ja.json"
    p.write_text(
        '{\n  /* block\n  spanning lines */\n  "map": {"a": ["b"]}\n}\n',
        encoding="utf-8",
    )
    data = read_json_relaxed(p)
    assert data["map"]["a"] == ["b"]


def test_read_json_strips_bom(tmp_path: Path) -> None:
    p = tmp_path / "ja.json"
    p.write_bytes(b'\xef\xbb\xbf{"a": "b"}')
    assert read_json_relaxed(p) == {"a": "b"}


def test_comment_markers_inside_strings_are_text() -> None:
    text = '{"url": "http://x/*y*/", "tag": "##1", "q": "a\\"//b"}'
    assert strip_comments(text) == text
    assert json.loads(strip_comments(text))["q"] == 'a"//b'


def test_strip_comments_keeps_line_count() -> None:
    text = '{\n"a": 1, // one\n/* two\nthree */ "b": 2\n}'
    stripped = strip_comments(text)
    assert stripped.count("\n") == text.count("\n")
    assert json.loads(stripped) == {"a": 1, "b": 2}


def test_read_json_relaxed_rejects_trailing_comma(tmp_path: Path) -> None:
    p = tmp_path / "ja.json"
    p.write_text('{"a": "b",}', encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        read_json_relaxed(p)


def test_read_json_lenient_returns_none(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    assert read_json_lenient(bad) is None
    assert read_json_lenient(tmp_path / "missing.json") is None


def test_write_yaml_sorted_and_unicode(tmp_path: Path) -> None:
    p = tmp_path / "out" / "data.yml"
    write_yaml(p, {"b": {"pct": 50.0}, "a": {"title": "日本語"}})
    text = p.read_text(encoding="utf-8")
    assert text.index("a:") < text.index("b:")
    assert "日本語" in text
    assert "\r\n" not in text


def test_write_text_if_changed(tmp_path: Path) -> None:
    p = tmp_path / "x.yml"
    assert write_text_if_changed(p, "a: 1\n") is True
    assert write_text_if_changed(p, "a: 1\n") is False
    assert write_text_if_changed(p, "a: 2\n") is True

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import FakeProvider, write_slug

from i18nsite.io_utils import load_yaml
from i18nsite.models import NameStatus
from i18nsite.progress import (
    calc_progress,
    calc_slug_progress,
    collect_slug_changes,
    flatten_leaf_strings,
    update_progress_data,
)
from i18nsite.settings import Settings
from i18nsite.template import merge_json_template


def test_flatten_leaf_strings_paths() -> None:
    data = {"a": {"b": "x", "n": 1}, "list": ["p", {"q": "r"}], "t": True}
    assert flatten_leaf_strings(data) == {
        "a.b": "x",
        "list[0]": "p",
        "list[1].q": "r",
    }
    assert flatten_leaf_strings(["a", ["b"]]) == {"[0]": "a", "[1][0]": "b"}


def test_progress_counts_missing_and_identical_as_untranslated() -> None:
    record = calc_progress({"a": "X", "b": "Y"}, {"a": "X"})
    assert (record.done, record.total, record.pct) == (0, 2, 0.0)


def test_progress_percentage_rounding() -> None:
    reference = {"a": "A", "b": "B", "c": "C"}
    record = calc_progress(reference, {"a": "あ", "b": "B", "c": "し"})
    assert record.done == 2
    assert record.total == 3
    assert record.pct == 66.7


def test_progress_empty_reference() -> None:
    record = calc_progress({}, {"a": "x"})
    assert record.pct == 0.0
    assert record.total == 0


def test_collect_slug_changes() -> None:
    changes = [
        NameStatus("M", "translations/Bear-Family/i18n/ja.json"),
        NameStatus("A", "translations/eli/i18n/default.json"),
        NameStatus("M", "translations/eli/i18n/ja.json"),
        NameStatus("M", "README.md"),
        NameStatus("M", "translations/eli/notes/ja.json"),
        NameStatus("D", "translations/gone/i18n/ja.json"),
        NameStatus(
            "R",
            "translations/new-name/i18n/ja.json",
            old_path="translations/old-name/i18n/ja.json",
        ),
    ]
    changed, deleted = collect_slug_changes(changes)
    assert changed == ["bear-family", "eli", "new-name"]
    assert deleted == ["gone", "old-name"]


def test_name_status_parse() -> None:
    assert NameStatus.parse("M\ttranslations/a/i18n/ja.json") == NameStatus(
        "M", "translations/a/i18n/ja.json"
    )
    renamed = NameStatus.parse("R087\told.json\tnew.json")
    assert renamed == NameStatus("R", "new.json", old_path="old.json")
    assert NameStatus.parse("") is None


def test_calc_slug_progress_invalid_json(settings: Settings, tmp_path: Path) -> None:
    i18n = write_slug(tmp_path, "mod", {"a": "A"}, None)
    (i18n / "ja.json").write_text("{broken", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON for mod"):
        calc_slug_progress(settings, "mod")


def test_update_progress_data(settings: Settings, tmp_path: Path) -> None:
    write_slug(tmp_path, "alpha", {"a": "A", "b": "B"}, {"a": "あ", "b": "B"})
    out = tmp_path / "website" / "_data" / "auto_progress.yml"
    out.parent.mkdir(parents=True)
    out.write_text(
        "mods:\n"
        "  gone:\n    pct: 10.0\n    done: 1\n    total: 10\n"
        "  kept:\n    pct: 100.0\n    done: 3\n    total: 3\n",
        encoding="utf-8",
    )
    provider = FakeProvider(
        name_status=[
            NameStatus("M", "translations/alpha/i18n/ja.json"),
            NameStatus("D", "translations/gone/i18n/ja.json"),
        ]
    )

    message = update_progress_data(settings, provider)

    assert "updated: 1" in message
    assert "deleted: 1" in message
    data = load_yaml(out)
    assert list(data["mods"]) == ["alpha", "kept"]
    assert data["mods"]["alpha"] == {"pct": 50.0, "done": 1, "total": 2}
    assert data["mods"]["kept"]["done"] == 3


def test_update_progress_data_without_targets(settings: Settings, tmp_path: Path) -> None:
    provider = FakeProvider(name_status=[NameStatus("M", "README.md")])
    assert update_progress_data(settings, provider) == "No target slugs. Nothing to do."
    assert not (tmp_path / "website").exists()


def test_update_progress_data_recovers_from_malformed_yaml(
    settings: Settings, tmp_path: Path
) -> None:
    write_slug(tmp_path, "alpha", {"a": "A"}, {"a": "あ"})
    out = tmp_path / "website" / "_data" / "auto_progress.yml"
    out.parent.mkdir(parents=True)
    out.write_text("mods: [unclosed", encoding="utf-8")
    provider = FakeProvider(name_status=[NameStatus("A", "translations/alpha/i18n/ja.json")])

    update_progress_data(settings, provider)
    assert load_yaml(out) == {"mods": {"alpha": {"pct": 100.0, "done": 1, "total": 1}}}


def test_progress_reads_commented_files(settings: Settings, tmp_path: Path) -> None:
    i18n = write_slug(tmp_path, "mod-a", {}, {"a": "エー"})
    default = i18n / "default.json"
    default.write_text(
        '{\n  // title\n  "a": "A", ## note\n  /* body */ "b": "B"\n}\n',
        encoding="utf-8",
    )
    merge_json_template(default, i18n / "ja.json", i18n / "ja.json")

    record = calc_slug_progress(settings, "mod-a")
    assert (record.done, record.total, record.pct) == (1, 2, 50.0)


def test_top_level_string_document_is_one_leaf() -> None:
    assert flatten_leaf_strings("Hello") == {"": "Hello"}
    record = calc_progress("Hello", "こんにちは")
    assert (record.done, record.total) == (1, 1)
    assert calc_progress("Hello", "Hello").done == 0

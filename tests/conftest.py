from __future__ import annotations

import json
from pathlib import Path

import pytest

from i18nsite.models import NameStatus
from i18nsite.settings import Settings


class FakeProvider:
    """In-memory ChangedFilesProvider."""

    def __init__(
        self,
        name_status: list[NameStatus] | None = None,
        staged: list[str] | None = None,
        unstaged: list[str] | None = None,
        commits: dict[str, str] | None = None,
    ) -> None:
        self.name_status = list(name_status or [])
        self.staged = list(staged or [])
        self.unstaged = list(unstaged or [])
        self.commits = dict(commits or {})
        self.diffs: dict[tuple[str, str], list[str]] = {}
        self.added: list[str] = []

    def staged_name_status(self) -> list[NameStatus]:
        return list(self.name_status)

    def staged_paths(self) -> list[str]:
        return list(self.staged)

    def unstaged_paths(self) -> list[str]:
        return list(self.unstaged)

    def diff_paths(self, before: str, sha: str) -> list[str]:
        return list(self.diffs.get((before, sha), []))

    def rev_parse(self, ref: str) -> str:
        from i18nsite.git import GitError

        if ref not in self.commits:
            raise GitError(["rev-parse", ref], "unknown revision")
        return self.commits[ref]

    def commit_exists(self, ref: str) -> bool:
        return ref in self.commits.values()

    def add(self, path: str) -> None:
        self.added.append(path)
        if path in self.unstaged:
            self.unstaged.remove(path)
        if path not in self.staged:
            self.staged.append(path)

    def describe(self) -> dict[str, str]:
        return {"branch": "main", "user_name": "tester", "user_email": "t@example.com"}


def write_slug(root: Path, slug: str, default: object, ja: object | None) -> Path:
    i18n = root / "translations" / slug / "i18n"
    i18n.mkdir(parents=True, exist_ok=True)
    (i18n / "default.json").write_text(
        json.dumps(default, ensure_ascii=False), encoding="utf-8"
    )
    if ja is not None:
        (i18n / "ja.json").write_text(json.dumps(ja, ensure_ascii=False), encoding="utf-8")
    return i18n


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings.from_env(root=tmp_path, environ={})

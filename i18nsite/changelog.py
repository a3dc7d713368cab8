from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from i18nsite.git import EMPTY_TREE, ChangedFilesProvider, GitError
from i18nsite.io_utils import dump_yaml, load_yaml, write_text_if_changed
from i18nsite.paths import is_translated_path, slug_from_path, translated_relpath
from i18nsite.schema.records import ChangelogEntry, ChangelogItem
from i18nsite.settings import Settings

logger = logging.getLogger(__name__)

JST = timezone(timedelta(hours=9))
STAGED_SHA = "STAGED"


@dataclass
class Revision:
    before: str | None
    sha: str

    @property
    def short(self) -> str:
        return self.sha[:7]


def resolve_revision(settings: Settings, provider: ChangedFilesProvider) -> Revision:
    """Pick the commit range to describe.

    In CI the range comes from BEFORE/SHA (or HEAD~1..HEAD); during a local
    pre-commit the commit does not exist yet, so the staged index is used.
    """

    if not settings.is_ci:
        return Revision(before=None, sha=STAGED_SHA)

    before = settings.before
    if not before:
        try:
            before = provider.rev_parse("HEAD~1")
        except GitError:
            before = EMPTY_TREE
    sha = settings.sha or provider.rev_parse("HEAD")

    if before != EMPTY_TREE and not provider.commit_exists(before):
        logger.warning("BEFORE %s not found; falling back to the empty tree", before)
        before = EMPTY_TREE
    return Revision(before=before, sha=sha)


def changed_items(
    revision: Revision, provider: ChangedFilesProvider
) -> list[ChangelogItem]:
    if revision.before is None:
        paths = provider.staged_paths()
    else:
        paths = provider.diff_paths(revision.before, revision.sha)

    items: dict[str, ChangelogItem] = {}
    for path in paths:
        if not is_translated_path(path):
            continue
        slug = slug_from_path(path)
        items.setdefault(slug, ChangelogItem(slug=slug, path=translated_relpath(slug)))
    return list(items.values())


def load_changelog(settings: Settings) -> list[dict[str, Any]]:
    loaded = load_yaml(settings.path(settings.changelog_out))
    if not isinstance(loaded, list):
        return []
    return [e for e in loaded if isinstance(e, dict)]


def apply_changelog_entry(
    existing: list[dict[str, Any]],
    revision: Revision,
    items: list[ChangelogItem],
    actor: str,
    date: str,
) -> list[dict[str, Any]]:
    """Merge `items` into the entry for `revision`, newest entries first."""

    entries = [dict(e) for e in existing]
    for entry in entries:
        if entry.get("sha") != revision.short:
            continue
        current = list(entry.get("items") or [])
        known = {i.get("slug") for i in current if isinstance(i, dict)}
        current.extend(i.model_dump() for i in items if i.slug not in known)
        entry["items"] = current
        entry["date"] = date
        entry["by"] = actor
        return entries

    new_entry = ChangelogEntry(date=date, sha=revision.short, by=actor, items=items)
    return [new_entry.model_dump(), *entries]


def update_changelog(
    settings: Settings,
    provider: ChangedFilesProvider,
    now: datetime | None = None,
) -> str:
    revision = resolve_revision(settings, provider)
    items = changed_items(revision, provider)
    if not items:
        return ""

    date = (now or datetime.now(JST)).astimezone(JST).strftime("%Y-%m-%d")
    entries = apply_changelog_entry(
        load_changelog(settings), revision, items, settings.actor, date
    )
    if write_text_if_changed(settings.path(settings.changelog_out), dump_yaml(entries)):
        return f"Updated {settings.changelog_out} (sha {revision.short}, +{len(items)})"
    return ""

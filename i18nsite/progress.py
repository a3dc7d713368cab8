from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from i18nsite.git import ChangedFilesProvider
from i18nsite.io_utils import load_yaml, read_json_lenient, write_yaml
from i18nsite.models import NameStatus
from i18nsite.paths import (
    DEFAULT_FILE,
    TRANSLATED_FILE,
    i18n_dir,
    is_i18n_path,
    slug_from_path,
)
from i18nsite.schema.records import ProgressData, ProgressRecord
from i18nsite.settings import Settings

logger = logging.getLogger(__name__)


def flatten_leaf_strings(
    obj: Any, prefix: str | None = None, out: dict[str, str] | None = None
) -> dict[str, str]:
    """Flatten nested JSON into `{"a.b[0].c": "text"}` keeping string leaves only."""

    if out is None:
        out = {}
    if isinstance(obj, dict):
        for key, value in obj.items():
            path = f"{prefix}.{key}" if prefix is not None else str(key)
            flatten_leaf_strings(value, path, out)
    elif isinstance(obj, list):
        for idx, value in enumerate(obj):
            path = f"{prefix}[{idx}]" if prefix is not None else f"[{idx}]"
            flatten_leaf_strings(value, path, out)
    elif isinstance(obj, str):
        # A bare string document is a single leaf at the empty path.
        out[prefix if prefix is not None else ""] = obj
    return out


def calc_progress(reference: Any, target: Any) -> ProgressRecord:
    """Count leaf strings of `reference` that `target` actually translates.

    A leaf is untranslated when it is missing from `target` or identical to
    the reference text.
    """

    flat_ref = flatten_leaf_strings(reference)
    flat_target = flatten_leaf_strings(target)

    total = len(flat_ref)
    untranslated = sum(
        1
        for path, ref_value in flat_ref.items()
        if flat_target.get(path) is None or flat_target[path] == ref_value
    )
    done = total - untranslated
    pct = round(done * 100.0 / total, 1) if total else 0.0
    return ProgressRecord(pct=pct, done=done, total=total)


def calc_slug_progress(settings: Settings, slug: str) -> ProgressRecord:
    base = i18n_dir(settings.root, slug)
    reference = read_json_lenient(base / DEFAULT_FILE)
    target = read_json_lenient(base / TRANSLATED_FILE)
    if reference is None or target is None:
        raise ValueError(f"Invalid JSON for {slug}")
    return calc_progress(reference, target)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def collect_slug_changes(changes: Iterable[NameStatus]) -> tuple[list[str], list[str]]:
    """Split staged i18n changes into (changed_slugs, deleted_slugs)."""

    changed: list[str] = []
    deleted: list[str] = []
    for entry in changes:
        if entry.status in ("A", "M"):
            if is_i18n_path(entry.path):
                changed.append(slug_from_path(entry.path))
        elif entry.status in ("R", "C"):
            if entry.status == "R" and entry.old_path and is_i18n_path(entry.old_path):
                deleted.append(slug_from_path(entry.old_path))
            if is_i18n_path(entry.path):
                changed.append(slug_from_path(entry.path))
        elif entry.status == "D":
            if is_i18n_path(entry.path):
                deleted.append(slug_from_path(entry.path))
    return _unique(changed), _unique(deleted)


def load_progress_data(settings: Settings) -> ProgressData:
    raw = load_yaml(settings.path(settings.progress_out))
    if not isinstance(raw, dict):
        return ProgressData()
    try:
        return ProgressData.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Ignoring malformed %s: %s", settings.progress_out, exc)
        return ProgressData()


def update_progress_data(settings: Settings, provider: ChangedFilesProvider) -> str:
    changed, deleted = collect_slug_changes(provider.staged_name_status())
    if not changed and not deleted:
        return "No target slugs. Nothing to do."

    data = load_progress_data(settings)
    mods = dict(data.mods)
    for slug in changed:
        mods[slug] = calc_slug_progress(settings, slug)
        logger.debug("Progress %s: %s", slug, mods[slug])
    for slug in deleted:
        mods.pop(slug, None)

    ordered = {slug: mods[slug].model_dump() for slug in sorted(mods)}
    write_yaml(settings.path(settings.progress_out), {"mods": ordered})
    return (
        f"Generated {settings.progress_out} (updated: {len(changed)}, "
        f"deleted: {len(deleted)}, total_slugs: {len(ordered)})"
    )

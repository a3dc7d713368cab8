from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path

from i18nsite.io_utils import read_json_lenient, write_yaml
from i18nsite.paths import iter_translated_files, translated_relpath
from i18nsite.schema.records import ModMetadata
from i18nsite.settings import Settings

logger = logging.getLogger(__name__)


def sha256_prefix(path: Path, length: int = 8) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()[:length]


def count_keys(path: Path) -> int:
    data = read_json_lenient(path)
    return len(data) if isinstance(data, dict) else 0


def build_mod_metadata(path: Path) -> ModMetadata:
    # translations/<slug>/i18n/ja.json
    slug = path.parent.parent.name.lower()
    stat = path.stat()
    updated = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
    return ModMetadata(
        slug=slug,
        path=translated_relpath(slug),
        updated=updated.strftime("%Y-%m-%d"),
        size_kb=round(stat.st_size / 1024, 1),
        sha256_8=sha256_prefix(path),
        keys_count=count_keys(path),
    )


def collect_mod_data(settings: Settings) -> dict[str, ModMetadata]:
    mods: dict[str, ModMetadata] = {}
    for path in iter_translated_files(settings.root):
        meta = build_mod_metadata(path)
        if meta.slug in mods:
            logger.warning("Duplicate slug %s (from %s)", meta.slug, path)
        mods[meta.slug] = meta
    return {slug: mods[slug] for slug in sorted(mods)}


def generate_mod_data(settings: Settings) -> str:
    mods = collect_mod_data(settings)
    write_yaml(
        settings.path(settings.mods_out),
        {slug: meta.model_dump() for slug, meta in mods.items()},
    )
    return f"Generated {settings.mods_out} ({len(mods)} mods)"

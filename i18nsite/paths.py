from __future__ import annotations

import re
from pathlib import Path

TRANSLATIONS_DIR = "translations"
I18N_DIR = "i18n"
DEFAULT_FILE = "default.json"
TRANSLATED_FILE = "ja.json"
I18N_FILES = {DEFAULT_FILE, TRANSLATED_FILE}

SLUG_RE = re.compile(r"[a-z0-9\-]+")
I18N_PATH_RE = re.compile(r"translations/[^/]+/i18n/(default|ja)\.json")


def normalize_path(path: str | Path) -> str:
    return str(path).replace("\\", "/")


def is_valid_slug(slug: str) -> bool:
    return SLUG_RE.fullmatch(slug) is not None


def is_i18n_path(path: str) -> bool:
    """True for `translations/<slug>/i18n/default.json` or `.../ja.json`."""
    return I18N_PATH_RE.fullmatch(normalize_path(path)) is not None


def is_translated_path(path: str) -> bool:
    p = normalize_path(path)
    return p.startswith(f"{TRANSLATIONS_DIR}/") and p.endswith(
        f"/{I18N_DIR}/{TRANSLATED_FILE}"
    )


def slug_from_path(path: str | Path) -> str:
    """Return the lowercased slug of a `translations/<slug>/...` path."""
    parts = normalize_path(path).split("/")
    if len(parts) < 2 or parts[0] != TRANSLATIONS_DIR:
        raise ValueError(f"not a translations path: {path}")
    return parts[1].lower()


def translated_relpath(slug: str) -> str:
    return "/".join([TRANSLATIONS_DIR, slug, I18N_DIR, TRANSLATED_FILE])


def i18n_dir(root: Path, slug: str) -> Path:
    return root / TRANSLATIONS_DIR / slug / I18N_DIR


def iter_translated_files(root: Path) -> list[Path]:
    base = root / TRANSLATIONS_DIR
    if not base.is_dir():
        return []
    files = [p for p in base.glob(f"*/{I18N_DIR}/{TRANSLATED_FILE}") if p.is_file()]
    return sorted(files, key=lambda p: normalize_path(p.relative_to(root)))


def iter_slug_dirs(root: Path) -> list[Path]:
    base = root / TRANSLATIONS_DIR
    if not base.is_dir():
        return []
    return sorted((p for p in base.iterdir() if p.is_dir()), key=lambda p: p.name)

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

import yaml

from i18nsite.changelog import update_changelog
from i18nsite.git import ChangedFilesProvider, GitError
from i18nsite.io_utils import read_json_relaxed
from i18nsite.moddata import generate_mod_data
from i18nsite.models import StepReport
from i18nsite.paths import (
    I18N_DIR,
    I18N_FILES,
    TRANSLATED_FILE,
    TRANSLATIONS_DIR,
    is_valid_slug,
    iter_slug_dirs,
    iter_translated_files,
)
from i18nsite.progress import update_progress_data
from i18nsite.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class HookResult:
    exit_code: int
    report: StepReport
    messages: list[str] = field(default_factory=list)
    new_changes: list[str] = field(default_factory=list)


def check_slugs(settings: Settings) -> StepReport:
    report = StepReport()
    for path in iter_translated_files(settings.root):
        slug = path.parent.parent.name
        if not is_valid_slug(slug):
            report.warnings.append(
                f"{TRANSLATIONS_DIR}/{slug}/: folder name contains uppercase or "
                "invalid characters (allowed: a-z0-9-)"
            )
    return report


def check_i18n_layout(settings: Settings) -> StepReport:
    report = StepReport()
    for slug_dir in iter_slug_dirs(settings.root):
        rel = f"{TRANSLATIONS_DIR}/{slug_dir.name}"
        i18n = slug_dir / I18N_DIR
        if not i18n.is_dir():
            report.warnings.append(f"{rel}: {I18N_DIR} folder is missing")
            continue
        if not (i18n / TRANSLATED_FILE).exists():
            report.warnings.append(f"{rel}: {I18N_DIR}/{TRANSLATED_FILE} is missing")

        extra = sorted(p.name for p in i18n.iterdir() if p.name not in I18N_FILES)
        if extra:
            report.warnings.append(
                f"{rel}/{I18N_DIR}: unexpected files ({', '.join(extra)}); not deleted"
            )
    return report


def run_generator(name: str, func: Callable[[], str]) -> StepReport:
    """Run one generator, turning its failure into a warning."""

    report = StepReport()
    try:
        message = func()
    except (ValueError, OSError, GitError, yaml.YAMLError) as exc:
        logger.debug("%s failed", name, exc_info=True)
        report.warnings.append(f"{name} failed: {exc.__class__.__name__}: {exc}")
        return report
    if message.strip():
        report.notes.append(message.strip())
    return report


def mirror_translations(settings: Settings) -> str:
    src = settings.path(TRANSLATIONS_DIR)
    dest = settings.path(settings.mirror_dir)
    if not src.is_dir():
        raise FileNotFoundError(f"{TRANSLATIONS_DIR} directory not found at {src}")
    dest.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dest, dirs_exist_ok=True)
    return f"copied {TRANSLATIONS_DIR} -> {settings.mirror_dir}"


def check_syntax(settings: Settings, staged: list[str]) -> StepReport:
    report = StepReport()
    mirror_prefix = f"{settings.mirror_dir}/"
    for rel in staged:
        path = settings.path(rel)
        if not path.is_file():
            continue
        if rel.endswith(".json"):
            if rel.startswith(mirror_prefix):
                continue
            try:
                read_json_relaxed(path)
            except ValueError as exc:
                report.warnings.append(f"{rel}: JSON syntax error: {exc}")
        elif rel.endswith((".yml", ".yaml")):
            try:
                yaml.safe_load(path.read_text(encoding="utf-8"))
            except (yaml.YAMLError, UnicodeDecodeError) as exc:
                report.warnings.append(f"{rel}: YAML syntax error: {exc}")
    return report


def snapshot_changes(provider: ChangedFilesProvider) -> list[str]:
    paths = provider.unstaged_paths() + provider.staged_paths()
    return list(dict.fromkeys(p for p in paths if p))


def write_error_log(
    settings: Settings,
    provider: ChangedFilesProvider,
    report: StepReport,
    staged: list[str],
) -> None:
    info = provider.describe()
    lines = [
        f"=== {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ===",
        f"[Branch]  {info.get('branch', '')}",
        f"[User]    {info.get('user_name', '')} <{info.get('user_email', '')}>",
        f"[Files]   {', '.join(staged)}",
    ]
    if report.ok:
        lines.append("Passed with no issues")
    else:
        for warning in report.warnings:
            failed = "error" in warning.lower() or "failed" in warning
            mark = "ERROR" if failed else "WARN"
            lines.append(f"{mark}  {warning}")
        lines.append("Commit aborted because of warnings.")
    lines.append("")

    log_path = settings.path(settings.error_log)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write %s: %s", log_path, exc)


def evaluate_new_changes(
    settings: Settings,
    provider: ChangedFilesProvider,
    baseline: list[str],
) -> tuple[int, list[str], list[str]]:
    """Decide whether changes produced by the hook may be committed.

    Returns (exit_code, messages, new_changes).
    """

    seen = set(baseline)
    new_changes = [p for p in snapshot_changes(provider) if p not in seen]
    if not new_changes:
        return 0, [], new_changes

    unexpected = [p for p in new_changes if not settings.is_allowed_generated(p)]
    if unexpected:
        messages = ["New changes outside generated files appeared during the hook:"]
        messages += [f" - {p}" for p in unexpected]
        return 1, messages, new_changes

    if not settings.autostage:
        messages = ["The hook generated or updated files (generated files only):"]
        messages += [f" - {p}" for p in new_changes]
        messages += [
            "Review them, then either:",
            f"  1) git add {' '.join(new_changes)}",
            "     and commit again.",
            "  2) stage automatically: PRECOMMIT_AUTOSTAGE=1 git commit ...",
        ]
        return 1, messages, new_changes

    for rel in new_changes:
        if settings.path(rel).exists():
            provider.add(rel)
    remaining = [
        p
        for p in snapshot_changes(provider)
        if p not in seen and not settings.is_allowed_generated(p)
    ]
    if remaining:
        messages = ["New changes outside generated files remain:"]
        messages += [f" - {p}" for p in remaining]
        return 1, messages, new_changes
    return 0, ["Staged generated files (PRECOMMIT_AUTOSTAGE=1)"], new_changes


def run_precommit(settings: Settings, provider: ChangedFilesProvider) -> HookResult:
    """Validate the translation tree, regenerate data files and gate the commit.

    The exit code is non-zero on any warning, or when the hook's own output
    left changes that are not yet staged.
    """

    baseline = snapshot_changes(provider)

    report = StepReport()
    report.extend(check_slugs(settings))
    report.extend(check_i18n_layout(settings))
    report.extend(run_generator("mod data", lambda: generate_mod_data(settings)))
    report.extend(
        run_generator("progress data", lambda: update_progress_data(settings, provider))
    )
    report.extend(
        run_generator("translations mirror", lambda: mirror_translations(settings))
    )
    # Changelog runs last so it sees the final staged set.
    report.extend(
        run_generator("changelog", lambda: update_changelog(settings, provider))
    )

    staged = provider.staged_paths()
    report.extend(check_syntax(settings, staged))
    write_error_log(settings, provider, report, staged)

    for warning in report.warnings:
        logger.warning("%s", warning)

    if not report.ok:
        return HookResult(
            exit_code=1,
            report=report,
            messages=["Commit aborted because of warnings."],
        )

    exit_code, messages, new_changes = evaluate_new_changes(settings, provider, baseline)
    return HookResult(
        exit_code=exit_code, report=report, messages=messages, new_changes=new_changes
    )

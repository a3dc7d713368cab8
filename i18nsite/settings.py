from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

ALLOWED_GENERATED_FILES = (
    "website/_data/auto_mods.yml",
    "website/_data/auto_changelog.yml",
    "website/_data/auto_progress.yml",
)
ALLOWED_GENERATED_DIRS = ("website/translations",)


class Settings(BaseModel):
    """Paths and environment-driven switches shared by all commands.

    All relative paths are resolved against `root`, the repository root.
    """

    model_config = ConfigDict(frozen=True)

    root: Path = Field(default_factory=Path.cwd)

    mods_out: str = "website/_data/auto_mods.yml"
    progress_out: str = "website/_data/auto_progress.yml"
    changelog_out: str = "website/_data/auto_changelog.yml"
    mirror_dir: str = "website/translations"
    error_log: str = "scripts/precommit_error.log"

    allowed_generated_files: tuple[str, ...] = ALLOWED_GENERATED_FILES
    allowed_generated_dirs: tuple[str, ...] = ALLOWED_GENERATED_DIRS

    is_ci: bool = False
    actor: str = "local"
    before: str | None = None
    sha: str | None = None
    autostage: bool = False

    # Seconds allowed for each git invocation.
    git_timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(
        cls, root: Path | None = None, environ: Mapping[str, str] | None = None
    ) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict = {
            "is_ci": env.get("GITHUB_ACTIONS") == "true",
            "actor": env.get("ACTOR") or "local",
            "before": env.get("BEFORE") or None,
            "sha": env.get("SHA") or None,
            "autostage": env.get("PRECOMMIT_AUTOSTAGE") == "1",
        }
        if env.get("I18NSITE_GIT_TIMEOUT"):
            values["git_timeout"] = float(env["I18NSITE_GIT_TIMEOUT"])
        if root is not None:
            values["root"] = root
        return cls(**values)

    def path(self, relpath: str) -> Path:
        return self.root / relpath

    def is_allowed_generated(self, path: str) -> bool:
        p = path.replace("\\", "/")
        if p in self.allowed_generated_files:
            return True
        return any(p == d or p.startswith(f"{d}/") for d in self.allowed_generated_dirs)

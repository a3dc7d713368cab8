from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from i18nsite.models import NameStatus
from i18nsite.paths import normalize_path

logger = logging.getLogger(__name__)

EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class GitError(RuntimeError):
    def __init__(
        self, args: list[str], message: str, stdout: str = "", stderr: str = ""
    ) -> None:
        super().__init__(f"git {' '.join(args)} failed: {message}")
        self.git_args = args
        self.stdout = stdout
        self.stderr = stderr


class ChangedFilesProvider(Protocol):
    """What the generators and the hook need to know about the working tree."""

    def staged_name_status(self) -> list[NameStatus]: ...

    def staged_paths(self) -> list[str]: ...

    def unstaged_paths(self) -> list[str]: ...

    def diff_paths(self, before: str, sha: str) -> list[str]: ...

    def rev_parse(self, ref: str) -> str: ...

    def commit_exists(self, ref: str) -> bool: ...

    def add(self, path: str) -> None: ...

    def describe(self) -> dict[str, str]: ...


def _split_lines(out: str) -> list[str]:
    return [normalize_path(x) for x in out.splitlines() if x.strip()]


class GitProvider:
    """ChangedFilesProvider backed by the `git` binary."""

    def __init__(self, root: Path, timeout: float = 30.0) -> None:
        self.root = root
        self.timeout = timeout

    def run(self, *args: str) -> str:
        cmd = ["git", "-c", "core.quotepath=false", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise GitError(list(args), f"timed out after {self.timeout}s") from exc
        except FileNotFoundError as exc:
            raise GitError(list(args), "git executable not found") from exc
        if result.returncode != 0:
            raise GitError(
                list(args),
                f"exit status {result.returncode}",
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result.stdout

    def staged_name_status(self) -> list[NameStatus]:
        out = self.run("diff", "--cached", "--name-status", "--diff-filter=ACMRD")
        entries = [NameStatus.parse(line) for line in out.splitlines()]
        return [e for e in entries if e is not None]

    def staged_paths(self) -> list[str]:
        return _split_lines(self.run("diff", "--cached", "--name-only"))

    def unstaged_paths(self) -> list[str]:
        return _split_lines(self.run("diff", "--name-only"))

    def diff_paths(self, before: str, sha: str) -> list[str]:
        return _split_lines(self.run("diff", "--name-only", before, sha))

    def rev_parse(self, ref: str) -> str:
        return self.run("rev-parse", ref).strip()

    def commit_exists(self, ref: str) -> bool:
        try:
            self.run("cat-file", "-e", f"{ref}^{{commit}}")
        except GitError:
            return False
        return True

    def add(self, path: str) -> None:
        self.run("add", "--", path)

    def describe(self) -> dict[str, str]:
        info: dict[str, str] = {}
        for key, args in (
            ("branch", ("rev-parse", "--abbrev-ref", "HEAD")),
            ("user_name", ("config", "user.name")),
            ("user_email", ("config", "user.email")),
        ):
            try:
                info[key] = self.run(*args).strip()
            except GitError as exc:
                logger.debug("%s", exc)
                info[key] = ""
        return info

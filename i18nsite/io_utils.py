from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read UTF-8 text, dropping a leading BOM and keeping line endings."""

    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        return fh.read()


def strip_comments(text: str) -> str:
    """Strip //, ## and /* */ comments while preserving string literals.

    Newlines inside removed comments are kept so line numbers in parse errors
    still point at the original file.
    """

    out: list[str] = []
    i = 0
    in_string = False
    escape = False

    while i < len(text):
        ch = text[i]
        nx = text[i + 1] if i + 1 < len(text) else ""

        if in_string:
            out.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        # Line comment
        if (ch == "/" and nx == "/") or (ch == "#" and nx == "#"):
            i += 2
            while i < len(text) and text[i] != "\n":
                i += 1
            continue

        # Block comment
        if ch == "/" and nx == "*":
            i += 2
            while i < len(text) and not (
                text[i] == "*" and i + 1 < len(text) and text[i + 1] == "/"
            ):
                if text[i] == "\n":
                    out.append("\n")
                i += 1
            i += 2 if i < len(text) else 0
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def read_json_relaxed(path: Path) -> Any:
    """Parse a commented JSON file.

    Trailing commas are not accepted and `json.JSONDecodeError` propagates:
    callers that write content must never proceed with a partial result.
    """

    return json.loads(strip_comments(read_text(path)))


def read_json_lenient(path: Path) -> Any | None:
    """Parse a commented JSON file for reporting, returning None when unusable."""

    if not path.is_file():
        logger.warning("JSON file not found: %s", path)
        return None
    try:
        return json.loads(strip_comments(read_text(path)))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("JSON parse error: %s (%s)", path, exc)
        return None


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data,
        allow_unicode=True,
        sort_keys=True,
        default_flow_style=False,
        width=float("inf"),
    )


def load_yaml(path: Path) -> Any | None:
    if not path.is_file():
        return None
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        logger.warning("YAML parse error: %s (%s)", path, exc)
        return None


def write_yaml(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_yaml(data).encode("utf-8"))


def write_text_if_changed(path: Path, text: str) -> bool:
    if path.is_file() and path.read_bytes() == text.encode("utf-8"):
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return True

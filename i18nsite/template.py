from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from i18nsite.io_utils import read_json_relaxed, read_text
from i18nsite.jsonstr import (
    json_escape,
    next_nonspace,
    scan_string_end,
    unescape_json_string,
)

logger = logging.getLogger(__name__)


class ScanMode(enum.Enum):
    NORMAL = "normal"
    IN_LINE_COMMENT = "line_comment"
    IN_BLOCK_COMMENT = "block_comment"
    IN_STRING = "string"


@dataclass
class ScanCursor:
    """Transient state of one merge pass over a template."""

    pos: int = 0
    mode: ScanMode = ScanMode.NORMAL
    escaped: bool = False
    current_key: str | None = None
    expect_value: bool = False
    depth: int = 0

    def reset_pair(self) -> None:
        self.current_key = None
        self.expect_value = False


def merge_template_text(src: str, translations: Mapping[str, object]) -> str:
    """Copy `src` verbatim, substituting string values found in `translations`.

    A quoted span followed (after whitespace) by `:` is a key; any other
    quoted span is a value. A value is replaced only when it directly follows
    `key:` and the key maps to a string in `translations`. Keys are matched by
    their bare name regardless of nesting depth.

    Comments (`//`, `##`, `/* */`), whitespace and punctuation are passed
    through unchanged. Malformed input never raises: an unterminated string
    runs to the end of the input and is still replaced when it is a value.
    """

    out: list[str] = []
    cur = ScanCursor()
    n = len(src)

    while cur.pos < n:
        i = cur.pos
        ch = src[i]
        nx = src[i + 1] if i + 1 < n else ""

        if cur.mode is ScanMode.IN_LINE_COMMENT:
            out.append(ch)
            if ch == "\n":
                cur.mode = ScanMode.NORMAL
            cur.pos += 1
            continue

        if cur.mode is ScanMode.IN_BLOCK_COMMENT:
            if ch == "*" and nx == "/":
                out.append("*/")
                cur.mode = ScanMode.NORMAL
                cur.pos += 2
            else:
                out.append(ch)
                cur.pos += 1
            continue

        if cur.mode is ScanMode.IN_STRING:
            # Only reachable for a string that never closes; copy the rest.
            out.append(ch)
            if cur.escaped:
                cur.escaped = False
            elif ch == "\\":
                cur.escaped = True
            elif ch == '"':
                cur.mode = ScanMode.NORMAL
            cur.pos += 1
            continue

        if (ch == "/" and nx == "/") or (ch == "#" and nx == "#"):
            out.append(ch + nx)
            cur.mode = ScanMode.IN_LINE_COMMENT
            cur.pos += 2
            continue

        if ch == "/" and nx == "*":
            out.append(ch + nx)
            cur.mode = ScanMode.IN_BLOCK_COMMENT
            cur.pos += 2
            continue

        if ch == '"':
            end = scan_string_end(src, i)
            if end is None:
                logger.warning("Unterminated string at offset %d", i)
                key = cur.current_key
                if (
                    cur.expect_value
                    and key is not None
                    and isinstance(translations.get(key), str)
                ):
                    # The rest of the input is the value; replace all of it.
                    out.append('"' + json_escape(translations[key]) + '"')
                    cur.reset_pair()
                    cur.pos = n
                    continue
                out.append(ch)
                cur.mode = ScanMode.IN_STRING
                cur.pos += 1
                continue

            after = next_nonspace(src, end + 1)
            if after < n and src[after] == ":":
                out.append(src[i : end + 1])
                cur.current_key = unescape_json_string(src[i + 1 : end])
                cur.pos = end + 1
                continue

            key = cur.current_key
            if (
                cur.expect_value
                and key is not None
                and isinstance(translations.get(key), str)
            ):
                out.append('"' + json_escape(translations[key]) + '"')
                cur.reset_pair()
            else:
                out.append(src[i : end + 1])
            cur.pos = end + 1
            continue

        out.append(ch)
        cur.pos += 1
        if ch == ":":
            cur.expect_value = cur.current_key is not None
        elif ch == "{":
            cur.depth += 1
        elif ch == "}":
            cur.depth -= 1
            cur.reset_pair()
        elif ch == ",":
            cur.reset_pair()

    if cur.depth != 0:
        logger.debug("Template ended at object depth %d", cur.depth)
    return "".join(out)


def load_translation_map(path: Path) -> dict[str, object]:
    data = read_json_relaxed(path)
    if not isinstance(data, dict):
        raise ValueError(
            f"Translation file must contain a JSON object at the top level: {path}"
        )
    return data


def merge_json_template(
    default_path: Path, translated_path: Path, out_path: Path
) -> Path:
    """Rewrite `out_path` as the template at `default_path` with translated values.

    The translation map is read before anything is written, so `out_path` may
    be the same file as `translated_path`.
    """

    if not default_path.is_file():
        raise FileNotFoundError(f"default JSON not found at {default_path}")
    if not translated_path.is_file():
        raise FileNotFoundError(f"translated JSON not found at {translated_path}")

    translations = load_translation_map(translated_path)
    src = read_text(default_path)
    merged = merge_template_text(src, translations)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(merged)
    logger.info(
        "Merged %d translated keys from %s into %s",
        len(translations),
        translated_path,
        out_path,
    )
    return out_path

from __future__ import annotations

import re

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_ESCAPE_RE = re.compile(r'["\\\b\f\n\r\t]')

_UNESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_HEX4_RE = re.compile(r"[0-9A-Fa-f]{4}")

WHITESPACE = " \t\r\n"


def json_escape(value: str) -> str:
    """Return the body of a JSON string literal for `value`.

    Only quotes, backslashes and the named control characters are escaped.
    Non-ASCII text is left as-is so the output stays readable UTF-8.
    """

    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], value)


def scan_string_end(src: str, i: int) -> int | None:
    """Return the index of the quote closing the string opened at `src[i]`.

    Returns None when the string is not terminated before the end of input.
    """

    j = i + 1
    escaped = False
    while j < len(src):
        ch = src[j]
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            return j
        j += 1
    return None


def unescape_json_string(raw: str) -> str:
    """Decode the body of a JSON string literal into its logical text.

    Lenient: unknown escapes are kept with their backslash, and `\\u` without
    four hex digits is emitted literally.
    """

    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue

        if i + 1 >= len(raw):
            # Lone trailing backslash
            out.append(ch)
            i += 1
            continue

        nx = raw[i + 1]
        if nx in _UNESCAPES:
            out.append(_UNESCAPES[nx])
            i += 2
        elif nx == "u":
            hex_digits = raw[i + 2 : i + 6]
            if _HEX4_RE.fullmatch(hex_digits):
                out.append(chr(int(hex_digits, 16)))
                i += 6
            else:
                out.append("\\u")
                i += 2
        else:
            out.append("\\" + nx)
            i += 2
    return "".join(out)


def next_nonspace(src: str, idx: int) -> int:
    j = idx
    while j < len(src) and src[j] in WHITESPACE:
        j += 1
    return j

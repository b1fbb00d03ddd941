"""
Properties text <-> flat map.

Line format:
    key=value

Syntax Notes:
    - Lines end at \n, \r or \r\n only
    - Leading whitespace of a line is ignored, trailing whitespace kept
    - Blank lines and lines starting with '#' or '!' are comments
    - A line ending in an odd number of backslashes continues on the next
      line (whose leading whitespace is dropped)
    - The key ends at the first '=' not escaped by a backslash
    - Keys are kept verbatim, escapes included; values are unescaped
      (\\=, \\:, \\\\, \\t, \\n, \\r, \\f, \\uXXXX, and \\ before any other
      character stands for that character)
    - If a key repeats, the first occurrence wins
"""

import logging
import re
from typing import Dict, Iterator, List, Tuple, Union

from propcodec.errors import FormatError, ParseError


logger = logging.getLogger(__name__)

_COMMENT_MARKERS = ("#", "!")

_UNESCAPE = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

_ESCAPE = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
}

# Only \n, \r and \r\n end a line. Values carrying other Unicode line
# separators write them as \uXXXX.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_UNICODE_ESCAPED = "\v\x1c\x1d\x1e\x85\u2028\u2029"


def _unescape(text: str) -> str:
    """Resolve backslash escapes in a value. Raises ValueError on a bad \\u escape."""
    out: List[str] = []
    i = 0
    while i < len(text):
        c = text[i]
        if c != "\\" or i + 1 == len(text):
            out.append(c)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u":
            digits = text[i + 2:i + 6]
            if len(digits) != 4:
                raise ValueError(f"truncated unicode escape {text[i:]!r}")
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_UNESCAPE.get(nxt, nxt))
        i += 2
    return "".join(out)


def split(line: str) -> Tuple[str, str, bool]:
    """
    Split a logical line into key and value.

    Examples:
        "key=value"    -> ("key", "value", True)
        "k\\=ey=value" -> ("k\\=ey", "value", True)
        "key=v\\=alue" -> ("key", "v=alue", True)
        "key\\="       -> ("", "", False)
        "=value"       -> ("", "value", True)
    """
    i = 0
    while i < len(line):
        if line[i] == "\\":
            i += 2
            continue
        if line[i] == "=":
            try:
                return line[:i], _unescape(line[i + 1:]), True
            except ValueError:
                return "", "", False
        i += 1
    return "", "", False


def _ends_with_continuation(line: str) -> bool:
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line number, logical line), comments dropped and continuations joined."""
    pending = ""
    start = 0
    for number, raw in enumerate(_LINE_BREAK_RE.split(text), start=1):
        line = raw.lstrip()
        if not pending:
            start = number
            if not line or line.startswith(_COMMENT_MARKERS):
                continue
        if _ends_with_continuation(line):
            pending += line[:-1]
            continue
        yield start, pending + line
        pending = ""
    if pending:
        yield start, pending


def parse_properties(data: Union[bytes, str], prefix: str = "") -> Dict[str, str]:
    """
    Parse properties text into an ordered flat map.

    Args:
        data: UTF-8 bytes or text
        prefix: keep only keys starting with it, with the prefix removed

    Returns:
        key -> value, in order of first appearance

    Raises:
        ParseError: a line has no unescaped '=' or a malformed escape
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"input is not valid UTF-8: {e}") from e
    else:
        text = data

    kv: Dict[str, str] = {}
    for number, line in _logical_lines(text):
        key, value, ok = split(line)
        if not ok:
            raise ParseError("malformed line", line_number=number, line=line)
        if not key.startswith(prefix):
            continue
        key = key[len(prefix):]
        if key in kv:
            logger.debug("Ignoring repeated key %r on line %d", key, number)
            continue
        kv[key] = value

    logger.debug("Parsed %d properties (prefix=%r)", len(kv), prefix)
    return kv


def _escape_char(c: str) -> str:
    if c in _UNICODE_ESCAPED:
        return f"\\u{ord(c):04x}"
    return _ESCAPE.get(c, c)


def _escape_value(value: str) -> str:
    return "".join(_escape_char(c) for c in value)


def _check_key(key: str) -> None:
    # Keys are read back verbatim, so they cannot carry anything that needs escaping.
    if any(c in key for c in "=\\\n\r") or key[:1].isspace() or key.startswith(_COMMENT_MARKERS):
        raise FormatError(f"key {key!r} cannot be written as a properties key", path=key)


def render_properties(kv: Dict[str, str]) -> bytes:
    """
    Render a flat map as properties text, one `key=value` line per entry.

    Raises:
        FormatError: a key would not read back as itself
    """
    lines = []
    for key, value in kv.items():
        _check_key(key)
        lines.append(f"{key}={_escape_value(value)}\n")
    return "".join(lines).encode("utf-8")


__all__ = [
    "split",
    "parse_properties",
    "render_properties",
]

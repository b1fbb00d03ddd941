"""
Key-path grammar.

A flat key addresses one value of a nested structure:

    period.start_at      name, name
    as[0].a              name, index, name
    m.k1.pa              name, name, name

Grammar:
    path    := segment ('.' name | '[' index ']')*
    name    := any run of characters up to the next '.' or '['
    index   := raw bracket content, validated only when consumed

Parsing is total: any non-empty key decomposes into segments. Validation
of index content belongs to the consumer (see grouping.py).
"""

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from propcodec.errors import FormatError


_INDEX_RE = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class Segment:
    """
    One step of a key path.

    Properties:
        text: name, or the raw content between brackets
        bracketed: True for index segments
    """

    text: str
    bracketed: bool = False

    @property
    def index(self) -> int:
        """Numeric value of an index segment."""
        if not self.bracketed or not _INDEX_RE.match(self.text):
            raise FormatError(f"invalid sequence index {self.render()!r}", value=self.text)
        return int(self.text)

    def render(self) -> str:
        if self.bracketed:
            return f"[{self.text}]"
        return self.text


def name(text: str) -> Segment:
    return Segment(text)


def index(position: int) -> Segment:
    return Segment(str(position), bracketed=True)


def parse_segment(remaining: str) -> Tuple[Segment, str]:
    """
    Split the first segment off a non-empty relative key.

    The returned rest has the '.' separating it from the segment removed,
    so it is itself a relative key ('' when the segment was the last one).

    Examples:
        "a.b[2]"  -> (a, "b[2]")
        "[2].c"   -> ([2], "c")
        "b[2]"    -> (b, "[2]")
    """
    if remaining.startswith("["):
        end = remaining.find("]")
        if end < 0:
            # Unterminated bracket: consume the rest as the index text.
            return Segment(remaining[1:], bracketed=True), ""
        segment = Segment(remaining[1:end], bracketed=True)
        rest = remaining[end + 1:]
    else:
        match = re.search(r"[.\[]", remaining)
        end = match.start() if match else len(remaining)
        segment = Segment(remaining[:end])
        rest = remaining[end:]

    if rest.startswith("."):
        rest = rest[1:]
    return segment, rest


def split_path(key: str) -> List[Segment]:
    """Decompose a key into all of its segments."""
    segments: List[Segment] = []
    rest = key
    while rest:
        segment, rest = parse_segment(rest)
        segments.append(segment)
    return segments


def join(prefix: str, segment: Segment) -> str:
    """Append one segment to a rendered path."""
    if segment.bracketed:
        return prefix + segment.render()
    if not prefix:
        return segment.text
    return f"{prefix}.{segment.text}"


def render(path: Sequence[Segment]) -> str:
    """Render a sequence of segments back into a flat key."""
    key = ""
    for segment in path:
        key = join(key, segment)
    return key


__all__ = [
    "Segment",
    "name",
    "index",
    "parse_segment",
    "split_path",
    "join",
    "render",
]

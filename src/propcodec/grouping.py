"""
Structural Grouper.

Engines recurse over *relative* flat maps: the keys of the map handed to
a node are relative to that node's path, and the entry keyed '' (if any)
is the node's own leaf value.

    group({"a[0].b": "1", "a[1].b": "2", "c": "3"})
        -> {a: {"[0].b": "1", "[1].b": "2"}, c: {"": "3"}}
"""

from typing import Dict, List, Tuple

from propcodec.errors import FormatError, PathConflictError
from propcodec.keypath import Segment, join, parse_segment


FlatMap = Dict[str, str]

LEAF = ""


def group(flat: FlatMap) -> Dict[Segment, FlatMap]:
    """
    Partition a relative flat map by its first key segment.

    The leaf entry ('') is not a child and is left out. Buckets and the
    entries inside them keep the order in which they first appear.
    """
    buckets: Dict[Segment, FlatMap] = {}
    for key, value in flat.items():
        if key == LEAF:
            continue
        segment, rest = parse_segment(key)
        bucket = buckets.setdefault(segment, {})
        bucket.setdefault(rest, value)
    return buckets


def index_buckets(flat: FlatMap, path: str) -> List[Tuple[int, FlatMap]]:
    """
    Group the entries of a sequence node by index, ascending.

    Every distinct index yields one bucket, so gaps give a shorter
    sequence rather than filler elements. Spellings of the same index
    ("[1]", "[01]") merge; the first entry for a key wins.

    Raises:
        PathConflictError: a name segment appears where an index is required
        FormatError: bracket content is not a non-negative decimal integer
    """
    merged: Dict[int, FlatMap] = {}
    for segment, bucket in group(flat).items():
        if not segment.bracketed:
            raise PathConflictError("sequence used as a record or mapping", path=join(path, segment))
        try:
            position = segment.index
        except FormatError as exc:
            raise exc.at(join(path, segment)) from exc
        target = merged.setdefault(position, {})
        for key, value in bucket.items():
            target.setdefault(key, value)
    return sorted(merged.items())


def name_buckets(flat: FlatMap, path: str) -> Dict[str, FlatMap]:
    """
    Group the entries of a record or mapping node by name.

    Raises:
        PathConflictError: an index segment appears under a named node
    """
    result: Dict[str, FlatMap] = {}
    for segment, bucket in group(flat).items():
        if segment.bracketed:
            raise PathConflictError("record or mapping used as a sequence", path=join(path, segment))
        result[segment.text] = bucket
    return result


__all__ = ["FlatMap", "LEAF", "group", "index_buckets", "name_buckets"]

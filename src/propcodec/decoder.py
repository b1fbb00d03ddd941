"""
Decode Engine: relative flat map + shape -> typed value.

Every node receives the entries below its own path, re-keyed relative to
it (see grouping.py), plus its absolute path for error messages. The
result is built bottom-up and returned; nothing is written into a
caller-owned object, so a failed decode leaves no partial state behind.
"""

from typing import Any, Dict

from propcodec.errors import PathConflictError, PropertiesError, UnsupportedTypeError
from propcodec.grouping import LEAF, FlatMap, index_buckets, name_buckets
from propcodec.keypath import index, join, name
from propcodec.options import DEFAULT_OPTIONS, CodecOptions
from propcodec.scalars import to_scalar, zero_value
from propcodec.shapes import Shape, ShapeKind, fields_of


def decode(flat: FlatMap, shape: Shape, path: str = "", options: CodecOptions = DEFAULT_OPTIONS) -> Any:
    """
    Decode the relative flat map of one node.

    Args:
        flat: entries below `path`, keyed relative to it
        shape: shape of the value to build
        path: absolute key path of the node ('' at the root)
        options: codec options

    Returns:
        The decoded value. Absent scalars decode to their kind's zero;
        sequences and mappings with no entries decode to empty containers;
        optionals with no entries decode to None.

    Raises:
        FormatError, RangeError: a leaf value does not convert
        PathConflictError: a path is used both as a leaf and as a parent
        UnsupportedTypeError: the shape has no recognized kind
    """
    if shape.kind is ShapeKind.SCALAR:
        return _decode_scalar(flat, shape, path)

    if shape.kind is ShapeKind.OPTIONAL:
        if not flat:
            return None
        return decode(flat, shape.element, path, options)

    if LEAF in flat:
        raise PathConflictError(
            f"value {flat[LEAF]!r} given for a {shape.describe()}, which needs nested keys",
            path=path,
            value=flat[LEAF],
        )

    if shape.kind is ShapeKind.RECORD:
        return _decode_record(flat, shape, path, options)

    if shape.kind is ShapeKind.SEQUENCE:
        items = [
            decode(bucket, shape.element, join(path, index(position)), options)
            for position, bucket in index_buckets(flat, path)
        ]
        return shape.python_type(items)

    if shape.kind is ShapeKind.MAPPING:
        return {
            key: decode(bucket, shape.element, join(path, name(key)), options)
            for key, bucket in name_buckets(flat, path).items()
        }

    raise UnsupportedTypeError(f"unsupported shape {shape!r}", path=path)


def _decode_scalar(flat: FlatMap, shape: Shape, path: str) -> Any:
    extra = [key for key in flat if key != LEAF]
    if extra:
        raise PathConflictError(
            f"{shape.scalar.value} value has nested key {extra[0]!r}", path=path
        )
    if LEAF not in flat:
        return zero_value(shape.scalar, shape.python_type)
    try:
        return to_scalar(flat[LEAF], shape.scalar, shape.python_type)
    except PropertiesError as exc:
        raise exc.at(path) from exc


def _decode_record(flat: FlatMap, shape: Shape, path: str, options: CodecOptions) -> Any:
    cls = shape.python_type
    buckets = name_buckets(flat, path)
    kwargs: Dict[str, Any] = {}
    for field in fields_of(cls, options.tag):
        if field.skipped:
            continue
        bucket = buckets.get(field.key, {})
        child = join(path, name(field.key))
        # Sequences and mappings of a reached record are present, even if empty.
        if bucket or not field.has_default or field.shape.kind in (ShapeKind.SEQUENCE, ShapeKind.MAPPING):
            kwargs[field.attribute] = decode(bucket, field.shape, child, options)
    return cls(**kwargs)


__all__ = ["decode"]

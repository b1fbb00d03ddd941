"""
Encode Engine: typed value + shape -> flat map.

Mirror of decoder.py. Keys are emitted in a stable order: record fields in
declaration order, sequence items by position, mapping entries in the
mapping's iteration order (or sorted, with CodecOptions.sort_map_keys).
"""

from collections.abc import Mapping
from typing import Any, Optional

from propcodec.errors import FormatError, PropertiesError, UnsupportedTypeError
from propcodec.grouping import FlatMap
from propcodec.keypath import index, join, name
from propcodec.options import DEFAULT_OPTIONS, CodecOptions
from propcodec.scalars import from_scalar
from propcodec.shapes import Shape, ShapeKind, fields_of


_RESERVED = (".", "[", "]")


def encode(
    value: Any,
    shape: Shape,
    path: str = "",
    out: Optional[FlatMap] = None,
    options: CodecOptions = DEFAULT_OPTIONS,
) -> FlatMap:
    """
    Flatten `value` into `out` below `path`.

    None is never emitted, whatever the declared shape, and neither is an
    empty sequence or mapping; both read back as absent/empty.

    Returns:
        `out` (a new dict when not given)

    Raises:
        UnsupportedTypeError: value does not match its declared shape
        RangeError: integer out of its declared width
        FormatError: mapping key that cannot be addressed by a key path
    """
    if out is None:
        out = {}
    if value is None:
        return out

    if shape.kind is ShapeKind.SCALAR:
        try:
            out[path] = from_scalar(value, shape.scalar)
        except PropertiesError as exc:
            raise exc.at(path) from exc

    elif shape.kind is ShapeKind.OPTIONAL:
        encode(value, shape.element, path, out, options)

    elif shape.kind is ShapeKind.RECORD:
        if not isinstance(value, shape.python_type):
            raise _mismatch(value, shape, path)
        for field in fields_of(type(value), options.tag):
            if field.skipped:
                continue
            encode(getattr(value, field.attribute), field.shape, join(path, name(field.key)), out, options)

    elif shape.kind is ShapeKind.SEQUENCE:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(value, shape, path)
        for position, item in enumerate(value):
            encode(item, shape.element, join(path, index(position)), out, options)

    elif shape.kind is ShapeKind.MAPPING:
        if not isinstance(value, Mapping):
            raise _mismatch(value, shape, path)
        keys = list(value)
        if options.sort_map_keys:
            keys.sort()
        for key in keys:
            _check_map_key(key, path)
            encode(value[key], shape.element, join(path, name(key)), out, options)

    else:
        raise UnsupportedTypeError(f"unsupported shape {shape!r}", path=path)

    return out


def _mismatch(value: Any, shape: Shape, path: str) -> UnsupportedTypeError:
    return UnsupportedTypeError(
        f"cannot encode {type(value).__name__} as {shape.describe()}", path=path, value=repr(value)
    )


def _check_map_key(key: Any, path: str) -> None:
    if not isinstance(key, str):
        raise UnsupportedTypeError(f"mapping key {key!r} is not a string", path=path)
    if not key or any(c in key for c in _RESERVED):
        raise FormatError(f"mapping key {key!r} cannot be used as a key path segment", path=path, value=key)


__all__ = ["encode"]

"""
Public entry points.

    settings = unmarshal(text, Settings)
    interval = unmarshal_key("interval", text, Interval)
    text = marshal(settings)

Decoding returns a new value built from scratch; targets are never
modified in place.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar, Union

from propcodec.decoder import decode
from propcodec.encoder import encode
from propcodec.grouping import LEAF
from propcodec.options import DEFAULT_OPTIONS, CodecOptions
from propcodec.shapes import ShapeKind, shape_of
from propcodec.text_format import parse_properties, render_properties


logger = logging.getLogger(__name__)

T = TypeVar("T")


def unmarshal_kv(kv: Dict[str, str], cls: Type[T], options: Optional[CodecOptions] = None) -> T:
    """
    Decode an already parsed flat map into a value of `cls`.

    Args:
        kv: flat key -> value map
        cls: target type (usually a dataclass; any supported shape works)
        options: codec options, DEFAULT_OPTIONS when None

    Raises:
        FormatError, RangeError, UnsupportedTypeError, PathConflictError
    """
    options = options or DEFAULT_OPTIONS
    shape = shape_of(cls)
    if shape.kind is ShapeKind.RECORD and LEAF in kv:
        # A line like "=value" names no field of the document.
        logger.debug("Ignoring value %r under the empty key", kv[LEAF])
        kv = {key: value for key, value in kv.items() if key != LEAF}
    logger.debug("Decoding %d keys into %s", len(kv), shape.describe())
    return decode(kv, shape, "", options)


def unmarshal(data: Union[bytes, str], cls: Type[T], options: Optional[CodecOptions] = None) -> T:
    """Parse properties text and decode the whole document into `cls`."""
    return unmarshal_kv(parse_properties(data), cls, options)


def unmarshal_key(key: str, data: Union[bytes, str], cls: Type[T], options: Optional[CodecOptions] = None) -> T:
    """
    Decode only the sub-document rooted at `key`.

    Only keys starting with `key + "."` are considered, with that prefix
    removed; a key equal to `key` itself and all sibling keys are ignored.
    """
    return unmarshal_kv(parse_properties(data, prefix=key + "."), cls, options)


def marshal_kv(value: Any, cls: Optional[Type[Any]] = None, options: Optional[CodecOptions] = None) -> Dict[str, str]:
    """
    Flatten a value into a flat map.

    Args:
        value: value to encode
        cls: declared type of `value`; defaults to type(value), which is
            only enough for dataclasses and plain scalars
        options: codec options, DEFAULT_OPTIONS when None
    """
    options = options or DEFAULT_OPTIONS
    shape = shape_of(cls if cls is not None else type(value))
    kv = encode(value, shape, "", None, options)
    logger.debug("Encoded %s into %d keys", shape.describe(), len(kv))
    return kv


def marshal(value: Any, cls: Optional[Type[Any]] = None, options: Optional[CodecOptions] = None) -> bytes:
    """Encode a value as properties text (UTF-8 bytes)."""
    return render_properties(marshal_kv(value, cls, options))


__all__ = [
    "unmarshal",
    "unmarshal_key",
    "unmarshal_kv",
    "marshal",
    "marshal_kv",
]

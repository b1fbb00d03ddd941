r"""
propcodec: typed Python values <-> Java-style .properties text.

Nested structure is encoded in flat keys:

    period.start_at=2021-08-23T00\:00\:00Z
    lines[0].sku=A-1
    labels.env=prod

Targets are dataclasses whose fields map to key segments (the `properties`
field metadata, or the lower-cased attribute name). Sequences, string-keyed
mappings, Optional references, integers of fixed width, floats, booleans,
strings and nanosecond timestamps are supported.
"""

import logging

from propcodec.codec import marshal, marshal_kv, unmarshal, unmarshal_key, unmarshal_kv
from propcodec.errors import (
    FormatError,
    ParseError,
    PathConflictError,
    PropertiesError,
    RangeError,
    UnsupportedTypeError,
)
from propcodec.options import DEFAULT_OPTIONS, CodecOptions
from propcodec.scalars import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    ScalarKind,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from propcodec.shapes import prop

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "marshal",
    "marshal_kv",
    "unmarshal",
    "unmarshal_key",
    "unmarshal_kv",
    "prop",
    "CodecOptions",
    "DEFAULT_OPTIONS",
    "ScalarKind",
    "Int8", "Int16", "Int32", "Int64",
    "UInt", "UInt8", "UInt16", "UInt32", "UInt64",
    "Float32", "Float64",
    "PropertiesError",
    "ParseError",
    "FormatError",
    "RangeError",
    "UnsupportedTypeError",
    "PathConflictError",
]

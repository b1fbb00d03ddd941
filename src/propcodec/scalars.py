"""
Scalar Converter: string <-> primitive leaf values.

The set of supported kinds is closed (ScalarKind). Conversion dispatches on
the kind, never on the runtime type of the value, so a field declared as
Int8 is range-checked as 8 bits whatever Python object it holds.

Timestamps are pandas.Timestamp values, which keep nanosecond precision
and are datetime subclasses, so they also satisfy `datetime` annotations.
"""

import datetime
import math
import re
from enum import Enum
from typing import Annotated, Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from propcodec.errors import FormatError, RangeError, UnsupportedTypeError


class ScalarKind(Enum):
    """Primitive leaf kinds understood by both engines."""

    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    STRING = "string"
    TIMESTAMP = "timestamp"


# Fixed-width annotations: `count: Int8 = 0`
Int8 = Annotated[int, ScalarKind.INT8]
Int16 = Annotated[int, ScalarKind.INT16]
Int32 = Annotated[int, ScalarKind.INT32]
Int64 = Annotated[int, ScalarKind.INT64]
UInt = Annotated[int, ScalarKind.UINT]
UInt8 = Annotated[int, ScalarKind.UINT8]
UInt16 = Annotated[int, ScalarKind.UINT16]
UInt32 = Annotated[int, ScalarKind.UINT32]
UInt64 = Annotated[int, ScalarKind.UINT64]
Float32 = Annotated[float, ScalarKind.FLOAT32]
Float64 = Annotated[float, ScalarKind.FLOAT64]


# (signed, bits); the native width is 64
_INT_WIDTHS: Dict[ScalarKind, Tuple[bool, int]] = {
    ScalarKind.INT: (True, 64),
    ScalarKind.INT8: (True, 8),
    ScalarKind.INT16: (True, 16),
    ScalarKind.INT32: (True, 32),
    ScalarKind.INT64: (True, 64),
    ScalarKind.UINT: (False, 64),
    ScalarKind.UINT8: (False, 8),
    ScalarKind.UINT16: (False, 16),
    ScalarKind.UINT32: (False, 32),
    ScalarKind.UINT64: (False, 64),
}

NUMPY_KINDS: Dict[type, ScalarKind] = {
    np.int8: ScalarKind.INT8,
    np.int16: ScalarKind.INT16,
    np.int32: ScalarKind.INT32,
    np.int64: ScalarKind.INT64,
    np.uint8: ScalarKind.UINT8,
    np.uint16: ScalarKind.UINT16,
    np.uint32: ScalarKind.UINT32,
    np.uint64: ScalarKind.UINT64,
    np.float32: ScalarKind.FLOAT32,
    np.float64: ScalarKind.FLOAT64,
    np.bool_: ScalarKind.BOOL,
}

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_SIGNED_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")
_FLOAT_SPECIAL_RE = re.compile(r"^[+-]?(inf|infinity|nan)$", re.IGNORECASE)
_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)

_FLOAT32_MAX = float(np.finfo(np.float32).max)

EPOCH = pd.Timestamp(0, tz="UTC")


def is_integer_kind(kind: ScalarKind) -> bool:
    return kind in _INT_WIDTHS


def _int_bounds(kind: ScalarKind) -> Tuple[int, int]:
    signed, bits = _INT_WIDTHS[kind]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _parse_int(text: str, kind: ScalarKind) -> int:
    signed, _ = _INT_WIDTHS[kind]
    if not _SIGNED_RE.match(text):
        raise FormatError(f"invalid {kind.value} {text!r}", value=text)
    if not signed and text.startswith("-"):
        raise RangeError(f"negative value {text!r} for {kind.value}", value=text)
    number = int(text)
    low, high = _int_bounds(kind)
    if not low <= number <= high:
        raise RangeError(f"value {text!r} out of range for {kind.value}", value=text)
    return number


def _parse_float(text: str, kind: ScalarKind) -> float:
    if _FLOAT_SPECIAL_RE.match(text):
        return float(text)
    if not _FLOAT_RE.match(text):
        raise FormatError(f"invalid {kind.value} {text!r}", value=text)
    number = float(text)
    if math.isinf(number):
        raise RangeError(f"value {text!r} out of range for {kind.value}", value=text)
    if kind is ScalarKind.FLOAT32:
        if abs(number) > _FLOAT32_MAX:
            raise RangeError(f"value {text!r} out of range for {kind.value}", value=text)
        number = float(np.float32(number))
    return number


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise FormatError(f"invalid bool {text!r}", value=text)


def parse_timestamp(text: str) -> pd.Timestamp:
    """
    Parse an RFC3339 timestamp with up to nanosecond precision.

    Returns a tz-aware pandas.Timestamp in the offset the text was written
    in. Any other shape (missing offset, a space separator, more than nine
    fraction digits) raises FormatError.

    Microsecond timestamps cover years 0001-9999. A fraction finer than a
    microsecond needs nanosecond resolution, which pandas only has between
    1677 and 2262; outside that window it raises RangeError.
    """
    match = _RFC3339_RE.match(text)
    if match is None:
        raise FormatError(f"invalid timestamp {text!r}, expected RFC3339", value=text)

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = (match.group(7) or "").ljust(9, "0")
    nanos = int(fraction)

    if match.group(8):
        tz = datetime.timezone.utc
    else:
        offset = datetime.timedelta(hours=int(match.group(10)), minutes=int(match.group(11)))
        if match.group(9) == "-":
            offset = -offset
        tz = datetime.timezone(offset)

    try:
        moment = datetime.datetime(year, month, day, hour, minute, second, nanos // 1000, tzinfo=tz)
    except ValueError as e:
        raise FormatError(f"invalid timestamp {text!r}: {e}", value=text) from e

    ts = pd.Timestamp(moment)
    if nanos % 1000:
        try:
            ts = ts.as_unit("ns") + pd.Timedelta(nanoseconds=nanos % 1000)
        except (ValueError, OverflowError) as e:
            raise RangeError(f"timestamp {text!r} out of range for nanosecond precision", value=text) from e
    return ts


def format_timestamp(value: datetime.datetime) -> str:
    """Format a timestamp as RFC3339 in UTC, trimming trailing fraction zeros."""
    ts = pd.Timestamp(value)
    try:
        ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    except (ValueError, OverflowError) as e:
        raise RangeError(f"timestamp {value!r} out of range in UTC", value=str(value)) from e

    text = f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    nanos = ts.microsecond * 1000 + ts.nanosecond
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def to_scalar(text: str, kind: ScalarKind, python_type: Optional[type] = None) -> Any:
    """
    Convert `text` to a value of `kind`.

    Args:
        text: raw property value
        kind: target kind
        python_type: declared Python type; str/int/float subclasses and
            numpy scalar types are constructed from the converted value

    Raises:
        FormatError: text does not match the kind's grammar
        RangeError: value does not fit the kind's width or sign
    """
    if is_integer_kind(kind):
        value: Any = _parse_int(text, kind)
    elif kind in (ScalarKind.FLOAT32, ScalarKind.FLOAT64):
        value = _parse_float(text, kind)
    elif kind is ScalarKind.BOOL:
        value = _parse_bool(text)
    elif kind is ScalarKind.STRING:
        value = text
    elif kind is ScalarKind.TIMESTAMP:
        return parse_timestamp(text)
    else:
        raise UnsupportedTypeError(f"unsupported scalar kind {kind!r}", value=text)

    if python_type is not None and python_type not in (int, float, bool, str) and isinstance(python_type, type):
        return python_type(value)
    return value


def _check_type(value: Any, kind: ScalarKind, accepted: Tuple[type, ...]) -> None:
    if not isinstance(value, accepted) or (kind is not ScalarKind.BOOL and isinstance(value, (bool, np.bool_))):
        raise UnsupportedTypeError(
            f"cannot encode {type(value).__name__} as {kind.value}", value=repr(value)
        )


def from_scalar(value: Any, kind: ScalarKind) -> str:
    """
    Convert a leaf value of `kind` to its property text.

    Raises:
        UnsupportedTypeError: value is not of a type `kind` accepts
        RangeError: integer does not fit the kind's width
    """
    if is_integer_kind(kind):
        _check_type(value, kind, (int, np.integer))
        number = int(value)
        low, high = _int_bounds(kind)
        if not low <= number <= high:
            raise RangeError(f"value {number} out of range for {kind.value}", value=str(number))
        return str(number)

    if kind is ScalarKind.FLOAT64:
        _check_type(value, kind, (int, float, np.integer, np.floating))
        return repr(float(value))

    if kind is ScalarKind.FLOAT32:
        _check_type(value, kind, (int, float, np.integer, np.floating))
        if abs(float(value)) > _FLOAT32_MAX and not math.isinf(float(value)):
            raise RangeError(f"value {value!r} out of range for {kind.value}", value=repr(value))
        return str(np.float32(value))

    if kind is ScalarKind.BOOL:
        _check_type(value, kind, (bool, np.bool_))
        return "true" if value else "false"

    if kind is ScalarKind.STRING:
        _check_type(value, kind, (str,))
        return str.__str__(value)

    if kind is ScalarKind.TIMESTAMP:
        _check_type(value, kind, (datetime.datetime,))
        return format_timestamp(value)

    raise UnsupportedTypeError(f"unsupported scalar kind {kind!r}", value=repr(value))


def zero_value(kind: ScalarKind, python_type: Optional[type] = None) -> Any:
    """Value of a leaf that has neither data nor a declared default."""
    if kind is ScalarKind.TIMESTAMP:
        return EPOCH
    if is_integer_kind(kind):
        value: Any = 0
    elif kind in (ScalarKind.FLOAT32, ScalarKind.FLOAT64):
        value = 0.0
    elif kind is ScalarKind.BOOL:
        value = False
    else:
        value = ""
    if python_type is not None and python_type not in (int, float, bool, str) and isinstance(python_type, type):
        return python_type(value)
    return value


__all__ = [
    "ScalarKind",
    "Int8", "Int16", "Int32", "Int64",
    "UInt", "UInt8", "UInt16", "UInt32", "UInt64",
    "Float32", "Float64",
    "NUMPY_KINDS",
    "EPOCH",
    "to_scalar",
    "from_scalar",
    "zero_value",
    "parse_timestamp",
    "format_timestamp",
]

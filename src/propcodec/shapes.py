"""
Type shapes: the structural description of a decode/encode target.

A Shape is built from a Python type annotation:

    dataclass                   -> RECORD
    list[T], Sequence[T]        -> SEQUENCE (list)
    tuple[T, ...]               -> SEQUENCE (tuple)
    dict[str, V], Mapping[str, V] -> MAPPING
    Optional[T], T | None       -> OPTIONAL
    int, str, Int8, datetime... -> SCALAR

Record fields are resolved separately (fields_of) and lazily, so a
dataclass may refer to itself through Optional/list fields. Both lookups
are cached per (type, tag); the cached descriptors are immutable.
"""

import dataclasses
import datetime
import functools
import types
import typing
from collections.abc import Mapping as AbcMapping, MutableMapping, MutableSequence, Sequence as AbcSequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from propcodec.errors import UnsupportedTypeError
from propcodec.options import DEFAULT_OPTIONS
from propcodec.scalars import NUMPY_KINDS, ScalarKind


class ShapeKind(Enum):
    SCALAR = "scalar"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OPTIONAL = "optional"


# Marker for FieldShape.default when a field declares none.
MISSING = dataclasses.MISSING

SKIP_TAGS = ("", "-")


@dataclass(frozen=True)
class Shape:
    """
    Structural description of one type.

    Properties:
        kind: structural kind
        python_type: the concrete type to construct (dataclass, list, tuple,
            dict, or the scalar's Python type)
        scalar: leaf kind, for SCALAR shapes
        element: element shape (SEQUENCE), value shape (MAPPING) or inner
            shape (OPTIONAL)
    """

    kind: ShapeKind
    python_type: Any = None
    scalar: Optional[ScalarKind] = None
    element: Optional["Shape"] = None

    def describe(self) -> str:
        if self.kind is ShapeKind.SCALAR:
            return self.scalar.value
        if self.kind is ShapeKind.RECORD:
            return self.python_type.__name__
        if self.kind is ShapeKind.SEQUENCE:
            return f"{self.python_type.__name__}[{self.element.describe()}]"
        if self.kind is ShapeKind.MAPPING:
            return f"dict[str, {self.element.describe()}]"
        return f"Optional[{self.element.describe()}]"


@dataclass(frozen=True)
class FieldShape:
    """
    A visible field of a record.

    Properties:
        attribute: Python attribute name
        key: key-path segment name (tag, or lower-cased attribute)
        shape: shape of the field's declared type
        default: declared default value, or MISSING
        default_factory: declared default factory, or MISSING
    """

    attribute: str
    key: str
    shape: Shape
    default: Any = MISSING
    default_factory: Any = MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not MISSING

    def default_value(self) -> Any:
        if self.default_factory is not MISSING:
            return self.default_factory()
        return self.default

    @property
    def skipped(self) -> bool:
        return self.key in SKIP_TAGS


def prop(key: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field with an explicit key name.

        @dataclass
        class Period:
            start_at: datetime = prop("start_at", default=EPOCH)

    Use prop("-") to keep a visible field out of the properties text.
    Other keyword arguments are passed to dataclasses.field.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[kwargs.pop("tag", DEFAULT_OPTIONS.tag)] = key
    return dataclasses.field(metadata=metadata, **kwargs)


def _scalar_kind(tp: Any) -> Optional[ScalarKind]:
    if isinstance(tp, type) and issubclass(tp, Enum):
        return None
    if tp in NUMPY_KINDS:
        return NUMPY_KINDS[tp]
    if tp is bool:
        return ScalarKind.BOOL
    if isinstance(tp, type) and issubclass(tp, datetime.datetime):
        return ScalarKind.TIMESTAMP
    if isinstance(tp, type) and issubclass(tp, int):
        return ScalarKind.INT
    if isinstance(tp, type) and issubclass(tp, float):
        return ScalarKind.FLOAT64
    if isinstance(tp, type) and issubclass(tp, str):
        return ScalarKind.STRING
    return None


def _unwrap_newtype(tp: Any) -> Any:
    while hasattr(tp, "__supertype__"):
        tp = tp.__supertype__
    return tp


@functools.lru_cache(maxsize=None)
def shape_of(tp: Any) -> Shape:
    """
    Build the shape of a type annotation.

    Raises:
        UnsupportedTypeError: the annotation has no recognized kind
    """
    tp = _unwrap_newtype(tp)
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Annotated:
        base = _unwrap_newtype(args[0])
        for marker in args[1:]:
            if isinstance(marker, ScalarKind):
                return Shape(ShapeKind.SCALAR, python_type=base, scalar=marker)
        return shape_of(base)

    if origin is typing.Union or _is_union_type(origin):
        members = [a for a in args if a is not type(None)]
        if len(members) != 1 or len(members) == len(args):
            raise UnsupportedTypeError(f"unsupported union type {tp!r}")
        return Shape(ShapeKind.OPTIONAL, element=shape_of(members[0]))

    if origin in (list, AbcSequence, MutableSequence) or tp is list:
        if not args:
            raise UnsupportedTypeError(f"sequence type {tp!r} needs an element type")
        return Shape(ShapeKind.SEQUENCE, python_type=list, element=shape_of(args[0]))

    if origin is tuple or tp is tuple:
        if len(args) != 2 or args[1] is not Ellipsis:
            raise UnsupportedTypeError(f"only variable-length tuple[T, ...] is supported, got {tp!r}")
        return Shape(ShapeKind.SEQUENCE, python_type=tuple, element=shape_of(args[0]))

    if origin in (dict, AbcMapping, MutableMapping) or tp is dict:
        if len(args) != 2:
            raise UnsupportedTypeError(f"mapping type {tp!r} needs key and value types")
        key_shape = shape_of(args[0])
        if key_shape.scalar is not ScalarKind.STRING:
            raise UnsupportedTypeError(f"mapping keys must be strings, got {args[0]!r}")
        return Shape(ShapeKind.MAPPING, python_type=dict, element=shape_of(args[1]))

    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        return Shape(ShapeKind.RECORD, python_type=tp)

    kind = _scalar_kind(tp)
    if kind is None:
        raise UnsupportedTypeError(f"unsupported type {tp!r}")
    return Shape(ShapeKind.SCALAR, python_type=tp, scalar=kind)


def _is_union_type(origin: Any) -> bool:
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and origin is union_type


@functools.lru_cache(maxsize=None)
def fields_of(cls: type, tag: str = DEFAULT_OPTIONS.tag) -> Tuple[FieldShape, ...]:
    """
    Visible fields of a dataclass, in declaration order.

    A field is invisible when its name starts with '_' or it is declared
    with init=False; invisible fields are not described at all, so their
    annotations need not be supported types.

    Raises:
        UnsupportedTypeError: a field's type is unsupported, its key cannot
            be addressed by a key path, or a constructor argument that is
            never decoded (invisible or skipped) has no default
    """
    hints = typing.get_type_hints(cls, include_extras=True)
    result: List[FieldShape] = []
    for f in dataclasses.fields(cls):
        has_default = f.default is not MISSING or f.default_factory is not MISSING
        if f.name.startswith("_") or not f.init:
            if f.init and not has_default:
                raise UnsupportedTypeError(f"field {cls.__name__}.{f.name}: hidden field needs a default")
            continue
        key = f.metadata.get(tag, f.name.lower())
        if key in SKIP_TAGS:
            if not has_default:
                raise UnsupportedTypeError(f"field {cls.__name__}.{f.name}: skipped field needs a default")
            result.append(FieldShape(f.name, key, Shape(ShapeKind.SCALAR), f.default, f.default_factory))
            continue
        if any(c in key for c in ".[]"):
            raise UnsupportedTypeError(f"field {cls.__name__}.{f.name}: key {key!r} contains '.', '[' or ']'")
        try:
            shape = shape_of(hints[f.name])
        except UnsupportedTypeError as exc:
            raise UnsupportedTypeError(f"field {cls.__name__}.{f.name}: {exc.reason}") from exc
        result.append(FieldShape(f.name, key, shape, f.default, f.default_factory))
    return tuple(result)


__all__ = [
    "ShapeKind",
    "Shape",
    "FieldShape",
    "MISSING",
    "prop",
    "shape_of",
    "fields_of",
]

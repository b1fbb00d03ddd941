"""
Serialization helpers for type shapes.

Describes what a target type accepts, as a dict and as JSON/YAML, plus the
list of key patterns it can decode. Useful for documenting a configuration
type or checking which keys a properties file is expected to carry.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Set

import yaml

from propcodec.options import DEFAULT_OPTIONS
from propcodec.shapes import Shape, ShapeKind, fields_of, shape_of


def _shape_to_dict(shape: Shape, tag: str, seen: Set[type]) -> Dict[str, Any]:
    if shape.kind is ShapeKind.SCALAR:
        return {"kind": "scalar", "scalar": shape.scalar.value}
    if shape.kind is ShapeKind.RECORD:
        cls = shape.python_type
        if cls in seen:
            return {"kind": "record", "ref": cls.__name__}
        seen = seen | {cls}
        return {
            "kind": "record",
            "name": cls.__name__,
            "fields": [
                {"attribute": f.attribute, "key": f.key, **_shape_to_dict(f.shape, tag, seen)}
                for f in fields_of(cls, tag)
                if not f.skipped
            ],
        }
    if shape.kind is ShapeKind.SEQUENCE:
        return {"kind": "sequence", "element": _shape_to_dict(shape.element, tag, seen)}
    if shape.kind is ShapeKind.MAPPING:
        return {"kind": "mapping", "value": _shape_to_dict(shape.element, tag, seen)}
    return {"kind": "optional", "inner": _shape_to_dict(shape.element, tag, seen)}


def shape_to_dict(cls: Any, tag: str = DEFAULT_OPTIONS.tag) -> Dict[str, Any]:
    return _shape_to_dict(shape_of(cls), tag, set())


def shape_to_json(cls: Any, tag: str = DEFAULT_OPTIONS.tag) -> str:
    return json.dumps(shape_to_dict(cls, tag), sort_keys=True)


def shape_to_yaml(cls: Any, tag: str = DEFAULT_OPTIONS.tag) -> str:
    return yaml.safe_dump(shape_to_dict(cls, tag), sort_keys=False)


def _patterns(shape: Shape, path: str, tag: str, seen: Set[type], out: List[str]) -> None:
    if shape.kind is ShapeKind.SCALAR:
        out.append(path)
    elif shape.kind is ShapeKind.OPTIONAL:
        _patterns(shape.element, path, tag, seen, out)
    elif shape.kind is ShapeKind.SEQUENCE:
        _patterns(shape.element, path + "[]", tag, seen, out)
    elif shape.kind is ShapeKind.MAPPING:
        _patterns(shape.element, f"{path}.*" if path else "*", tag, seen, out)
    else:
        cls = shape.python_type
        if cls in seen:
            # Recursive record: stop at the first repetition.
            out.append(f"{path}..." if path else "...")
            return
        for f in fields_of(cls, tag):
            if not f.skipped:
                _patterns(f.shape, f"{path}.{f.key}" if path else f.key, tag, seen | {cls}, out)


def key_patterns(cls: Any, tag: str = DEFAULT_OPTIONS.tag) -> List[str]:
    """
    Every key pattern a type can decode.

    Sequence positions render as '[]' and mapping keys as '*':

        key_patterns(Order) -> ["id", "lines[].sku", "lines[].qty", "tags.*"]
    """
    out: List[str] = []
    _patterns(shape_of(cls), "", tag, set(), out)
    return out


__all__ = [
    "shape_to_dict",
    "shape_to_json",
    "shape_to_yaml",
    "key_patterns",
]

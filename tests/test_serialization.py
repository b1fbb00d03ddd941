"""
Tests for the shape description helpers.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from propcodec import Int8, prop
from propcodec.serialization import key_patterns, shape_to_dict, shape_to_json, shape_to_yaml


@dataclass
class Line:
    sku: str = ""
    qty: Int8 = 0


@dataclass
class Order:
    id: int = 0
    lines: List[Line] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    note: Optional[str] = None
    internal: str = prop("-", default="")


@dataclass
class Tree:
    label: str = ""
    children: List["Tree"] = field(default_factory=list)


def test_shape_to_dict():
    assert shape_to_dict(Order) == {
        "kind": "record",
        "name": "Order",
        "fields": [
            {"attribute": "id", "key": "id", "kind": "scalar", "scalar": "int"},
            {
                "attribute": "lines",
                "key": "lines",
                "kind": "sequence",
                "element": {
                    "kind": "record",
                    "name": "Line",
                    "fields": [
                        {"attribute": "sku", "key": "sku", "kind": "scalar", "scalar": "string"},
                        {"attribute": "qty", "key": "qty", "kind": "scalar", "scalar": "int8"},
                    ],
                },
            },
            {
                "attribute": "tags",
                "key": "tags",
                "kind": "mapping",
                "value": {"kind": "scalar", "scalar": "string"},
            },
            {
                "attribute": "note",
                "key": "note",
                "kind": "optional",
                "inner": {"kind": "scalar", "scalar": "string"},
            },
        ],
    }


def test_json_and_yaml_agree():
    before = shape_to_dict(Order)
    assert json.loads(shape_to_json(Order)) == before
    assert yaml.safe_load(shape_to_yaml(Order)) == before


def test_recursive_shape_is_referenced():
    children = shape_to_dict(Tree)["fields"][1]
    assert children["element"] == {"kind": "record", "ref": "Tree"}


def test_key_patterns():
    assert key_patterns(Order) == ["id", "lines[].sku", "lines[].qty", "tags.*", "note"]


def test_key_patterns_recursive():
    assert key_patterns(Tree) == ["label", "children[]..."]

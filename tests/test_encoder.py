"""
Tests for the encode engine, driven through marshal_kv.
"""

import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd
import pytest

from propcodec import Int8, marshal_kv, prop
from propcodec.errors import FormatError, RangeError, UnsupportedTypeError
from propcodec.options import CodecOptions


@dataclass
class Inner:
    a: str = prop("a", default="")
    b: int = prop("b", default=0)


@dataclass
class Outer:
    name: str = prop("name", default="")
    inner: Inner = prop("inner", default_factory=Inner)
    items: List[Inner] = prop("as", default_factory=list)
    labels: Dict[str, int] = prop("labels", default_factory=dict)
    ref: Optional[Inner] = prop("ref", default=None)


@dataclass
class Hidden:
    a: str = prop("a", default="")
    _secret: str = "s3cr3t"
    derived: str = field(default="d", init=False)
    ignored: str = prop("-", default="i")
    blank: str = prop("", default="b")


class TestRecords:

    def test_fields_in_declaration_order(self):
        value = Outer(
            name="n",
            inner=Inner("x", 1),
            items=[Inner("p", 2), Inner("q", 3)],
            labels={"z": 1, "a": 2},
            ref=Inner("r", 4),
        )
        assert list(marshal_kv(value).items()) == [
            ("name", "n"),
            ("inner.a", "x"),
            ("inner.b", "1"),
            ("as[0].a", "p"),
            ("as[0].b", "2"),
            ("as[1].a", "q"),
            ("as[1].b", "3"),
            ("labels.z", "1"),
            ("labels.a", "2"),
            ("ref.a", "r"),
            ("ref.b", "4"),
        ]

    def test_empty_and_absent_emit_nothing(self):
        assert marshal_kv(Outer(name="n")) == {"name": "n", "inner.a": "", "inner.b": "0"}

    def test_hidden_and_skipped_fields_are_not_emitted(self):
        assert marshal_kv(Hidden(a="x")) == {"a": "x"}

    def test_sorted_map_keys(self):
        value = Outer(labels={"z": 1, "a": 2})
        kv = marshal_kv(value, options=CodecOptions(sort_map_keys=True))
        assert [k for k in kv if k.startswith("labels.")] == ["labels.a", "labels.z"]

    def test_nested_sequences(self):
        assert marshal_kv([[1, 2], [3]], List[List[int]]) == {
            "[0][0]": "1",
            "[0][1]": "2",
            "[1][0]": "3",
        }


class TestScalars:

    def test_timestamp_is_utc(self):
        @dataclass
        class S:
            at: datetime.datetime = prop("at", default=None)

        value = S(at=pd.Timestamp("2021-08-30T13:11:11.000000011+02:00"))
        assert marshal_kv(value) == {"at": "2021-08-30T11:11:11.000000011Z"}

    def test_bool_and_float(self):
        @dataclass
        class S:
            on: bool = False
            ratio: float = 0.0

        assert marshal_kv(S(on=True, ratio=0.5)) == {"on": "true", "ratio": "0.5"}


class TestErrors:

    def test_integer_out_of_width(self):
        @dataclass
        class S:
            small: Int8 = 0

        with pytest.raises(RangeError) as exc:
            marshal_kv(S(small=200))
        assert exc.value.path == "small"

    def test_value_of_wrong_type(self):
        with pytest.raises(UnsupportedTypeError) as exc:
            marshal_kv(Outer(inner=Inner(a=3)))
        assert exc.value.path == "inner.a"

    def test_sequence_of_wrong_type(self):
        with pytest.raises(UnsupportedTypeError):
            marshal_kv(Outer(items="abc"))

    @pytest.mark.parametrize("key", ["a.b", "a[0]", ""])
    def test_unaddressable_map_key(self, key):
        with pytest.raises(FormatError):
            marshal_kv(Outer(labels={key: 1}))

    def test_unsupported_top_level_type(self):
        with pytest.raises(UnsupportedTypeError):
            marshal_kv(object())

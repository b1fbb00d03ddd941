"""
Tests for the properties text parser and renderer.
"""

import pytest

from propcodec.errors import FormatError, ParseError
from propcodec.text_format import parse_properties, render_properties, split


@pytest.mark.parametrize("line,want_k,want_v,want_ok", [
    ("key=value", "key", "value", True),
    ("k\\=ey=value", "k\\=ey", "value", True),
    ("key=v\\=alue", "key", "v=alue", True),
    ("key\\=", "", "", False),
    ("key=", "key", "", True),
    ("=value", "", "value", True),
])
def test_split(line, want_k, want_v, want_ok):
    assert split(line) == (want_k, want_v, want_ok)


class TestParse:

    def test_plain(self):
        data = b"""
            a.a=hello
            a.b=world
            b[0].a=1
            b[0].b=2
            c=3.1415
            d=2.7187
            e={"a": 3, "b": "ha=ha=haha"}
        """
        assert parse_properties(data) == {
            "a.a": "hello",
            "a.b": "world",
            "b[0].a": "1",
            "b[0].b": "2",
            "c": "3.1415",
            "d": "2.7187",
            "e": '{"a": 3, "b": "ha=ha=haha"}',
        }

    def test_with_comment_and_empty_lines(self):
        data = b"""
            # comment 1
            a.a=hello
            a.b=world

            # comment 2
            b[0].a=1
            b[0].b=2

            ! comment 3
            c=3.1415
        """
        assert parse_properties(data) == {
            "a.a": "hello",
            "a.b": "world",
            "b[0].a": "1",
            "b[0].b": "2",
            "c": "3.1415",
        }

    def test_with_prefix(self):
        data = b"""
            a.a=hello
            a.b=world
            b=ignored
        """
        assert parse_properties(data, "a.") == {"a": "hello", "b": "world"}

    def test_escaped_colons(self):
        data = "period.end_at=2021-08-29T23\\:59\\:59.999999999Z\n"
        assert parse_properties(data) == {"period.end_at": "2021-08-29T23:59:59.999999999Z"}

    def test_line_continuation(self):
        data = "greeting=hello \\\n    world\nnext=1\n"
        assert parse_properties(data) == {"greeting": "hello world", "next": "1"}

    def test_escaped_backslash_is_not_continuation(self):
        data = "path=C\\:\\\\\nnext=1\n"
        assert parse_properties(data) == {"path": "C:\\", "next": "1"}

    def test_unicode_escape(self):
        assert parse_properties("k=caf\\u00e9") == {"k": "café"}

    def test_first_occurrence_wins(self):
        assert parse_properties("a=1\na=2\n") == {"a": "1"}

    def test_trailing_whitespace_is_kept(self):
        assert parse_properties("a=x  \n") == {"a": "x  "}

    def test_malformed_line(self):
        with pytest.raises(ParseError) as exc:
            parse_properties("a=1\n\njust a key\n")
        assert exc.value.line_number == 3
        assert "just a key" in str(exc.value)

    def test_bad_unicode_escape(self):
        with pytest.raises(ParseError):
            parse_properties("k=\\u12")

    def test_invalid_utf8(self):
        with pytest.raises(ParseError):
            parse_properties(b"k=\xff\xfe")


class TestRender:

    def test_lines_in_map_order(self):
        assert render_properties({"b": "1", "a": "2"}) == b"b=1\na=2\n"

    def test_values_are_escaped_and_read_back(self):
        kv = {"t": "2021-08-29T23:59:59Z", "eq": "a=b", "multi": "x\ny", "slash": "C:\\", "tab": "\t"}
        text = render_properties(kv)
        assert b"t=2021-08-29T23\\:59\\:59Z\n" in text
        assert parse_properties(text) == kv

    @pytest.mark.parametrize("key", ["a=b", "#a", "!a", " a", "a\\b", "a\nb"])
    def test_unrepresentable_key(self, key):
        with pytest.raises(FormatError):
            render_properties({key: "v"})

    @pytest.mark.parametrize("separator", ["\v", "\x1c", "\x1d", "\x1e", "\x85", "\u2028", "\u2029"])
    def test_unicode_line_separators_are_escaped(self, separator):
        text = render_properties({"a": f"x{separator}y"})
        assert text == f"a=x\\u{ord(separator):04x}y\n".encode("utf-8")
        assert parse_properties(text) == {"a": f"x{separator}y"}


class TestLineBreaks:

    def test_only_newline_and_carriage_return_end_lines(self):
        assert parse_properties("a=1\r\nb=2\rc=3\n") == {"a": "1", "b": "2", "c": "3"}

    @pytest.mark.parametrize("separator", ["\v", "\x1c", "\x85", "\u2028", "\u2029"])
    def test_unicode_separator_inside_value(self, separator):
        assert parse_properties(f"a=x{separator}y\nb=2\n") == {"a": f"x{separator}y", "b": "2"}

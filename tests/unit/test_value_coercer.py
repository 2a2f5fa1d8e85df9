"""
Unit tests for value coercion.
"""

import pytest

from core.domain.errors import InvalidJsonLiteralError
from core.domain.models import ItemKind
from core.services.item_classifier import classify
from core.services.value_coercer import coerce, coerce_item


class TestJsonFields:
    """`=` always yields a string, `:=` yields the parsed literal."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("5", 5),
            ("2.5", 2.5),
            ("true", True),
            ("false", False),
            ("null", None),
            ('{"a": [1, 2]}', {"a": [1, 2]}),
            ("[1, \"x\"]", [1, "x"]),
            ('"5"', "5"),
        ],
    )
    def test_raw_json_literal(self, raw, expected):
        assert coerce(ItemKind.RAW_JSON_FIELD, raw, key="k") == expected

    @pytest.mark.parametrize("raw", ["5", "true", "null", "[1]", '{"a":1}'])
    def test_plain_field_stays_string(self, raw):
        assert coerce(ItemKind.JSON_FIELD, raw) == raw

    def test_equals_and_colon_equals_differ(self):
        assert coerce_item(classify("x=5")) == "5"
        assert coerce_item(classify("x:=5")) == 5
        assert coerce_item(classify("x=5")) != coerce_item(classify("x:=5"))

    def test_quoted_literal_matches_plain_field(self):
        assert coerce_item(classify('x:="5"')) == coerce_item(classify("x=5"))

    def test_escaped_quote_inside_literal(self):
        assert coerce_item(classify(r'x:="a\"b"')) == 'a"b'

    def test_newline_escape_inside_literal(self):
        assert coerce_item(classify(r'x:="line\nbreak"')) == "line\nbreak"

    def test_plain_field_keeps_backslashes(self):
        assert coerce_item(classify(r"path=C:\temp\new")) == "C:\\temp\\new"


class TestInvalidLiterals:
    """Bad `:=` values carry key and raw value."""

    @pytest.mark.parametrize("raw", ["", "abc", "{", "1 2", "NaN", "Infinity", "[1,]", "1e400", "[-1e999]"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidJsonLiteralError) as exc_info:
            coerce(ItemKind.RAW_JSON_FIELD, raw, key="field")

        assert exc_info.value.key == "field"
        assert exc_info.value.raw_value == raw


class TestNoCoercion:
    """Headers, query and form values are raw strings."""

    @pytest.mark.parametrize(
        "kind",
        [ItemKind.HEADER, ItemKind.QUERY, ItemKind.FORM_FIELD, ItemKind.FILE_FIELD],
    )
    def test_raw_string(self, kind):
        assert coerce(kind, "30") == "30"

"""
test_path.py
"""
from decimal import Decimal

import pytest

from src.feedrelay.core.path import FieldSegment, IndexSegment, extract, parse_path
from src.feedrelay.exceptions import PathErrorKind, PathExtractionError


def test_parse_path_tokens():
    assert parse_path("a.b[0].c") == [
        FieldSegment("a"), FieldSegment("b"), IndexSegment(0), FieldSegment("c"),
    ]
    assert parse_path("[0].price") == [IndexSegment(0), FieldSegment("price")]
    assert parse_path("a[0][1]") == [FieldSegment("a"), IndexSegment(0), IndexSegment(1)]
    assert parse_path("price") == [FieldSegment("price")]
    assert parse_path("") == []


def test_extract_simple_and_nested_fields():
    assert extract({"price": 100.5}, "price") == 100.5
    assert extract({"data": {"price": 42.0}}, "data.price") == 42.0
    assert extract({"a": {"b": [{"c": 5}]}}, "a.b[0].c") == 5


def test_extract_array_indices():
    assert extract({"prices": [10.0, 20.0, 30.0]}, "prices[1]") == 20.0
    assert extract([{"price": 99.9}], "[0].price") == 99.9
    assert extract({"a": [[1, 2], [3, 4]]}, "a[1][0]") == 3

    doc = {"data": [{"items": [{"price": 50.0}, {"price": 75.0}]}]}
    assert extract(doc, "data[0].items[1].price") == 75.0


def test_extract_cardmarket_path():
    doc = {"response": [{"cardmarket": {"prices": {"averageSellPrice": Decimal("123.45")}}}]}
    value = extract(doc, "response[0].cardmarket.prices.averageSellPrice")
    assert value == Decimal("123.45")


def test_extract_returns_subtrees_and_root():
    doc = {"a": {"b": [1, 2]}}
    assert extract(doc, "a") == {"b": [1, 2]}
    assert extract(doc, "") is doc


def test_missing_field_names_the_field():
    with pytest.raises(PathExtractionError) as exc:
        extract({"price": 100}, "missing_field")
    assert exc.value.kind is PathErrorKind.MISSING_FIELD
    assert "Field 'missing_field' not found" in str(exc.value)
    assert exc.value.path == "missing_field"


def test_field_on_non_object_is_missing_field():
    with pytest.raises(PathExtractionError) as exc:
        extract({"a": [1, 2]}, "a.b")
    assert exc.value.kind is PathErrorKind.MISSING_FIELD


def test_index_out_of_bounds():
    with pytest.raises(PathExtractionError) as exc:
        extract({"prices": [10, 20]}, "prices[5]")
    assert exc.value.kind is PathErrorKind.INDEX_OUT_OF_RANGE
    assert "Array index 5 not found or out of bounds" in str(exc.value)


def test_index_on_non_array_is_out_of_range():
    with pytest.raises(PathExtractionError) as exc:
        extract({"prices": {"0": 1}}, "prices[0]")
    assert exc.value.kind is PathErrorKind.INDEX_OUT_OF_RANGE


@pytest.mark.parametrize("path, raw", [
    ("prices[abc]", "abc"),
    ("prices[-1]", "-1"),
    ("prices[]", ""),
])
def test_invalid_index(path, raw):
    with pytest.raises(PathExtractionError) as exc:
        extract({"prices": [10, 20]}, path)
    assert exc.value.kind is PathErrorKind.INVALID_INDEX
    assert f"Invalid array index: '{raw}'" in str(exc.value)


def test_missing_closing_bracket():
    with pytest.raises(PathExtractionError) as exc:
        extract({"prices": [10, 20]}, "prices[0")
    assert exc.value.kind is PathErrorKind.MALFORMED_PATH
    assert "Missing closing bracket in field path" in str(exc.value)


@pytest.mark.parametrize("path", ["a..b", ".a", "a.", "a[0]b", "a]", "[0]]"])
def test_malformed_paths(path):
    with pytest.raises(PathExtractionError) as exc:
        parse_path(path)
    assert exc.value.kind is PathErrorKind.MALFORMED_PATH

"""
Tests for filter serialization into query strings.
"""

from __future__ import annotations

from fieldops.core.services.resource_client import build_query


def test_drops_none_and_empty_but_keeps_zero() -> None:
    assert build_query({"a": "x", "b": None, "c": "", "d": 0}) == "a=x&d=0"


def test_keeps_false_and_encodes_booleans() -> None:
    assert build_query({"active": False, "mine": True}) == "active=false&mine=true"


def test_empty_filters() -> None:
    assert build_query(None) == ""
    assert build_query({}) == ""
    assert build_query({"a": None}) == ""


def test_sequence_values_expand_to_repeated_brackets() -> None:
    query = build_query({"filters[type]": ["plan", "extra", ""]})
    assert query == "filters%5Btype%5D%5B%5D=plan&filters%5Btype%5D%5B%5D=extra"


def test_nested_mapping_expands_to_bracketed_keys() -> None:
    query = build_query({"page": 2, "filters": {"status": "maintain", "region": None}})
    assert query == "page=2&filters%5Bstatus%5D=maintain"


def test_values_are_url_encoded() -> None:
    assert build_query({"search": "toko & co"}) == "search=toko+%26+co"


def test_set_values_are_sorted() -> None:
    assert build_query({"ids": {3, 1, 2}}) == "ids%5B%5D=1&ids%5B%5D=2&ids%5B%5D=3"
    assert build_query({"types": frozenset({"plan", "extra"})}) == (
        "types%5B%5D=extra&types%5B%5D=plan"
    )

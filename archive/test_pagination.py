"""Tests for page/limit normalization and pagination metadata."""

import math

import pytest
from pagination import MAX_LIMIT, MAX_PAGE, normalize_limit, normalize_page, paginate
from store import SQLITE_MAX_INTEGER


@pytest.mark.parametrize("raw,expected", [
    (None, 1), ("3", 3), (3, 3), ("0", 1), ("-4", 1), ("abc", 1), ("", 1),
])
def test_normalize_page(raw, expected):
    assert normalize_page(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    (None, 20), ("50", 50), ("1000", 100), ("0", 20), ("-5", 1), ("x", 20),
])
def test_normalize_limit(raw, expected):
    assert normalize_limit(raw) == expected


def test_normalize_limit_custom_bounds():
    assert normalize_limit(None, default=50) == 50
    assert normalize_limit("80", default=10, maximum=50) == 50


def test_paginate_middle_page():
    p = paginate(2, 20, 45)
    assert (p.page, p.limit, p.offset) == (2, 20, 20)
    assert p.total_pages == 3
    assert p.has_next and p.has_prev
    assert (p.start_item, p.end_item) == (21, 40)


def test_paginate_last_page_is_partial():
    p = paginate(3, 20, 45)
    assert not p.has_next
    assert (p.start_item, p.end_item) == (41, 45)


def test_paginate_empty():
    p = paginate(1, 20, 0)
    assert p.total_pages == 0
    assert not p.has_next and not p.has_prev
    assert (p.start_item, p.end_item) == (0, 0)


def test_paginate_clamps_inputs():
    p = paginate(-3, 500, 10)
    assert p.page == 1
    assert p.limit == 100
    assert p.offset == 0


def test_paginate_serializes_camel_case():
    d = paginate(2, 20, 45).to_dict()
    assert d["totalPages"] == 3
    assert d["hasNext"] is True
    assert d["hasPrev"] is True
    assert d["startItem"] == 21
    assert d["endItem"] == 40


def test_paginate_invariants():
    for total in (0, 1, 19, 20, 21, 45, 250):
        for page in (-1, 0, 1, 2, 3, 7, 40):
            for limit in (-5, 0, 1, 7, 20, 100, 101):
                p = paginate(page, limit, total)
                assert p.page >= 1
                assert 1 <= p.limit <= 100
                assert p.offset == (p.page - 1) * p.limit
                assert p.total_pages == math.ceil(total / p.limit)
                if total > 0:
                    assert p.start_item <= p.end_item <= total
                else:
                    assert not p.has_next and not p.has_prev


def test_normalize_page_clamps_huge_values():
    assert normalize_page("99999999999999999999") == MAX_PAGE
    assert normalize_page(2**80) == MAX_PAGE


def test_largest_page_offset_fits_sqlite():
    p = paginate("99999999999999999999", MAX_LIMIT, 10)
    assert p.offset + p.limit <= SQLITE_MAX_INTEGER
    assert p.start_item == p.end_item == 10

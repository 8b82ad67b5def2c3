"""
Unit tests for the pagination helpers.

Tests cover:
- Query parameter parsing and defaults
- Offset calculation
- Pagination metadata (totalPages, hasNext, hasPrev)
"""

import math

import pytest

from services.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    PageRequest,
    build_pagination,
    parse_positive_int,
)


class TestParsePositiveInt:
    """Tests for parse_positive_int."""

    @pytest.mark.parametrize("raw,expected", [
        ("3", 3),
        (" 7 ", 7),
        (4, 4),
    ])
    def test_valid_values(self, raw, expected):
        assert parse_positive_int(raw, 1) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "2.5", "0", "-3", 0, -1])
    def test_invalid_values_fall_back_to_default(self, raw):
        assert parse_positive_int(raw, 10) == 10


class TestPageRequest:
    """Tests for PageRequest construction and offsets."""

    def test_defaults(self):
        request = PageRequest.from_query()
        assert request.page == DEFAULT_PAGE == 1
        assert request.limit == DEFAULT_LIMIT == 10

    def test_invalid_query_uses_defaults(self):
        request = PageRequest.from_query(page="nope", limit="-5")
        assert request == PageRequest(page=1, limit=10)

    def test_offset(self):
        assert PageRequest(page=1, limit=10).offset == 0
        assert PageRequest(page=3, limit=2).offset == 4


class TestBuildPagination:
    """Tests for build_pagination."""

    def test_first_page(self):
        pagination = build_pagination(PageRequest(page=1, limit=2), total_items=5)
        assert pagination.current_page == 1
        assert pagination.total_pages == 3
        assert pagination.total_items == 5
        assert pagination.items_per_page == 2
        assert pagination.has_next is True
        assert pagination.has_prev is False

    def test_last_page(self):
        pagination = build_pagination(PageRequest(page=3, limit=2), total_items=5)
        assert pagination.has_next is False
        assert pagination.has_prev is True

    def test_page_beyond_total(self):
        pagination = build_pagination(PageRequest(page=4, limit=2), total_items=5)
        assert pagination.total_pages == 3
        assert pagination.has_next is False
        assert pagination.has_prev is True

    def test_empty_collection(self):
        pagination = build_pagination(PageRequest(), total_items=0)
        assert pagination.total_pages == 0
        assert pagination.has_next is False
        assert pagination.has_prev is False

    @pytest.mark.parametrize("page", [1, 2, 5, 9])
    @pytest.mark.parametrize("limit", [1, 3, 10])
    @pytest.mark.parametrize("total", [0, 1, 10, 23])
    def test_metadata_invariants(self, page, limit, total):
        pagination = build_pagination(PageRequest(page=page, limit=limit), total)
        assert pagination.total_pages == math.ceil(total / limit)
        assert pagination.has_next == (page < pagination.total_pages)
        assert pagination.has_prev == (page > 1)

"""Pagination value object tests."""

import pytest
from pydantic import ValidationError

from roster.config import settings
from roster.core.constants import SortDirection
from roster.core.pagination import Order, Page, PageRequest, Slice, Sort


class TestSort:
    def test_by(self):
        sort = Sort.by("username", "age", direction=SortDirection.DESC)

        assert [o.attribute for o in sort.orders] == ["username", "age"]
        assert all(not o.is_ascending for o in sort.orders)

    def test_and(self):
        sort = Sort.by("username", direction=SortDirection.DESC).and_(Sort.by("id"))

        assert str(sort) == "username: DESC, id: ASC"

    def test_unsorted(self):
        assert not Sort.unsorted().is_sorted
        assert str(Sort.unsorted()) == "UNSORTED"

    def test_empty_attribute_rejected(self):
        with pytest.raises(ValidationError):
            Order(attribute="")


class TestSortDirection:
    @pytest.mark.parametrize("value, expected", [
        ("asc", SortDirection.ASC),
        ("DESC", SortDirection.DESC),
        ("Desc", SortDirection.DESC),
    ])
    def test_from_string(self, value, expected):
        assert SortDirection.from_string(value) is expected

    def test_from_string_invalid(self):
        with pytest.raises(ValueError):
            SortDirection.from_string("sideways")


class TestPageRequest:
    def test_defaults(self):
        request = PageRequest()

        assert request.page == 0
        assert request.size == settings.default_page_size
        assert not request.sort.is_sorted

    def test_offset(self):
        assert PageRequest.of(2, 3).offset == 6

    def test_next_and_previous(self):
        request = PageRequest.of(1, 3)

        assert request.next().page == 2
        assert request.previous_or_first().page == 0
        assert PageRequest.of(0, 3).previous_or_first().page == 0

    @pytest.mark.parametrize("page, size", [(-1, 3), (0, 0), (0, -5)])
    def test_invalid(self, page, size):
        with pytest.raises(ValidationError):
            PageRequest.of(page, size)

    def test_size_cap(self):
        with pytest.raises(ValidationError, match="max_page_size"):
            PageRequest.of(0, settings.max_page_size + 1)


class TestPage:
    def test_metadata(self):
        page = Page(content=["a", "b", "c"], pageable=PageRequest.of(0, 3), total_elements=5)

        assert page.total_pages == 2
        assert page.number == 0
        assert page.number_of_elements == 3
        assert page.is_first
        assert page.has_next
        assert not page.is_last

    def test_last_page(self):
        page = Page(content=["d", "e"], pageable=PageRequest.of(1, 3), total_elements=5)

        assert page.has_previous
        assert not page.has_next
        assert page.is_last

    def test_empty(self):
        page = Page(content=[], pageable=PageRequest.of(0, 3), total_elements=0)

        assert page.total_pages == 0
        assert not page.has_content
        assert page.is_first and page.is_last

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            Page(content=[], pageable=PageRequest.of(0, 3), total_elements=-1)

    def test_map_keeps_metadata(self):
        page = Page(content=[1, 2, 3], pageable=PageRequest.of(0, 3), total_elements=7)

        mapped = page.map(lambda n: n * 10)

        assert mapped.content == [10, 20, 30]
        assert mapped.total_elements == 7
        assert page.content == [1, 2, 3]


class TestSlice:
    def test_has_next(self):
        chunk = Slice(content=[1, 2, 3], pageable=PageRequest.of(0, 3), has_next=True)

        assert chunk.has_next
        assert not chunk.is_last

    def test_map(self):
        chunk = Slice(content=[1], pageable=PageRequest.of(2, 3), has_next=False)

        mapped = chunk.map(str)

        assert mapped.content == ["1"]
        assert mapped.is_last
        assert mapped.has_previous

"""
Pagination value objects.

``PageRequest`` describes which page to load (0-based page index, size and
sort); ``Page`` and ``Slice`` carry the loaded content back to the caller.

A Page knows the total number of elements, which costs a count query.
A Slice only knows whether another page follows, which the executor finds
out by fetching one extra row.

Usage:
    request = PageRequest.of(0, 3, Sort.by("username", direction=SortDirection.DESC))
    page = member_repository.find_by_age(10, request)
    page.total_elements, page.total_pages, page.has_next
"""

import math
from typing import Any, Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from roster.config import settings
from roster.core.constants import SortDirection


class Order(BaseModel):
    """A single ``attribute ASC|DESC`` sort order."""

    model_config = ConfigDict(frozen=True)

    attribute: str = Field(min_length=1)
    direction: SortDirection = SortDirection.ASC

    @property
    def is_ascending(self) -> bool:
        return self.direction == SortDirection.ASC

    def __str__(self) -> str:
        return f"{self.attribute}: {self.direction.value.upper()}"


class Sort(BaseModel):
    """Ordered collection of sort orders; empty means unsorted."""

    model_config = ConfigDict(frozen=True)

    orders: Tuple[Order, ...] = ()

    @classmethod
    def by(cls, *attributes: str, direction: SortDirection = SortDirection.ASC) -> "Sort":
        """
        Sort by one or more attributes in the same direction.

        Example:
            Sort.by("username", direction=SortDirection.DESC)
        """
        return cls(orders=tuple(Order(attribute=a, direction=direction) for a in attributes))

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    def and_(self, other: "Sort") -> "Sort":
        """Append the orders of ``other`` after this sort's orders."""
        return Sort(orders=self.orders + other.orders)

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def __str__(self) -> str:
        return ", ".join(str(o) for o in self.orders) if self.orders else "UNSORTED"


class PageRequest(BaseModel):
    """
    Request for one page of results.

    Attributes:
        page: 0-based page index
        size: Number of elements per page (capped by settings.max_page_size)
        sort: Sort applied before slicing
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    size: int = Field(default_factory=lambda: settings.default_page_size, ge=1)
    sort: Sort = Field(default_factory=Sort.unsorted)

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: int) -> int:
        """Reject page sizes above the configured cap."""
        if v > settings.max_page_size:
            raise ValueError(f"Page size {v} exceeds max_page_size ({settings.max_page_size})")
        return v

    @classmethod
    def of(cls, page: int, size: int, sort: Optional[Sort] = None) -> "PageRequest":
        return cls(page=page, size=size, sort=sort or Sort.unsorted())

    @property
    def offset(self) -> int:
        """Number of rows skipped before this page."""
        return self.page * self.size

    def next(self) -> "PageRequest":
        return self.model_copy(update={"page": self.page + 1})

    def previous_or_first(self) -> "PageRequest":
        if self.page == 0:
            return self
        return self.model_copy(update={"page": self.page - 1})


class _Chunk(BaseModel):
    """Behaviour shared by Page and Slice."""

    model_config = ConfigDict(frozen=True)

    content: List[Any]
    pageable: PageRequest

    @property
    def number(self) -> int:
        return self.pageable.page

    @property
    def size(self) -> int:
        return self.pageable.size

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def map(self, converter: Callable[[Any], Any]):
        """Return a copy whose content is ``converter`` applied to each element."""
        return self.model_copy(update={"content": [converter(item) for item in self.content]})


class Slice(_Chunk):
    """A page of content that only knows whether a next page exists."""

    has_next: bool = False

    def __repr__(self) -> str:
        return f"<Slice(number={self.number}, elements={self.number_of_elements}, has_next={self.has_next})>"


class Page(_Chunk):
    """A page of content plus the total number of elements."""

    total_elements: int = Field(ge=0)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    def __repr__(self) -> str:
        return (
            f"<Page(number={self.number}, elements={self.number_of_elements}, "
            f"total_elements={self.total_elements}, total_pages={self.total_pages})>"
        )

"""
Pagination and sorting primitives

A PageRequest is built per call from the `page`, `size` and `sort` query
parameters. Sort specifiers have the form "property,direction", e.g.
"createdAt,desc".
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, Mapping, Optional, TypeVar

from apps.shared.errors import BadRequestError

T = TypeVar("T")


class InvalidSortError(BadRequestError):
    """A sort specifier could not be parsed."""


class Direction(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_string(cls, value: str) -> "Direction":
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise InvalidSortError(
                f"Invalid sort direction '{value}'; must be 'asc' or 'desc' (case insensitive)"
            ) from None


@dataclass(frozen=True)
class SortOrder:
    property: str
    direction: Direction = Direction.ASC

    @property
    def ascending(self) -> bool:
        return self.direction is Direction.ASC


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int
    orders: tuple[SortOrder, ...] = ()

    def __post_init__(self):
        if self.page < 0:
            raise BadRequestError("Page index must not be less than zero")
        if self.size < 1:
            raise BadRequestError("Page size must not be less than one")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page(Generic[T]):
    """One slice of a larger result set."""
    items: list[T]
    total: int
    request: PageRequest

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.size) if self.total else 0

    @property
    def is_first(self) -> bool:
        return self.request.page == 0

    @property
    def is_last(self) -> bool:
        return self.request.page + 1 >= self.total_pages


def parse_sort(
    specs: Iterable[str],
    allowed: Optional[Mapping[str, str]] = None,
) -> list[SortOrder]:
    """
    Parse "property,direction" specifiers into SortOrders.

    allowed maps accepted property names to the name the order should carry
    (e.g. {"createdAt": "created_at"}). Unknown properties, a missing or
    extra token and unrecognized directions all raise InvalidSortError.
    """
    orders = []
    for spec in specs:
        tokens = spec.split(",")
        if len(tokens) != 2:
            raise InvalidSortError(
                f"Invalid sort specifier '{spec}'; expected 'property,direction'"
            )
        name, direction = tokens[0].strip(), tokens[1]
        if not name:
            raise InvalidSortError(f"Invalid sort specifier '{spec}'; property is empty")
        if allowed is not None:
            if name not in allowed:
                raise InvalidSortError(
                    f"Cannot sort by '{name}'; allowed: {', '.join(sorted(allowed))}"
                )
            name = allowed[name]
        orders.append(SortOrder(name, Direction.from_string(direction)))
    return orders

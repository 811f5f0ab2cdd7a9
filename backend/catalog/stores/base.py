"""Persistence contract for product records.

Every store owns the authoritative product set and makes each public
operation atomic with respect to the others. The paged search contract:

* filter: case-insensitive substring match of ``keyword`` on ``name``
* order: ascending by ``sort_key``, ties broken by ``id`` ascending
* window: ``[page * size, page * size + size)`` of the ordered matches
* total: number of matches before the window is applied

A window that starts past the last match, has a negative page, or a
non-positive size is empty; ``total`` is still reported in full.
"""

from __future__ import annotations

from typing import NamedTuple, Protocol, Sequence, runtime_checkable

from catalog.api.schemas.product import INT32_MAX, ProductBase, ProductRead
from catalog.core.errors import InvalidArgumentError

SORTABLE_FIELDS: tuple[str, ...] = ("id", "name", "quantity", "price")
DEFAULT_SORT_FIELD = "name"


class SearchPage(NamedTuple):
    items: list[ProductRead]
    total: int


@runtime_checkable
class ProductStore(Protocol):
    def insert(self, product: ProductBase) -> ProductRead: ...

    def insert_many(self, products: Sequence[ProductBase]) -> list[ProductRead]: ...

    def get_all(self) -> list[ProductRead]: ...

    def get_by_id(self, product_id: int) -> ProductRead | None: ...

    def get_by_name(self, name: str) -> ProductRead | None: ...

    def search_contains(self, keyword: str) -> list[ProductRead]: ...

    def search_contains_paged(
        self, keyword: str, page: int, size: int, sort_key: str
    ) -> SearchPage: ...

    def update(self, product: ProductRead) -> ProductRead | None: ...

    def delete_by_id(self, product_id: int) -> bool: ...

    def ping(self) -> None: ...


def validate_sort_key(sort_key: str) -> str:
    if sort_key not in SORTABLE_FIELDS:
        allowed = ", ".join(SORTABLE_FIELDS)
        raise InvalidArgumentError(
            f"Cannot sort by {sort_key!r}; expected one of: {allowed}"
        )
    return sort_key


def page_bounds(page: int, size: int) -> tuple[int, int] | None:
    """Return the ``(offset, limit)`` for a page window, or None when empty."""
    if page < 0 or size <= 0:
        return None
    return page * size, size


def storable_id(product_id: int) -> bool:
    """Whether ``product_id`` fits the id column; other ids can never exist."""
    return 1 <= product_id <= INT32_MAX


def preset_id(product: ProductBase) -> int | None:
    """Client-supplied id on an insert payload, if any."""
    return getattr(product, "id", None)


def mutable_fields(product: ProductBase) -> dict:
    return product.model_dump(include=set(ProductBase.model_fields))

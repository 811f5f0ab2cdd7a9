"""Thread-safe in-memory product store."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from catalog.api.schemas.product import ProductBase, ProductRead
from catalog.core.errors import ProductConflictError
from catalog.stores.base import (
    SearchPage,
    mutable_fields,
    page_bounds,
    preset_id,
    storable_id,
    validate_sort_key,
)

logger = logging.getLogger(__name__)


class InMemoryProductStore:
    """Dict-backed store; one re-entrant lock serializes every operation.

    Records are copied on the way in and out so callers never hold a
    reference to stored state.
    """

    def __init__(self, products: Sequence[ProductBase] = ()) -> None:
        self._lock = threading.RLock()
        self._records: dict[int, ProductRead] = {}
        self._next_id = 1
        if products:
            self.insert_many(products)

    def _allocate(self, product: ProductBase) -> ProductRead:
        requested = preset_id(product)
        if requested is not None:
            if requested in self._records:
                raise ProductConflictError(f"Product with id {requested} already exists")
            product_id = requested
        else:
            product_id = self._next_id
        self._next_id = max(self._next_id, product_id + 1)
        record = ProductRead(id=product_id, **mutable_fields(product))
        self._records[product_id] = record
        return record.model_copy()

    def _matches(self, keyword: str) -> list[ProductRead]:
        needle = keyword.lower()
        return [r for r in self._records.values() if needle in r.name.lower()]

    def insert(self, product: ProductBase) -> ProductRead:
        with self._lock:
            return self._allocate(product)

    def insert_many(self, products: Sequence[ProductBase]) -> list[ProductRead]:
        with self._lock:
            snapshot = dict(self._records), self._next_id
            try:
                return [self._allocate(p) for p in products]
            except ProductConflictError:
                self._records, self._next_id = snapshot
                raise

    def get_all(self) -> list[ProductRead]:
        with self._lock:
            return [self._records[k].model_copy() for k in sorted(self._records)]

    def get_by_id(self, product_id: int) -> ProductRead | None:
        if not storable_id(product_id):
            return None
        with self._lock:
            record = self._records.get(product_id)
            return record.model_copy() if record else None

    def get_by_name(self, name: str) -> ProductRead | None:
        with self._lock:
            for product_id in sorted(self._records):
                record = self._records[product_id]
                if record.name == name:
                    return record.model_copy()
            return None

    def search_contains(self, keyword: str) -> list[ProductRead]:
        with self._lock:
            return [r.model_copy() for r in self._matches(keyword)]

    def search_contains_paged(
        self, keyword: str, page: int, size: int, sort_key: str
    ) -> SearchPage:
        validate_sort_key(sort_key)
        with self._lock:
            matches = self._matches(keyword)
            total = len(matches)
            bounds = page_bounds(page, size)
            if bounds is None:
                return SearchPage(items=[], total=total)
            offset, limit = bounds
            matches.sort(key=lambda r: (getattr(r, sort_key), r.id))
            window = matches[offset : offset + limit]
            return SearchPage(items=[r.model_copy() for r in window], total=total)

    def update(self, product: ProductRead) -> ProductRead | None:
        if not storable_id(product.id):
            return None
        with self._lock:
            if product.id not in self._records:
                return None
            record = ProductRead(id=product.id, **mutable_fields(product))
            self._records[product.id] = record
            return record.model_copy()

    def delete_by_id(self, product_id: int) -> bool:
        if not storable_id(product_id):
            return False
        with self._lock:
            return self._records.pop(product_id, None) is not None

    def ping(self) -> None:
        return None

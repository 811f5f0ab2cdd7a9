"""Product catalog operations layered over a ProductStore."""

from __future__ import annotations

import logging
from typing import NamedTuple, Sequence

from catalog.api.schemas.product import ProductBase, ProductRead, ProductUpdate
from catalog.core.errors import InvalidArgumentError, ProductNotFoundError
from catalog.stores.base import DEFAULT_SORT_FIELD, ProductStore, validate_sort_key

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10


class SearchResult(NamedTuple):
    items: list[ProductRead]
    total_matches: int
    page: int
    size: int


class ProductService:
    """Validates requests and shapes results; holds no state of its own."""

    def __init__(self, store: ProductStore, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.store = store
        self.default_page_size = default_page_size

    def search(
        self,
        keyword: str | None,
        page: int | None = None,
        size: int | None = None,
        sort_by: str | None = None,
    ) -> SearchResult:
        """Paginated, sorted, case-insensitive substring search on product names.

        Args:
            keyword: Required; rejected when missing or blank.
            page: Zero-based page index, defaults to 0. Negative values are
                passed through and produce an empty page.
            size: Page size, defaults to the configured page size.
            sort_by: Product field to sort by, defaults to ``name``.

        Raises:
            InvalidArgumentError: keyword is blank or sort_by is not sortable.
                Raised before the store is touched.
        """
        if keyword is None or not keyword.strip():
            raise InvalidArgumentError("Search keyword is required")

        page = DEFAULT_PAGE if page is None else page
        size = self.default_page_size if size is None else size
        sort_by = validate_sort_key(sort_by or DEFAULT_SORT_FIELD)

        keyword = keyword.strip()
        logger.debug(
            f"Searching products keyword={keyword!r} page={page} size={size} sort_by={sort_by}"
        )
        found = self.store.search_contains_paged(keyword, page, size, sort_by)
        return SearchResult(items=found.items, total_matches=found.total, page=page, size=size)

    def add_product(self, product: ProductBase) -> ProductRead:
        stored = self.store.insert(product)
        logger.info(f"Added product {stored.id} ({stored.name!r})")
        return stored

    def add_products(self, products: Sequence[ProductBase]) -> list[ProductRead]:
        stored = self.store.insert_many(products)
        logger.info(f"Added {len(stored)} products")
        return stored

    def list_products(self) -> list[ProductRead]:
        return self.store.get_all()

    def get_product_by_id(self, product_id: int) -> ProductRead:
        product = self.store.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_product_by_name(self, name: str) -> ProductRead:
        product = self.store.get_by_name(name)
        if product is None:
            raise ProductNotFoundError(name)
        return product

    def update_product(self, product: ProductUpdate) -> ProductRead:
        if product.id is None:
            raise InvalidArgumentError("Product id is required for update")

        updated = self.store.update(ProductRead.model_validate(product.model_dump()))
        if updated is None:
            raise ProductNotFoundError(product.id)
        logger.info(f"Updated product {updated.id}")
        return updated

    def delete_product(self, product_id: int) -> str:
        if not self.store.delete_by_id(product_id):
            raise ProductNotFoundError(product_id)
        logger.info(f"Removed product {product_id}")
        return f"product removed !! {product_id}"

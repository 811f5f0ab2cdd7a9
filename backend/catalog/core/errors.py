"""Domain failures raised by stores and the product service."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for every failure the gateway knows how to translate."""

    message: str = "Catalog error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class InvalidArgumentError(CatalogError):
    """Request parameters are missing or malformed."""

    message = "Invalid argument"


class ProductNotFoundError(CatalogError):
    """The referenced product id or name does not exist."""

    message = "Product not found"

    def __init__(self, key: int | str | None = None, message: str | None = None) -> None:
        self.key = key
        if message is None and key is not None:
            label = "id" if isinstance(key, int) else "name"
            message = f"Product with {label} {key!r} not found"
        super().__init__(message)


class ProductConflictError(CatalogError):
    """A product with the requested id already exists."""

    message = "Product already exists"


class StoreError(CatalogError):
    """Unexpected persistence failure."""

    message = "Store operation failed"

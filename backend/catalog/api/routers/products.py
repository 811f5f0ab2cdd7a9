"""CRUD + keyword search endpoints for the product catalog."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies.service import get_app_settings, get_product_service
from catalog.api.schemas.product import (
    DeleteResponse,
    ErrorResponse,
    ProductCreate,
    ProductRead,
    ProductSearchResponse,
    ProductUpdate,
)
from catalog.core.config import Settings
from catalog.core.errors import InvalidArgumentError
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


def summarize_error(exc: Exception, max_length: int) -> str:
    """Short, single-line description of ``exc`` safe to return to clients."""
    lines = str(exc).strip().splitlines()
    first_line = lines[0] if lines else ""
    detail = f"{type(exc).__name__}: {first_line}" if first_line else type(exc).__name__
    if len(detail) > max_length:
        detail = detail[: max(max_length - 3, 0)] + "..."
    return detail


@router.post(
    "/addProduct",
    summary="Create a product",
    response_model=ProductRead,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
)
def add_product(
    payload: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    return service.add_product(payload)


@router.post(
    "/addProducts",
    summary="Create several products at once",
    response_model=list[ProductRead],
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
)
def add_products(
    payload: list[ProductCreate] = Body(...),
    service: ProductService = Depends(get_product_service),
) -> list[ProductRead]:
    """Insert every product in order; either all are stored or none are."""
    return service.add_products(payload)


@router.get("/products", summary="List all products", response_model=list[ProductRead])
def find_all_products(
    service: ProductService = Depends(get_product_service),
) -> list[ProductRead]:
    return service.list_products()


@router.get(
    "/productById/{product_id}",
    summary="Get a product by id",
    response_model=ProductRead,
    responses=NOT_FOUND,
)
def find_product_by_id(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    return service.get_product_by_id(product_id)


@router.get(
    "/product/{name}",
    summary="Get a product by exact name",
    response_model=ProductRead,
    responses=NOT_FOUND,
)
def find_product_by_name(
    name: str,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Case-sensitive match. When several products share the name the
    lowest id is returned."""
    return service.get_product_by_name(name)


@router.put(
    "/update",
    summary="Replace a product's fields",
    response_model=ProductRead,
    responses={
        **NOT_FOUND,
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    },
)
def update_product(
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Update the product identified by ``payload.id``; never inserts."""
    return service.update_product(payload)


@router.delete(
    "/delete/{product_id}",
    summary="Delete a product",
    response_model=DeleteResponse,
    responses=NOT_FOUND,
)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> DeleteResponse:
    message = service.delete_product(product_id)
    return DeleteResponse(id=product_id, message=message)


@router.get(
    "/products/search",
    summary="Search products by name with pagination",
    response_model=ProductSearchResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def search_products(
    keyword: str | None = Query(None, description="Case-insensitive name fragment"),
    page: int = Query(0, description="Zero-based page index"),
    size: int | None = Query(None, description="Items per page (default 10)"),
    sort_by: str = Query("name", alias="sortBy", description="Field to sort by"),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_app_settings),
):
    """Return one page of products whose name contains ``keyword``.

    ``totalResults`` counts every match, not just the current page.
    """
    try:
        result = service.search(keyword, page=page, size=size, sort_by=sort_by)
    except InvalidArgumentError:
        raise
    except Exception as e:
        logger.error(f"Search failed for keyword {keyword!r}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Search failed: "
                + summarize_error(e, settings.error_detail_max_length)
            },
        )

    return ProductSearchResponse(
        products=result.items,
        totalResults=result.total_matches,
        page=result.page,
        size=result.size,
    )

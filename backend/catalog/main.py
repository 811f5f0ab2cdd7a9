"""FastAPI application bootstrap: settings, store and service wiring, routers."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.api.routers import health, products
from catalog.core.config import Settings, get_settings
from catalog.core.errors import (
    CatalogError,
    InvalidArgumentError,
    ProductConflictError,
    ProductNotFoundError,
    StoreError,
)
from catalog.core.logging import configure_logging
from catalog.db.session import build_engine, build_session_factory, create_tables
from catalog.services.product_service import ProductService
from catalog.stores.base import ProductStore
from catalog.stores.memory import InMemoryProductStore
from catalog.stores.sql import SqlProductStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    ProductConflictError: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_store(settings: Settings) -> ProductStore:
    """Build the product store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        logger.info("Using in-memory product store")
        return InMemoryProductStore()

    engine = build_engine(settings.database_url, echo=settings.db_echo)
    create_tables(engine)
    logger.info("Using SQL product store")
    return SqlProductStore(build_session_factory(engine))


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests with the same ``{"error": ...}`` envelope."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())[1:])
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "Invalid request: " + "; ".join(problems)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def create_app(store: ProductStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Instantiate the FastAPI app with one store and one service."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    if store is None:
        store = create_store(settings)
    app.state.settings = settings
    app.state.product_service = ProductService(
        store, default_page_size=settings.default_page_size
    )

    logger.info(f"[CORS] Allowed origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router)
    app.include_router(products.router, tags=["products"])

    return app

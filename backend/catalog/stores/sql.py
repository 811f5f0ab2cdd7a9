"""SQLAlchemy-backed product store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Sequence

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from catalog.api.schemas.product import ProductBase, ProductRead
from catalog.core.errors import ProductConflictError, StoreError
from catalog.db.models.product import Product
from catalog.db.session import session_scope
from catalog.stores.base import (
    SearchPage,
    mutable_fields,
    page_bounds,
    preset_id,
    storable_id,
    validate_sort_key,
)

logger = logging.getLogger(__name__)


class SqlProductStore:
    """Runs every operation in its own session and transaction.

    ``SQLAlchemyError`` never escapes: integrity violations on insert become
    ``ProductConflictError`` and everything else becomes ``StoreError``.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as db:
                yield db
        except IntegrityError as e:
            logger.warning(f"Integrity error during {action}: {e}")
            raise ProductConflictError(
                f"Failed to {action}: product id already exists"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Database error during {action}: {e}", exc_info=True)
            raise StoreError(f"Failed to {action}") from e

    @staticmethod
    def _name_contains(keyword: str):
        return func.lower(Product.name).contains(keyword.lower(), autoescape=True)

    @staticmethod
    def _add(db: Session, product: ProductBase) -> Product:
        requested = preset_id(product)
        if requested is not None and db.get(Product, requested) is not None:
            raise ProductConflictError(f"Product with id {requested} already exists")
        row = Product(id=requested, **mutable_fields(product))
        db.add(row)
        return row

    def insert(self, product: ProductBase) -> ProductRead:
        with self._transaction("insert product") as db:
            row = self._add(db, product)
            db.flush()
            stored = ProductRead.model_validate(row)
        logger.debug(f"Inserted product {stored.id}")
        return stored

    def insert_many(self, products: Sequence[ProductBase]) -> list[ProductRead]:
        with self._transaction("insert products") as db:
            rows = []
            for product in products:
                rows.append(self._add(db, product))
                # Flush per row so ids are assigned in input order
                db.flush()
            stored = [ProductRead.model_validate(row) for row in rows]
        logger.debug(f"Inserted {len(stored)} products")
        return stored

    def get_all(self) -> list[ProductRead]:
        with self._transaction("list products") as db:
            rows = db.scalars(select(Product).order_by(Product.id)).all()
            return [ProductRead.model_validate(row) for row in rows]

    def get_by_id(self, product_id: int) -> ProductRead | None:
        if not storable_id(product_id):
            return None
        with self._transaction("get product") as db:
            row = db.get(Product, product_id)
            return ProductRead.model_validate(row) if row else None

    def get_by_name(self, name: str) -> ProductRead | None:
        with self._transaction("get product by name") as db:
            row = db.scalars(
                select(Product).where(Product.name == name).order_by(Product.id).limit(1)
            ).first()
            return ProductRead.model_validate(row) if row else None

    def search_contains(self, keyword: str) -> list[ProductRead]:
        with self._transaction("search products") as db:
            rows = db.scalars(
                select(Product).where(self._name_contains(keyword)).order_by(Product.id)
            ).all()
            return [ProductRead.model_validate(row) for row in rows]

    def search_contains_paged(
        self, keyword: str, page: int, size: int, sort_key: str
    ) -> SearchPage:
        validate_sort_key(sort_key)
        condition = self._name_contains(keyword)

        with self._transaction("search products") as db:
            total = db.scalar(select(func.count(Product.id)).where(condition)) or 0

            bounds = page_bounds(page, size)
            if bounds is None or bounds[0] >= total:
                return SearchPage(items=[], total=total)
            offset, limit = bounds
            # Never ask the driver for more rows than remain; keeps LIMIT in range
            limit = min(limit, total - offset)

            query = (
                select(Product)
                .where(condition)
                .order_by(getattr(Product, sort_key).asc(), Product.id.asc())
                .offset(offset)
                .limit(limit)
            )
            rows = db.scalars(query).all()
            return SearchPage(
                items=[ProductRead.model_validate(row) for row in rows], total=total
            )

    def update(self, product: ProductRead) -> ProductRead | None:
        if not storable_id(product.id):
            return None
        with self._transaction("update product") as db:
            row = db.get(Product, product.id)
            if row is None:
                return None
            for field, value in mutable_fields(product).items():
                setattr(row, field, value)
            db.flush()
            stored = ProductRead.model_validate(row)
        logger.debug(f"Updated product {stored.id}")
        return stored

    def delete_by_id(self, product_id: int) -> bool:
        if not storable_id(product_id):
            return False
        with self._transaction("delete product") as db:
            row = db.get(Product, product_id)
            if row is None:
                return False
            db.delete(row)
        logger.debug(f"Deleted product {product_id}")
        return True

    def ping(self) -> None:
        with self._transaction("check database") as db:
            db.execute(text("SELECT 1")).fetchone()

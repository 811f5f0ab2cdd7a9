"""SQLAlchemy model for product records."""

from sqlalchemy import Column, Float, Index, Integer, String, func

from catalog.db.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0.0)

    __table_args__ = (Index("ix_products_name_lower", func.lower(name)),)

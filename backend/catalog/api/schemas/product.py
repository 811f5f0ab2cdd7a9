"""Pydantic models describing Product payloads."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound of the Integer columns (id, quantity) in products
INT32_MAX = 2**31 - 1


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(0, ge=0, le=INT32_MAX)
    price: float = Field(0.0, ge=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Product name is required")
        return v


class ProductCreate(ProductBase):
    """Schema for inserted products; ``id`` is normally left for the store."""

    id: int | None = Field(None, ge=1, le=INT32_MAX)


class ProductUpdate(ProductBase):
    """Full replacement of a product's mutable fields, addressed by ``id``."""

    id: int | None = Field(None, ge=1, le=INT32_MAX)


class ProductRead(ProductBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ProductSearchResponse(BaseModel):
    products: list[ProductRead]
    totalResults: int
    page: int
    size: int


class DeleteResponse(BaseModel):
    id: int
    message: str


class ErrorResponse(BaseModel):
    error: str

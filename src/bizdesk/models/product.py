"""bizdesk/models/product.py — Модели товара."""

from pydantic import Field

from bizdesk.models.common import BizdeskBase


class ProductCreate(BizdeskBase):
    name: str = Field(..., min_length=1, max_length=256)
    price: float = Field(..., ge=0)
    description: str | None = Field(default=None, max_length=2048)


class ProductUpdate(BizdeskBase):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    price: float | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=2048)

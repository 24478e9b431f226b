"""
bizdesk/models/purchase.py — Модели покупки.

``client``, ``createdBy`` и ``company`` назначает сервер; ``products``
принимаются только как список ID и проходят через guard
``is_product_exists``.
"""

import datetime as dt

from pydantic import Field, field_validator

from bizdesk.models.common import BizdeskBase
from bizdesk.models.enums import PaymentMethod, PurchaseStatus
from bizdesk.validators import parse_date


def _coerce_date(v):
    if v is None or v == "":
        return None
    parsed = parse_date(v)
    if parsed is None:
        raise ValueError(f"{v} is not a valid date, please use the format YYYY/MM/DD.")
    return parsed


class PurchaseCreate(BizdeskBase):
    total_amount: float = Field(..., ge=0.01)
    status: PurchaseStatus = PurchaseStatus.PENDING
    payment_method: PaymentMethod
    date: dt.date | None = None
    products: list[str] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, v):
        return _coerce_date(v)


class PurchaseUpdate(BizdeskBase):
    total_amount: float | None = Field(default=None, ge=0.01)
    status: PurchaseStatus | None = None
    payment_method: PaymentMethod | None = None
    date: dt.date | None = None
    products: list[str] | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, v):
        return _coerce_date(v)

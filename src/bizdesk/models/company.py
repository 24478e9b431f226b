"""
bizdesk/models/company.py — Модели компании.

Парность координат (обе или ни одной) проверяет guard
``validate_coordinates``; здесь — только диапазоны.
"""

from pydantic import Field, field_validator

from bizdesk.models.common import BizdeskBase
from bizdesk.validators import validate_latitude, validate_longitude, validate_tax_id


class _CompanyFields(BizdeskBase):
    tax_id: str | None = Field(default=None, examples=["123456789"])
    address: str | None = Field(default=None, max_length=512)
    latitude: float | None = None
    longitude: float | None = None
    postman_request: bool = False

    @field_validator("tax_id")
    @classmethod
    def _check_tax_id(cls, v: str | None) -> str | None:
        if v is not None and not validate_tax_id(v):
            raise ValueError(f"{v} is not a valid tax id, it must be exactly 9 digits")
        return v

    @field_validator("latitude")
    @classmethod
    def _check_latitude(cls, v: float | None) -> float | None:
        if v is not None and not validate_latitude(v):
            raise ValueError(f"{v} is not a valid latitude")
        return v

    @field_validator("longitude")
    @classmethod
    def _check_longitude(cls, v: float | None) -> float | None:
        if v is not None and not validate_longitude(v):
            raise ValueError(f"{v} is not a valid longitude")
        return v


class CompanyCreate(_CompanyFields):
    name: str = Field(..., min_length=1, max_length=256, examples=["Alpha S.A."])


class CompanyUpdate(_CompanyFields):
    name: str | None = Field(default=None, min_length=1, max_length=256)

"""bizdesk/models/accountant.py — Модели бухгалтера компании."""

from pydantic import Field, field_validator

from bizdesk.models.common import BizdeskBase
from bizdesk.validators import validate_phone_number, validate_tax_id


class _AccountantFields(BizdeskBase):
    phone: str | None = None
    tax_id: str | None = None

    @field_validator("phone", mode="before")
    @classmethod
    def _check_phone(cls, v):
        if not validate_phone_number(v):
            raise ValueError(f"{v} is not a valid phone number, it must be exactly 10 digits")
        return str(v) if v else None

    @field_validator("tax_id", mode="before")
    @classmethod
    def _check_tax_id(cls, v):
        if v is None:
            return None
        if not validate_tax_id(v):
            raise ValueError(f"{v} is not a valid tax id, it must be exactly 9 digits")
        return str(v)


class AccountantCreate(_AccountantFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AccountantUpdate(_AccountantFields):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

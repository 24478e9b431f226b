"""bizdesk/models/client.py — Модели клиента компании."""

from pydantic import Field, field_validator

from bizdesk.models.common import BizdeskBase
from bizdesk.validators import validate_phone_number


class _ClientFields(BizdeskBase):
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str | None = Field(default=None, examples=["6912345678"])
    address: str | None = Field(default=None, max_length=512)

    @field_validator("phone", mode="before")
    @classmethod
    def _check_phone(cls, v):
        if not validate_phone_number(v):
            raise ValueError(f"{v} is not a valid phone number, it must be exactly 10 digits")
        return str(v) if v else None


class ClientCreate(_ClientFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class ClientUpdate(_ClientFields):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)

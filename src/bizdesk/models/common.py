"""
bizdesk/models/common.py — Базовые типы Bizdesk-домена.

Документы хранятся и отдаются в camelCase (``firstName``, ``createdBy``),
Python-код работает со snake_case — за это отвечает alias_generator.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# Флаги транспорта, а не данные документа
TRANSPORT_FIELDS = {"postman_request"}


class BizdeskBase(BaseModel):
    """Базовая Pydantic-модель для Bizdesk-схем."""

    model_config = {
        "str_strip_whitespace": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_document(self, *, partial: bool = False) -> dict:
        """Сериализует схему в документ хранилища (camelCase, JSON-типы)."""
        return self.model_dump(
            by_alias=True,
            exclude_unset=partial,
            exclude=TRANSPORT_FIELDS,
            mode="json",
        )

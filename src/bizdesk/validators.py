"""
bizdesk/validators.py — Предикаты формы полей.

Чистые функции без побочных эффектов: ничего не бросают, только
возвращают bool. Pydantic-валидаторы в ``bizdesk.models`` превращают
``False`` в ошибку валидации (→ 400 Bad Request).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime

_PHONE_RE = re.compile(r"[0-9]{10}")
_TAX_ID_RE = re.compile(r"[0-9]{9}")

# YYYY/MM/DD: основной формат API; ISO принимается тоже
_DATE_FORMATS = ("%Y/%m/%d", "%Y-%m-%d")


def parse_date(value) -> date | None:
    """Приводит значение к ``date``; ``None`` если это не календарная дата."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def validate_date(value) -> bool:
    return parse_date(value) is not None


def validate_phone_number(value: int | str | None) -> bool:
    """Телефон необязателен; если задан — ровно 10 цифр."""
    if not value:
        return True
    return bool(_PHONE_RE.fullmatch(str(value)))


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_latitude(value) -> bool:
    return _is_number(value) and -90 <= value <= 90


def validate_longitude(value) -> bool:
    return _is_number(value) and -180 <= value <= 180


def validate_tax_id(value: int | str) -> bool:
    """Налоговый номер (AFM): ровно 9 цифр."""
    if value is None or isinstance(value, bool):
        return False
    return bool(_TAX_ID_RE.fullmatch(str(value)))


__all__ = [
    "parse_date",
    "validate_date",
    "validate_phone_number",
    "validate_latitude",
    "validate_longitude",
    "validate_tax_id",
]

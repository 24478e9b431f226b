"""
bizdesk/models/user.py — Модели пользователя.

Поля ``password``, ``createdAt``, ``updatedAt`` никогда не попадают
в ответы: ``UserRead`` их не содержит, а выборки из хранилища
исключают их проекцией (``USER_HIDDEN_FIELDS``).
"""

from pydantic import Field

from bizdesk.models.common import BizdeskBase
from bizdesk.models.enums import Role

USER_HIDDEN_FIELDS = ("password", "createdAt", "updatedAt")


class UserCreate(BizdeskBase):
    """Схема регистрации нового пользователя."""
    first_name: str = Field(..., min_length=1, max_length=100, examples=["Nikos"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Papadopoulos"])
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", examples=["user@example.com"])
    password: str = Field(..., min_length=6, max_length=128)


class UserLogin(BizdeskBase):
    email: str
    password: str
    postman_request: bool = False


class UserUpdate(BizdeskBase):
    """Самостоятельное обновление профиля."""
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordChange(BizdeskBase):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class RoleChange(BizdeskBase):
    role: Role | None = None
    postman_request: bool = False


class CompanyMembership(BizdeskBase):
    """Добавление пользователя в компанию текущего владельца."""
    role: Role | None = None


class UserRead(BizdeskBase):
    """Схема для возврата данных пользователя (без пароля и аудита)."""
    id: str
    first_name: str
    last_name: str
    email: str
    role: Role = Role.UNCATEGORIZED
    company: str | None = None
    image: str | None = None


class CurrentUser(BizdeskBase):
    """Идентичность, прикреплённая к аутентифицированному запросу."""
    user_id: str
    first_name: str = ""
    last_name: str = ""
    email: str
    role: Role = Role.UNCATEGORIZED
    company: str | None = None
    image: str | None = None

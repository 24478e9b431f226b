"""
bizdesk/db/repositories/user_repo.py — Репозиторий пользователей.

Хеширование пароля — забота слоя хранения: пароль попадает в документ
только как bcrypt-хеш (``create_user``, ``set_password``).
"""

from __future__ import annotations

import bcrypt

from bizdesk.config import get_settings
from bizdesk.db.repositories import document_repo
from bizdesk.models.enums import Collection, Role


def hash_password(password: str) -> str:
    """Хеширует пароль с помощью bcrypt."""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Сравнивает открытый пароль с хешем из БД."""
    if not plain or not hashed:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


async def create_user(
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: Role = Role.UNCATEGORIZED,
    image: str | None = None,
    company: str | None = None,
) -> dict:
    """Создать нового пользователя."""
    return await document_repo.insert_document(
        Collection.USERS,
        {
            "firstName": first_name,
            "lastName": last_name,
            "email": email.lower(),
            "password": hash_password(password),
            "role": Role(role).value,
            "company": company,
            "image": image or get_settings().default_profile_image,
        },
    )


async def get_user_by_id(user_id: str) -> dict | None:
    return await document_repo.get_document(Collection.USERS, user_id)


async def get_user_by_email(email: str) -> dict | None:
    return await document_repo.find_one(Collection.USERS, {"email": email.lower()})


async def set_password(user_id: str, new_password: str) -> None:
    await document_repo.update_document(
        Collection.USERS, user_id, {"password": hash_password(new_password)}
    )

"""
bizdesk/services/auth_service.py — Сервис аутентификации.

Регистрация, вход по email + пароль, обновление токенов.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import Response

from bizdesk.db.repositories import user_repo
from bizdesk.exceptions import ConflictError, UnauthorizedError
from bizdesk.models.enums import Role
from bizdesk.models.user import UserCreate, UserRead
from bizdesk.services import token_service

logger = logging.getLogger(__name__)


def user_to_read(row: dict) -> UserRead:
    """Конвертирует документ пользователя → UserRead."""
    return UserRead(
        id=row["id"],
        first_name=row.get("firstName", ""),
        last_name=row.get("lastName", ""),
        email=row["email"],
        role=row.get("role", Role.UNCATEGORIZED),
        company=row.get("company"),
        image=row.get("image"),
    )


# ═══════════════════════════════════════════════════════════════════════════
# РЕГИСТРАЦИЯ
# ═══════════════════════════════════════════════════════════════════════════


async def register_user(data: UserCreate) -> UserRead:
    """Регистрирует нового пользователя без компании."""
    existing = await user_repo.get_user_by_email(data.email)
    if existing:
        raise ConflictError(
            f"User with email '{data.email}' already exists",
            details={"field": "email"},
        )

    try:
        row = await user_repo.create_user(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password=data.password,
        )
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError(
            f"User with email '{data.email}' already exists",
            details={"field": "email"},
        ) from exc
    logger.info("User registered: %s", row["id"])
    return user_to_read(row)


# ═══════════════════════════════════════════════════════════════════════════
# АУТЕНТИФИКАЦИЯ
# ═══════════════════════════════════════════════════════════════════════════


async def authenticate(
    email: str, password: str, response: Response, is_automated_client: bool = False
) -> UserRead:
    """Email + пароль → токены в cookie/заголовках."""
    user = await user_repo.get_user_by_email(email)
    if not user or not user_repo.verify_password(password, user.get("password")):
        raise UnauthorizedError("Invalid email or password")

    await token_service.reattach_tokens(response, user["id"], is_automated_client)
    return user_to_read(user)


async def refresh_tokens(
    refresh_token: str, response: Response, is_automated_client: bool = False
) -> dict:
    """Выдаёт новую пару токенов по валидному refresh-токену."""
    payload = token_service.decode_token(refresh_token)
    if payload.get("type") != "refresh":
        raise UnauthorizedError("Token is not a refresh token")
    return await token_service.reattach_tokens(response, payload["sub"], is_automated_client)

"""
bizdesk/services/token_service.py — JWT-токены и cookie-сессия.

Браузерные клиенты получают токены в HTTP-only cookie (``token``,
``refreshToken``), автоматизированные клиенты (Postman, скрипты) —
в заголовках ответа ``Authorization`` и ``X-Refresh-Token``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Response
from jose import jwt

from bizdesk.config import get_settings
from bizdesk.db.repositories import user_repo
from bizdesk.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "token"
REFRESH_COOKIE = "refreshToken"
LOGOUT_SENTINEL = "logout"


# ═══════════════════════════════════════════════════════════════════════════
# JWT-ТОКЕНЫ
# ═══════════════════════════════════════════════════════════════════════════


def create_access_token(user: dict, expires_delta: timedelta | None = None) -> str:
    """Создаёт подписанный JWT access-токен для документа пользователя."""
    settings = get_settings()
    exp = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    payload = {
        "sub": user["id"],
        "exp": exp,
        "type": "access",
        "role": user.get("role"),
        "company": user.get("company"),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(user_id: str) -> str:
    settings = get_settings()
    exp = datetime.now(timezone.utc) + timedelta(days=settings.jwt_refresh_token_expire_days)
    payload = {"sub": user_id, "exp": exp, "type": "refresh"}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Декодирует и проверяет JWT-токен."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except Exception as exc:
        raise UnauthorizedError(f"Invalid token: {exc}") from exc


# ═══════════════════════════════════════════════════════════════════════════
# СЕССИЯ
# ═══════════════════════════════════════════════════════════════════════════


async def reattach_tokens(response: Response, user_id: str, is_automated_client: bool) -> dict:
    """
    Выдаёт новую пару токенов для пользователя (после смены роли,
    компании или профиля — в токене должны быть актуальные данные).
    """
    settings = get_settings()
    user = await user_repo.get_user_by_id(user_id)
    if not user:
        raise UnauthorizedError("User not found")

    access = create_access_token(user)
    refresh = create_refresh_token(user["id"])

    if is_automated_client:
        response.headers["Authorization"] = f"Bearer {access}"
        response.headers["X-Refresh-Token"] = refresh
    else:
        response.set_cookie(
            ACCESS_COOKIE,
            access,
            max_age=settings.jwt_access_token_expire_minutes * 60,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="none",
        )
        response.set_cookie(
            REFRESH_COOKIE,
            refresh,
            max_age=settings.jwt_refresh_token_expire_days * 24 * 3600,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="none",
        )
    logger.debug("Tokens reattached for user %s", user_id)
    return {"access_token": access, "refresh_token": refresh}


def clear_session(response: Response) -> None:
    """Перезаписывает cookie сессии заведомо истекающим значением."""
    settings = get_settings()
    response.set_cookie(
        ACCESS_COOKIE,
        LOGOUT_SENTINEL,
        expires=datetime.now(timezone.utc) + timedelta(seconds=1),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none",
    )
    response.delete_cookie(REFRESH_COOKIE)

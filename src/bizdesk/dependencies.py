"""
═══════════════════════════════════════════════════════════════════════════════
Bizdesk — Зависимости FastAPI (Dependency Injection)
═══════════════════════════════════════════════════════════════════════════════

``get_current_user()`` — аутентификация запроса (Bearer-заголовок или
cookie ``token``); ``get_json_body()`` — «сырое» тело запроса для
guard-зависимостей, которым нужны поля вне Pydantic-схемы.
"""

from __future__ import annotations

import json

from fastapi import Cookie, Header, Request

from bizdesk.db.repositories import user_repo
from bizdesk.exceptions import BadRequestError, UnauthorizedError
from bizdesk.models.enums import Role
from bizdesk.models.user import CurrentUser
from bizdesk.services.token_service import LOGOUT_SENTINEL, decode_token


def _extract_token(authorization: str | None, cookie_token: str | None) -> str | None:
    if authorization:
        if not authorization.startswith("Bearer "):
            raise UnauthorizedError("Authorization header must start with 'Bearer'")
        return authorization[7:]
    if cookie_token and cookie_token != LOGOUT_SENTINEL:
        return cookie_token
    return None


async def get_current_user(
    authorization: str | None = Header(None),
    token: str | None = Cookie(None),
) -> CurrentUser:
    """
    Извлекает и валидирует JWT, прикрепляет к запросу текущую идентичность.

    Алгоритм:
        1. Берёт токен из ``Authorization: Bearer`` или cookie ``token``.
        2. Декодирует JWT (подпись + срок действия + тип ``access``).
        3. Загружает пользователя по claim ``sub`` — роль и компания
           всегда актуальные, а не из токена.

    Raises:
        UnauthorizedError: токен отсутствует, невалиден, пользователь не найден.
    """
    raw = _extract_token(authorization, token)
    if not raw:
        raise UnauthorizedError("Authentication invalid")

    payload = decode_token(raw)
    if payload.get("type") != "access" or not payload.get("sub"):
        raise UnauthorizedError("Authentication invalid")

    user = await user_repo.get_user_by_id(payload["sub"])
    if not user:
        raise UnauthorizedError("User not found")

    return CurrentUser(
        user_id=user["id"],
        first_name=user.get("firstName", ""),
        last_name=user.get("lastName", ""),
        email=user["email"],
        role=user.get("role", Role.UNCATEGORIZED),
        company=user.get("company"),
        image=user.get("image"),
    )


def _is_json_body(content_type: str | None) -> bool:
    """Тело без Content-Type считается JSON, как и при разборе в FastAPI."""
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


async def get_json_body(request: Request) -> dict:
    """JSON-тело запроса как dict (пустое тело или форма → ``{}``)."""
    if not _is_json_body(request.headers.get("content-type")):
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise BadRequestError("Request body must be valid JSON") from exc
    if not isinstance(data, dict):
        raise BadRequestError("Request body must be a JSON object")
    return data

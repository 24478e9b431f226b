"""
bizdesk/api/auth.py — Эндпоинты аутентификации.

Браузерные клиенты получают токены в httpOnly-cookie, автоматизированные
(``postmanRequest: true``) — в заголовках ``Authorization`` и
``X-Refresh-Token``.
"""

from fastapi import APIRouter, Cookie, Header, Query, Response, status

from bizdesk.exceptions import UnauthorizedError
from bizdesk.models.user import UserCreate, UserLogin, UserRead
from bizdesk.services import auth_service, token_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация пользователя",
)
async def register(body: UserCreate):
    """Новый пользователь создаётся с ролью uncategorized и без компании."""
    return await auth_service.register_user(body)


@router.post(
    "/login",
    response_model=UserRead,
    summary="Вход по email + пароль",
)
async def login(body: UserLogin, response: Response):
    return await auth_service.authenticate(
        body.email, body.password, response, is_automated_client=body.postman_request
    )


@router.post("/logout", summary="Выход: сброс cookie сессии")
async def logout(response: Response):
    token_service.clear_session(response)
    return {"message": "User logged out!"}


@router.post("/token/refresh", summary="Обновить пару токенов")
async def refresh(
    response: Response,
    refresh_cookie: str | None = Cookie(None, alias=token_service.REFRESH_COOKIE),
    refresh_header: str | None = Header(None, alias="X-Refresh-Token"),
    postman_request: bool = Query(False, alias="postmanRequest"),
):
    """Refresh-токен берётся из cookie или заголовка ``X-Refresh-Token``."""
    token = refresh_header or refresh_cookie
    if not token:
        raise UnauthorizedError("Refresh token is missing")
    tokens = await auth_service.refresh_tokens(token, response, postman_request)
    if postman_request:
        return tokens
    return {"message": "Tokens refreshed"}

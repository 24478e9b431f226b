"""
bizdesk/services/user_service.py — Сервис пользователей.

Операции профиля (удаление, обновление, смена пароля), выборки с
пагинацией и управление членством в компании. Смена роли разделена
на внутренний примитив ``set_role`` и публичное действие
``change_user_role`` с проверками.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import Response, UploadFile

from bizdesk.adapters import image_storage
from bizdesk.config import get_settings
from bizdesk.db.repositories import document_repo, user_repo
from bizdesk.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from bizdesk.models.enums import Collection, Role
from bizdesk.models.user import USER_HIDDEN_FIELDS, CurrentUser, UserRead, UserUpdate
from bizdesk.services import token_service
from bizdesk.services.auth_service import user_to_read

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("firstName", "lastName")


async def _load(user_id: str) -> dict:
    user = await user_repo.get_user_by_id(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def _persist_profile(user_id: str, changes: dict) -> None:
    # уникальный индекс по email ловит гонку, которую не видит предпроверка
    try:
        await document_repo.update_document(Collection.USERS, user_id, changes)
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError("Email is already in use", details={"field": "email"}) from exc


# ═══════════════════════════════════════════════════════════════════════════
# ПРОФИЛЬ
# ═══════════════════════════════════════════════════════════════════════════


def get_current_user(actor: CurrentUser) -> CurrentUser:
    return actor


async def delete_user(user_id: str, actor: CurrentUser, response: Response) -> str:
    """Удаляет аккаунт; владелец сначала удаляет компанию."""
    if actor.role == Role.OWNER:
        raise ForbiddenError("Please delete your company to proceed to this action!")

    user = await document_repo.delete_document(Collection.USERS, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    if user.get("company"):
        await document_repo.pull_reference(
            Collection.COMPANIES, user["company"], "employees", user["id"]
        )
    if user.get("image") and user["image"] != get_settings().default_profile_image:
        await image_storage.delete_images([user["image"]])

    token_service.clear_session(response)
    logger.info("User deleted: %s", user_id)
    return f"The user {user.get('firstName')} {user.get('lastName')}, has been deleted."


async def update_user(
    user_id: str,
    actor: CurrentUser,
    data: UserUpdate,
    response: Response,
    image: UploadFile | None = None,
    is_automated_client: bool = False,
) -> UserRead:
    """Обновляет профиль, при необходимости заменяет фото, переиздаёт токены."""
    changes = data.to_document(partial=True)

    if data.email:
        changes["email"] = data.email.lower()
        other = await user_repo.get_user_by_email(data.email)
        if other and other["id"] != user_id:
            raise BadRequestError("Email is already in use")

    previous_image = None
    if image is not None:
        changes["image"] = await image_storage.handle_single_image(image)
        previous_image = actor.image

    if changes:
        await _persist_profile(user_id, changes)

    # старое фото удаляется только после сохранения новой ссылки
    if previous_image and previous_image != changes.get("image"):
        await image_storage.delete_images([previous_image])

    await token_service.reattach_tokens(response, actor.user_id, is_automated_client)

    user = await document_repo.get_document(Collection.USERS, user_id, exclude=USER_HIDDEN_FIELDS)
    return user_to_read(user)


async def get_users(page: int, search_string: str | None = None) -> list[UserRead]:
    """Страница пользователей; поиск по имени ИЛИ фамилии без учёта регистра."""
    limit = get_settings().page_size
    search = search_string.strip() if search_string and search_string.strip() else None
    rows = await document_repo.find_documents(
        Collection.USERS,
        search=search,
        search_fields=SEARCH_FIELDS,
        skip=(page - 1) * limit,
        limit=limit,
        exclude=USER_HIDDEN_FIELDS,
    )
    return [user_to_read(r) for r in rows]


async def get_single_user(user_id: str) -> UserRead:
    user = await document_repo.get_document(Collection.USERS, user_id, exclude=USER_HIDDEN_FIELDS)
    if not user:
        raise NotFoundError("User", user_id)
    return user_to_read(user)


async def change_password(user_id: str, old_password: str, new_password: str) -> str:
    user = await _load(user_id)
    if not user_repo.verify_password(old_password, user.get("password")):
        raise BadRequestError("Passwords do not match!")

    await user_repo.set_password(user_id, new_password)
    logger.info("Password changed for user %s", user_id)
    return "Password has been changed!"


# ═══════════════════════════════════════════════════════════════════════════
# РОЛИ
# ═══════════════════════════════════════════════════════════════════════════


async def set_role(user_id: str, role: Role) -> dict:
    """Внутренний примитив: выставить роль без проверок и без токенов."""
    user = await document_repo.update_document(
        Collection.USERS, user_id, {"role": Role(role).value}
    )
    if not user:
        raise NotFoundError("User", user_id)
    logger.info("Role of user %s set to %s", user_id, Role(role).value)
    return user


async def change_user_role(
    user_id: str,
    role: Role | None,
    actor: CurrentUser,
    response: Response,
    is_automated_client: bool = False,
) -> str:
    """Публичная смена роли сотрудника внутри своей компании."""
    user = await _load(user_id)
    if not user.get("company") or user["company"] != actor.company:
        raise UnauthorizedError("You can not change this user's role")
    if role is None:
        raise BadRequestError("Provide a role!")
    if user.get("role") == Role.OWNER.value:
        raise ForbiddenError("You can not change the owner's role")

    await set_role(user_id, role)
    await token_service.reattach_tokens(response, actor.user_id, is_automated_client)
    return f"Role changed to {Role(role).value}"


# ═══════════════════════════════════════════════════════════════════════════
# ЧЛЕНСТВО В КОМПАНИИ
# ═══════════════════════════════════════════════════════════════════════════


async def add_to_company(user_id: str, company_id: str, role: Role | None = None) -> UserRead:
    user = await _load(user_id)
    if user.get("company"):
        raise BadRequestError("User working elsewhere!")

    await document_repo.update_document(
        Collection.USERS,
        user_id,
        {"role": Role(role or Role.EMPLOY).value, "company": company_id},
    )
    await document_repo.push_reference(Collection.COMPANIES, company_id, "employees", user_id)
    logger.info("User %s added to company %s", user_id, company_id)
    return await get_single_user(user_id)


async def remove_from_company(user_id: str, actor: CurrentUser) -> str:
    user = await _load(user_id)
    if not user.get("company"):
        raise BadRequestError("User does not work anywhere!")
    if user["company"] != actor.company:
        raise ForbiddenError("You do not belong to the same company")
    if user.get("role") == Role.OWNER.value:
        raise ForbiddenError("Please delete your company to proceed to this action!")

    await set_role(user_id, Role.UNCATEGORIZED)
    await document_repo.update_document(Collection.USERS, user_id, {"company": None})
    await document_repo.pull_reference(Collection.COMPANIES, user["company"], "employees", user_id)
    logger.info("User %s removed from company %s", user_id, user["company"])
    return "User has been removed from the company!"

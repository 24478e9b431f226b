"""
bizdesk/api/users.py — Эндпоинты пользователей.

Порядок guard'ов важен: первый упавший прерывает цепочку.
"""

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import (
    check_page_query,
    check_role_if_is_owner,
    is_user_exists,
    verify_account_ownership,
)
from bizdesk.models.user import (
    CompanyMembership,
    CurrentUser,
    PasswordChange,
    RoleChange,
    UserRead,
    UserUpdate,
)
from bizdesk.services import user_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/get-current-user",
    response_model=CurrentUser,
    summary="Текущий пользователь",
)
async def get_current(user: CurrentUser = Depends(get_current_user)):
    return user_service.get_current_user(user)


@router.get(
    "/get-users",
    response_model=list[UserRead],
    summary="Список пользователей с поиском по имени",
)
async def get_users(
    page: int = Depends(check_page_query),
    user: CurrentUser = Depends(get_current_user),
    search_string: str | None = Query(None, alias="searchString"),
):
    return await user_service.get_users(page, search_string)


@router.get(
    "/{user_id}/get-single-user",
    response_model=UserRead,
    dependencies=[Depends(get_current_user), Depends(is_user_exists)],
    summary="Пользователь по ID",
)
async def get_single_user(user_id: str):
    return await user_service.get_single_user(user_id)


@router.delete(
    "/{user_id}/delete-user",
    dependencies=[Depends(verify_account_ownership), Depends(is_user_exists)],
    summary="Удалить свой аккаунт",
)
async def delete_user(
    user_id: str,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
):
    message = await user_service.delete_user(user_id, user, response)
    return {"message": message}


@router.patch(
    "/{user_id}/update-user",
    response_model=UserRead,
    dependencies=[Depends(verify_account_ownership), Depends(is_user_exists)],
    summary="Обновить свой профиль (multipart: поля + image)",
)
async def update_user(
    user_id: str,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    first_name: str | None = Form(None, alias="firstName"),
    last_name: str | None = Form(None, alias="lastName"),
    email: str | None = Form(None),
    postman_request: bool = Form(False, alias="postmanRequest"),
    image: UploadFile | None = File(None),
):
    fields = {"first_name": first_name, "last_name": last_name, "email": email}
    data = UserUpdate(**{k: v for k, v in fields.items() if v is not None})
    return await user_service.update_user(
        user_id, user, data, response, image=image, is_automated_client=postman_request
    )


@router.patch(
    "/{user_id}/change-password",
    dependencies=[Depends(verify_account_ownership), Depends(is_user_exists)],
    summary="Сменить пароль",
)
async def change_password(user_id: str, body: PasswordChange):
    message = await user_service.change_password(user_id, body.old_password, body.new_password)
    return {"message": message}


@router.patch(
    "/{user_id}/change-role",
    dependencies=[
        Depends(require_permission("user.change_role")),
        Depends(is_user_exists),
        Depends(check_role_if_is_owner),
    ],
    summary="Сменить роль сотрудника",
)
async def change_role(
    user_id: str,
    body: RoleChange,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
):
    message = await user_service.change_user_role(
        user_id, body.role, user, response, is_automated_client=body.postman_request
    )
    return {"message": message}


@router.patch(
    "/{user_id}/add-to-company",
    response_model=UserRead,
    dependencies=[
        Depends(require_permission("company.add_member")),
        Depends(is_user_exists),
        Depends(check_role_if_is_owner),
    ],
    summary="Добавить пользователя в свою компанию",
)
async def add_to_company(
    user_id: str,
    body: CompanyMembership,
    user: CurrentUser = Depends(get_current_user),
):
    return await user_service.add_to_company(user_id, user.company, body.role)


@router.patch(
    "/{user_id}/remove-from-company",
    dependencies=[
        Depends(require_permission("company.remove_member")),
        Depends(is_user_exists),
    ],
    summary="Исключить пользователя из своей компании",
)
async def remove_from_company(user_id: str, user: CurrentUser = Depends(get_current_user)):
    message = await user_service.remove_from_company(user_id, user)
    return {"message": message}

"""
bizdesk/api/accountants.py — Эндпоинты бухгалтера компании.
"""

from fastapi import APIRouter, Depends, status

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import has_existing_accountant_relations, verify_accountant_ownership
from bizdesk.models.accountant import AccountantCreate, AccountantUpdate
from bizdesk.models.user import CurrentUser
from bizdesk.services import accountant_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/accountants", tags=["accountants"])


@router.get(
    "/get-accountant",
    dependencies=[Depends(require_permission("accountant.read"))],
    summary="Бухгалтер компании",
)
async def get_accountant(user: CurrentUser = Depends(get_current_user)):
    return await accountant_service.get_accountant(user)


@router.post(
    "/create-accountant",
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("accountant.create")),
        Depends(has_existing_accountant_relations),
    ],
    summary="Назначить бухгалтера",
)
async def create_accountant(body: AccountantCreate, user: CurrentUser = Depends(get_current_user)):
    """У компании может быть только один бухгалтер."""
    return await accountant_service.create_accountant(body, user)


@router.patch(
    "/{accountant_id}/update-accountant",
    dependencies=[
        Depends(require_permission("accountant.update")),
        Depends(has_existing_accountant_relations),
    ],
    summary="Изменить данные бухгалтера",
)
async def update_accountant(
    body: AccountantUpdate, accountant: dict = Depends(verify_accountant_ownership)
):
    return await accountant_service.update_accountant(accountant["id"], body)


@router.delete(
    "/{accountant_id}/delete-accountant",
    dependencies=[Depends(require_permission("accountant.delete"))],
    summary="Удалить бухгалтера",
)
async def delete_accountant(accountant: dict = Depends(verify_accountant_ownership)):
    message = await accountant_service.delete_accountant(accountant)
    return {"message": message}

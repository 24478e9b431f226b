"""
bizdesk/api/clients.py — Эндпоинты клиентов компании.
"""

from fastapi import APIRouter, Depends, Query, status

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import (
    check_page_query,
    has_existing_client_relations,
    verify_client_ownership,
)
from bizdesk.models.client import ClientCreate, ClientUpdate
from bizdesk.models.user import CurrentUser
from bizdesk.services import client_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/get-clients", summary="Клиенты компании с поиском по имени")
async def get_clients(
    page: int = Depends(check_page_query),
    _: None = Depends(require_permission("client.read")),
    user: CurrentUser = Depends(get_current_user),
    search_string: str | None = Query(None, alias="searchString"),
):
    return await client_service.get_clients(user, page, search_string)


@router.get(
    "/{client_id}/get-single-client",
    dependencies=[Depends(require_permission("client.read"))],
    summary="Клиент по ID",
)
async def get_single_client(client: dict = Depends(verify_client_ownership)):
    return await client_service.get_single_client(client["id"])


@router.post(
    "/create-client",
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("client.create")),
        Depends(has_existing_client_relations),
    ],
    summary="Добавить клиента",
)
async def create_client(body: ClientCreate, user: CurrentUser = Depends(get_current_user)):
    return await client_service.create_client(body, user)


@router.patch(
    "/{client_id}/update-client",
    dependencies=[
        Depends(require_permission("client.update")),
        Depends(has_existing_client_relations),
    ],
    summary="Изменить клиента",
)
async def update_client(body: ClientUpdate, client: dict = Depends(verify_client_ownership)):
    return await client_service.update_client(client["id"], body)


@router.delete(
    "/{client_id}/delete-client",
    dependencies=[Depends(require_permission("client.delete"))],
    summary="Удалить клиента",
)
async def delete_client(client: dict = Depends(verify_client_ownership)):
    message = await client_service.delete_client(client)
    return {"message": message}

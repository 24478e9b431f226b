"""
bizdesk/api/purchases.py — Эндпоинты покупок.

Покупка создаётся для клиента: товар передаётся либо в пути
(``/{client_id}/{product_id}/create-purchase``), либо списком
``products`` в теле, но не обоими способами сразу.
"""

from fastapi import APIRouter, Depends, Query, status

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import (
    check_page_query,
    has_existing_purchase_relations,
    is_product_exists,
    verify_client_ownership,
    verify_purchase_ownership,
)
from bizdesk.models.enums import PurchaseStatus
from bizdesk.models.purchase import PurchaseCreate, PurchaseUpdate
from bizdesk.models.user import CurrentUser
from bizdesk.services import purchase_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/purchases", tags=["purchases"])

_CREATE_GUARDS = [
    Depends(require_permission("purchase.create")),
    Depends(has_existing_purchase_relations),
    Depends(verify_client_ownership),
    Depends(is_product_exists),
]


@router.get("/get-purchases", summary="Покупки компании, фильтр по статусу")
async def get_purchases(
    page: int = Depends(check_page_query),
    _: None = Depends(require_permission("purchase.read")),
    user: CurrentUser = Depends(get_current_user),
    purchase_status: PurchaseStatus | None = Query(None, alias="status"),
):
    return await purchase_service.get_purchases(user, page, purchase_status)


@router.get(
    "/{purchase_id}/get-single-purchase",
    dependencies=[Depends(require_permission("purchase.read"))],
    summary="Покупка по ID",
)
async def get_single_purchase(purchase: dict = Depends(verify_purchase_ownership)):
    return await purchase_service.get_single_purchase(purchase["id"])


@router.post(
    "/{client_id}/create-purchase",
    status_code=status.HTTP_201_CREATED,
    dependencies=_CREATE_GUARDS,
    summary="Создать покупку (товары списком в теле)",
)
async def create_purchase(
    body: PurchaseCreate,
    client: dict = Depends(verify_client_ownership),
    user: CurrentUser = Depends(get_current_user),
):
    return await purchase_service.create_purchase(client, body, user)


@router.post(
    "/{client_id}/{product_id}/create-purchase",
    status_code=status.HTTP_201_CREATED,
    dependencies=_CREATE_GUARDS,
    summary="Создать покупку одного товара",
)
async def create_single_product_purchase(
    product_id: str,
    body: PurchaseCreate,
    client: dict = Depends(verify_client_ownership),
    user: CurrentUser = Depends(get_current_user),
):
    return await purchase_service.create_purchase(client, body, user, product_id=product_id)


@router.patch(
    "/{purchase_id}/update-purchase",
    dependencies=[
        Depends(require_permission("purchase.update")),
        Depends(has_existing_purchase_relations),
        Depends(verify_purchase_ownership),
        Depends(is_product_exists),
    ],
    summary="Изменить покупку",
)
async def update_purchase(body: PurchaseUpdate, purchase: dict = Depends(verify_purchase_ownership)):
    return await purchase_service.update_purchase(purchase, body)


@router.delete(
    "/{purchase_id}/delete-purchase",
    dependencies=[Depends(require_permission("purchase.delete"))],
    summary="Удалить покупку",
)
async def delete_purchase(purchase: dict = Depends(verify_purchase_ownership)):
    message = await purchase_service.delete_purchase(purchase)
    return {"message": message}

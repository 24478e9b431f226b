"""
bizdesk/api/products.py — Эндпоинты каталога товаров.
"""

from fastapi import APIRouter, Depends, Query, status

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import (
    check_page_query,
    has_existing_product_relations,
    verify_product_ownership,
)
from bizdesk.models.product import ProductCreate, ProductUpdate
from bizdesk.models.user import CurrentUser
from bizdesk.services import product_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/get-products", summary="Товары компании с поиском по названию")
async def get_products(
    page: int = Depends(check_page_query),
    _: None = Depends(require_permission("product.read")),
    user: CurrentUser = Depends(get_current_user),
    search_string: str | None = Query(None, alias="searchString"),
):
    return await product_service.get_products(user, page, search_string)


@router.get(
    "/{product_id}/get-single-product",
    dependencies=[Depends(require_permission("product.read"))],
    summary="Товар по ID",
)
async def get_single_product(product: dict = Depends(verify_product_ownership)):
    return await product_service.get_single_product(product["id"])


@router.post(
    "/create-product",
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("product.create")),
        Depends(has_existing_product_relations),
    ],
    summary="Добавить товар",
)
async def create_product(body: ProductCreate, user: CurrentUser = Depends(get_current_user)):
    return await product_service.create_product(body, user)


@router.patch(
    "/{product_id}/update-product",
    dependencies=[
        Depends(require_permission("product.update")),
        Depends(has_existing_product_relations),
    ],
    summary="Изменить товар",
)
async def update_product(body: ProductUpdate, product: dict = Depends(verify_product_ownership)):
    return await product_service.update_product(product["id"], body)


@router.delete(
    "/{product_id}/delete-product",
    dependencies=[Depends(require_permission("product.delete"))],
    summary="Удалить товар",
)
async def delete_product(product: dict = Depends(verify_product_ownership)):
    message = await product_service.delete_product(product)
    return {"message": message}

"""
bizdesk/middlewares.py — Guard-зависимости маршрутов.

Каждый guard — FastAPI-зависимость: либо пропускает запрос дальше
(иногда возвращая загруженный документ), либо бросает типизированную
ошибку. Маршрут перечисляет guard'ы в ``dependencies=[...]`` в нужном
порядке; FastAPI разрешает их последовательно, первая ошибка прерывает
цепочку.

Логика каждого guard'а вынесена в обычную функцию (``parse_page``,
``check_coordinates``, ``check_product_references``), которую можно
вызвать без HTTP-запроса.
"""

from __future__ import annotations

import asyncio
import logging
import math

from fastapi import Depends, Query, Request

from bizdesk.db.repositories import document_repo
from bizdesk.dependencies import get_current_user, get_json_body
from bizdesk.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from bizdesk.models.enums import Collection, Role
from bizdesk.models.user import CurrentUser

logger = logging.getLogger(__name__)

MAX_SAFE_INTEGER = 2**53 - 1


# ═══════════════════════════════════════════════════════════════════════════════
# Пагинация
# ═══════════════════════════════════════════════════════════════════════════════

def parse_page(page: str | None) -> int:
    """``page`` из query → номер страницы (по умолчанию 1)."""
    if page is None or not str(page).strip():
        return 1
    try:
        number = float(page)
    except ValueError:
        raise BadRequestError("Page number must be a valid number") from None
    if math.isnan(number):
        raise BadRequestError("Page number must be a valid number")
    if not number.is_integer() or not 1 <= number <= MAX_SAFE_INTEGER:
        raise BadRequestError("Page number must be a positive safe integer")
    return int(number)


async def check_page_query(page: str | None = Query(None)) -> int:
    return parse_page(page)


# ═══════════════════════════════════════════════════════════════════════════════
# Поля тела запроса
# ═══════════════════════════════════════════════════════════════════════════════

def check_coordinates(latitude, longitude) -> None:
    """Широта и долгота задаются только парой."""
    if latitude is not None and longitude is None:
        raise BadRequestError("Add longitude!")
    if latitude is None and longitude is not None:
        raise BadRequestError("Add latitude!")


async def validate_coordinates(body: dict = Depends(get_json_body)) -> None:
    check_coordinates(body.get("latitude"), body.get("longitude"))


async def check_role_if_is_owner(body: dict = Depends(get_json_body)) -> None:
    """Роль OWNER нельзя выдать — её получает только создатель компании."""
    if body.get("role") == Role.OWNER.value:
        raise ForbiddenError("You can not make an employ owner!")


def reject_server_owned_fields(*fields: str):
    """Фабрика guard'а: поля-связи назначает только сервер."""

    async def _check(body: dict = Depends(get_json_body)) -> None:
        for field in fields:
            if field in body:
                raise ConflictError(
                    f"You can not set '{field}' directly!", details={"field": field}
                )
    return _check


has_existing_company_relations = reject_server_owned_fields(
    "owner", "employees", "products", "clients", "purchases", "accountant",
)
has_existing_client_relations = reject_server_owned_fields("purchases", "createdBy", "company")
has_existing_product_relations = reject_server_owned_fields("purchases", "createdBy", "company")
has_existing_purchase_relations = reject_server_owned_fields("client", "createdBy", "company")
has_existing_accountant_relations = reject_server_owned_fields("createdBy", "company")


# ═══════════════════════════════════════════════════════════════════════════════
# Товары в покупке
# ═══════════════════════════════════════════════════════════════════════════════

async def _find_product(product_id, company: str | None) -> dict | None:
    product = await document_repo.get_document(
        Collection.PRODUCTS, product_id, fields=("company",)
    )
    if product is None or (company is not None and product.get("company") != company):
        return None
    return product


async def check_product_references(
    product_id: str | None,
    products: list | None,
    company: str | None = None,
) -> None:
    """
    Либо один товар из пути, либо список из тела — не оба сразу.

    Список проверяется параллельно; после завершения всех запросов
    сообщается первый ненайденный ID в порядке ввода. Товары чужой
    компании считаются ненайденными.
    """
    if product_id and products:
        raise BadRequestError("Something went wrong, please try again")

    if product_id:
        if await _find_product(product_id, company) is None:
            raise NotFoundError("Product", str(product_id), "No product found!")

    if products:
        if not isinstance(products, list):
            raise BadRequestError("Products must be a list of IDs")
        found = await asyncio.gather(*(_find_product(pid, company) for pid in products))
        for pid, product in zip(products, found):
            if product is None:
                raise NotFoundError("Product", str(pid), f"No product found with ID: {pid}!")


async def is_product_exists(
    request: Request,
    body: dict = Depends(get_json_body),
    user: CurrentUser = Depends(get_current_user),
) -> None:
    await check_product_references(
        request.path_params.get("product_id"), body.get("products"), user.company
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Существование сущностей
# ═══════════════════════════════════════════════════════════════════════════════

def entity_exists(collection: Collection, param: str, entity: str):
    """Фабрика guard'а: документ из пути ``{param}`` должен существовать."""

    async def _check(request: Request) -> dict:
        doc_id = request.path_params.get(param)
        doc = await document_repo.get_document(collection, doc_id)
        if doc is None:
            raise NotFoundError(entity, str(doc_id))
        return doc
    return _check


is_user_exists = entity_exists(Collection.USERS, "user_id", "User")
is_company_exists = entity_exists(Collection.COMPANIES, "company_id", "Company")
is_client_exists = entity_exists(Collection.CLIENTS, "client_id", "Client")
is_product_exists_by_id = entity_exists(Collection.PRODUCTS, "product_id", "Product")
is_purchase_exists = entity_exists(Collection.PURCHASES, "purchase_id", "Purchase")
is_accountant_exists = entity_exists(Collection.ACCOUNTANTS, "accountant_id", "Accountant")


# ═══════════════════════════════════════════════════════════════════════════════
# Принадлежность
# ═══════════════════════════════════════════════════════════════════════════════

async def verify_account_ownership(
    request: Request, user: CurrentUser = Depends(get_current_user)
) -> None:
    """Действия над аккаунтом — только над своим."""
    if request.path_params.get("user_id") != user.user_id:
        raise ForbiddenError("You can only manage your own account")


def company_resource(exists_guard, entity: str):
    """Фабрика guard'а: документ существует и принадлежит компании актора."""

    async def _check(
        doc: dict = Depends(exists_guard),
        user: CurrentUser = Depends(get_current_user),
    ) -> dict:
        if not user.company or doc.get("company") != user.company:
            logger.warning(
                "Tenant check: user %s denied access to %s %s",
                user.user_id, entity, doc["id"],
            )
            raise ForbiddenError(f"This {entity.lower()} does not belong to your company")
        return doc
    return _check


verify_client_ownership = company_resource(is_client_exists, "Client")
verify_product_ownership = company_resource(is_product_exists_by_id, "Product")
verify_purchase_ownership = company_resource(is_purchase_exists, "Purchase")
verify_accountant_ownership = company_resource(is_accountant_exists, "Accountant")


async def verify_company_ownership(
    company: dict = Depends(is_company_exists),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    if company["id"] != user.company:
        raise ForbiddenError("You do not belong to this company")
    return company


async def has_no_company(user: CurrentUser = Depends(get_current_user)) -> None:
    """Пользователь может состоять (и владеть) только в одной компании."""
    if user.company:
        raise ConflictError("You already belong to a company")
    owned = await document_repo.find_one(Collection.COMPANIES, {"owner": user.user_id})
    if owned:
        raise ConflictError("You already own a company")

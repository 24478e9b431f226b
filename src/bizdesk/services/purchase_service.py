"""
bizdesk/services/purchase_service.py — Сервис покупок.

Покупка ссылается на клиента и товары; обратные ссылки (``purchases``
у клиента, товаров и компании) поддерживаются этим сервисом.
``client``, ``createdBy`` и ``company`` назначает сервер.
"""

from __future__ import annotations

import asyncio
import logging

from bizdesk.config import get_settings
from bizdesk.db.population import fetch_with_relations, populate_documents
from bizdesk.db.populate_options import POPULATE_PURCHASE
from bizdesk.db.repositories import document_repo
from bizdesk.exceptions import BadRequestError, NotFoundError
from bizdesk.models.enums import Collection, PurchaseStatus
from bizdesk.models.purchase import PurchaseCreate, PurchaseUpdate
from bizdesk.models.user import CurrentUser

logger = logging.getLogger(__name__)


async def _link_products(purchase_id: str, product_ids: list[str]) -> None:
    await asyncio.gather(
        *(document_repo.push_reference(Collection.PRODUCTS, pid, "purchases", purchase_id)
          for pid in product_ids)
    )


async def _unlink_products(purchase_id: str, product_ids: list[str]) -> None:
    await asyncio.gather(
        *(document_repo.pull_reference(Collection.PRODUCTS, pid, "purchases", purchase_id)
          for pid in product_ids)
    )


async def get_single_purchase(purchase_id: str) -> dict:
    purchase = await fetch_with_relations(Collection.PURCHASES, purchase_id, POPULATE_PURCHASE)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)
    return purchase


async def get_purchases(
    actor: CurrentUser, page: int, status: PurchaseStatus | None = None
) -> list[dict]:
    limit = get_settings().page_size
    filters: dict = {"company": actor.company}
    if status is not None:
        filters["status"] = PurchaseStatus(status).value
    purchases = await document_repo.find_documents(
        Collection.PURCHASES, filters=filters, skip=(page - 1) * limit, limit=limit
    )
    return await populate_documents(purchases, POPULATE_PURCHASE)


async def create_purchase(
    client: dict,
    data: PurchaseCreate,
    actor: CurrentUser,
    product_id: str | None = None,
) -> dict:
    """Создаёт покупку клиента: товар из пути или список из тела."""
    products = [product_id] if product_id else list(dict.fromkeys(data.products))
    if not products:
        raise BadRequestError("At least one product is required.")

    doc = data.to_document()
    doc.update(
        products=products,
        client=client["id"],
        createdBy=actor.user_id,
        company=actor.company,
    )
    purchase = await document_repo.insert_document(Collection.PURCHASES, doc)

    await asyncio.gather(
        document_repo.push_reference(Collection.CLIENTS, client["id"], "purchases", purchase["id"]),
        document_repo.push_reference(Collection.COMPANIES, actor.company, "purchases", purchase["id"]),
        _link_products(purchase["id"], products),
    )
    logger.info("Purchase %s created for client %s", purchase["id"], client["id"])
    return await get_single_purchase(purchase["id"])


async def update_purchase(purchase: dict, data: PurchaseUpdate) -> dict:
    changes = data.to_document(partial=True)

    if "products" in changes:
        new_products = list(dict.fromkeys(changes["products"] or []))
        if not new_products:
            raise BadRequestError("At least one product is required.")
        old_products = purchase.get("products") or []
        changes["products"] = new_products
        await _unlink_products(purchase["id"], [p for p in old_products if p not in new_products])
        await _link_products(purchase["id"], [p for p in new_products if p not in old_products])

    if changes:
        await document_repo.update_document(Collection.PURCHASES, purchase["id"], changes)
    return await get_single_purchase(purchase["id"])


async def delete_purchase(purchase: dict) -> str:
    purchase_id = purchase["id"]
    await document_repo.delete_document(Collection.PURCHASES, purchase_id)
    await asyncio.gather(
        document_repo.pull_reference(Collection.CLIENTS, purchase["client"], "purchases", purchase_id),
        document_repo.pull_reference(Collection.COMPANIES, purchase["company"], "purchases", purchase_id),
        _unlink_products(purchase_id, purchase.get("products") or []),
    )
    logger.info("Purchase %s deleted", purchase_id)
    return "The purchase has been deleted."

"""bizdesk/services/product_service.py — Сервис товаров компании."""

from __future__ import annotations

import logging

from bizdesk.config import get_settings
from bizdesk.db.population import fetch_with_relations, populate_documents
from bizdesk.db.populate_options import POPULATE_PRODUCT
from bizdesk.db.repositories import document_repo
from bizdesk.exceptions import NotFoundError
from bizdesk.models.enums import Collection
from bizdesk.models.product import ProductCreate, ProductUpdate
from bizdesk.models.user import CurrentUser

logger = logging.getLogger(__name__)


async def get_single_product(product_id: str) -> dict:
    product = await fetch_with_relations(Collection.PRODUCTS, product_id, POPULATE_PRODUCT)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


async def get_products(actor: CurrentUser, page: int, search_string: str | None = None) -> list[dict]:
    limit = get_settings().page_size
    products = await document_repo.find_documents(
        Collection.PRODUCTS,
        filters={"company": actor.company},
        search=search_string.strip() if search_string else None,
        search_fields=("name",),
        skip=(page - 1) * limit,
        limit=limit,
    )
    return await populate_documents(products, POPULATE_PRODUCT)


async def create_product(data: ProductCreate, actor: CurrentUser) -> dict:
    doc = data.to_document()
    doc.update(purchases=[], createdBy=actor.user_id, company=actor.company)
    product = await document_repo.insert_document(Collection.PRODUCTS, doc)
    await document_repo.push_reference(Collection.COMPANIES, actor.company, "products", product["id"])
    logger.info("Product %s created in company %s", product["id"], actor.company)
    return await get_single_product(product["id"])


async def update_product(product_id: str, data: ProductUpdate) -> dict:
    changes = data.to_document(partial=True)
    if changes:
        await document_repo.update_document(Collection.PRODUCTS, product_id, changes)
    return await get_single_product(product_id)


async def delete_product(product: dict) -> str:
    await document_repo.delete_document(Collection.PRODUCTS, product["id"])
    await document_repo.pull_reference(Collection.COMPANIES, product["company"], "products", product["id"])
    logger.info("Product %s deleted", product["id"])
    return f"The product {product.get('name')} has been deleted."

"""
bizdesk/services/company_service.py — Сервис управления компаниями.

Создатель компании становится её владельцем (роль OWNER). Удаление
компании каскадно удаляет её клиентов, товары, покупки и бухгалтера,
а всех сотрудников возвращает в статус UNCATEGORIZED.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Response, UploadFile

from bizdesk.adapters import image_storage
from bizdesk.config import get_settings
from bizdesk.db.population import fetch_with_relations
from bizdesk.db.populate_options import POPULATE_COMPANY
from bizdesk.db.repositories import document_repo
from bizdesk.exceptions import NotFoundError
from bizdesk.models.company import CompanyCreate, CompanyUpdate
from bizdesk.models.enums import Collection, Role
from bizdesk.models.user import CurrentUser
from bizdesk.services import token_service, user_service

logger = logging.getLogger(__name__)

_OWNED_COLLECTIONS = (
    Collection.CLIENTS,
    Collection.PRODUCTS,
    Collection.PURCHASES,
    Collection.ACCOUNTANTS,
)


async def _populated(company_id: str) -> dict:
    company = await fetch_with_relations(Collection.COMPANIES, company_id, POPULATE_COMPANY)
    if company is None:
        raise NotFoundError("Company", company_id)
    return company


async def get_company(actor: CurrentUser) -> dict:
    """Компания текущего пользователя со связями."""
    if not actor.company:
        raise NotFoundError("Company", "-", "You do not belong to any company")
    return await _populated(actor.company)


async def create_company(
    data: CompanyCreate, actor: CurrentUser, response: Response
) -> dict:
    """Создаёт компанию и делает текущего пользователя владельцем."""
    doc = data.to_document()
    doc.update(
        owner=actor.user_id,
        logo=get_settings().default_company_logo,
        employees=[],
        products=[],
        clients=[],
        purchases=[],
        accountant=None,
    )
    company = await document_repo.insert_document(Collection.COMPANIES, doc)

    await document_repo.update_document(
        Collection.USERS, actor.user_id, {"company": company["id"]}
    )
    await user_service.set_role(actor.user_id, Role.OWNER)
    await token_service.reattach_tokens(response, actor.user_id, data.postman_request)

    logger.info("Company %s created by %s", company["id"], actor.user_id)
    return await _populated(company["id"])


async def update_company(company_id: str, data: CompanyUpdate) -> dict:
    changes = data.to_document(partial=True)
    if changes:
        await document_repo.update_document(Collection.COMPANIES, company_id, changes)
        logger.info("Company %s updated: %s", company_id, ", ".join(sorted(changes)))
    return await _populated(company_id)


async def update_logo(company: dict, image: UploadFile) -> dict:
    """Заменяет логотип (старый удаляется, если он не по умолчанию)."""
    logo = await image_storage.handle_single_image(image)
    await document_repo.update_document(Collection.COMPANIES, company["id"], {"logo": logo})
    if company.get("logo"):
        await image_storage.delete_images([company["logo"]])
    return await _populated(company["id"])


async def delete_company(
    company: dict,
    actor: CurrentUser,
    response: Response,
    is_automated_client: bool = False,
) -> str:
    company_id = company["id"]
    scope = {"company": company_id}

    await asyncio.gather(
        *(document_repo.delete_documents(c, scope) for c in _OWNED_COLLECTIONS)
    )
    released = await document_repo.update_documents(
        Collection.USERS, scope, {"company": None, "role": Role.UNCATEGORIZED.value}
    )
    await document_repo.delete_document(Collection.COMPANIES, company_id)

    if company.get("logo"):
        await image_storage.delete_images([company["logo"]])

    await token_service.reattach_tokens(response, actor.user_id, is_automated_client)
    logger.info("Company %s deleted, %d members released", company_id, released)
    return f"The company {company.get('name')} has been deleted."

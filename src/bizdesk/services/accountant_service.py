"""
bizdesk/services/accountant_service.py — Сервис бухгалтера компании.

У компании не больше одного бухгалтера (``company.accountant``).
"""

from __future__ import annotations

import logging

from bizdesk.db.population import fetch_with_relations
from bizdesk.db.populate_options import POPULATE_ACCOUNTANT
from bizdesk.db.repositories import document_repo
from bizdesk.exceptions import ConflictError, NotFoundError
from bizdesk.models.accountant import AccountantCreate, AccountantUpdate
from bizdesk.models.enums import Collection
from bizdesk.models.user import CurrentUser

logger = logging.getLogger(__name__)


async def _populated(accountant_id: str) -> dict:
    accountant = await fetch_with_relations(Collection.ACCOUNTANTS, accountant_id, POPULATE_ACCOUNTANT)
    if accountant is None:
        raise NotFoundError("Accountant", accountant_id)
    return accountant


async def get_accountant(actor: CurrentUser) -> dict:
    company = await document_repo.get_document(
        Collection.COMPANIES, actor.company, fields=("accountant",)
    )
    if not company or not company.get("accountant"):
        raise NotFoundError("Accountant", "-", "Your company has no accountant")
    return await _populated(company["accountant"])


async def create_accountant(data: AccountantCreate, actor: CurrentUser) -> dict:
    company = await document_repo.get_document(
        Collection.COMPANIES, actor.company, fields=("accountant",)
    )
    if not company:
        raise NotFoundError("Company", str(actor.company))
    if company.get("accountant"):
        raise ConflictError("Your company already has an accountant")

    doc = data.to_document()
    doc.update(createdBy=actor.user_id, company=actor.company)
    accountant = await document_repo.insert_document(Collection.ACCOUNTANTS, doc)
    await document_repo.update_document(
        Collection.COMPANIES, actor.company, {"accountant": accountant["id"]}
    )
    logger.info("Accountant %s assigned to company %s", accountant["id"], actor.company)
    return await _populated(accountant["id"])


async def update_accountant(accountant_id: str, data: AccountantUpdate) -> dict:
    changes = data.to_document(partial=True)
    if changes:
        await document_repo.update_document(Collection.ACCOUNTANTS, accountant_id, changes)
    return await _populated(accountant_id)


async def delete_accountant(accountant: dict) -> str:
    await document_repo.delete_document(Collection.ACCOUNTANTS, accountant["id"])
    await document_repo.update_document(
        Collection.COMPANIES, accountant["company"], {"accountant": None}
    )
    logger.info("Accountant %s deleted", accountant["id"])
    return f"The accountant {accountant.get('firstName')} {accountant.get('lastName')}, has been deleted."

"""
bizdesk/services/client_service.py — Сервис клиентов компании.

Все выборки ограничены компанией текущего пользователя.
"""

from __future__ import annotations

import logging

from bizdesk.config import get_settings
from bizdesk.db.population import fetch_with_relations, populate_documents
from bizdesk.db.populate_options import POPULATE_CLIENT
from bizdesk.db.repositories import document_repo
from bizdesk.exceptions import NotFoundError
from bizdesk.models.client import ClientCreate, ClientUpdate
from bizdesk.models.enums import Collection
from bizdesk.models.user import CurrentUser

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("firstName", "lastName")


async def get_single_client(client_id: str) -> dict:
    client = await fetch_with_relations(Collection.CLIENTS, client_id, POPULATE_CLIENT)
    if client is None:
        raise NotFoundError("Client", client_id)
    return client


async def get_clients(actor: CurrentUser, page: int, search_string: str | None = None) -> list[dict]:
    limit = get_settings().page_size
    clients = await document_repo.find_documents(
        Collection.CLIENTS,
        filters={"company": actor.company},
        search=search_string.strip() if search_string else None,
        search_fields=SEARCH_FIELDS,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return await populate_documents(clients, POPULATE_CLIENT)


async def create_client(data: ClientCreate, actor: CurrentUser) -> dict:
    doc = data.to_document()
    doc.update(purchases=[], createdBy=actor.user_id, company=actor.company)
    client = await document_repo.insert_document(Collection.CLIENTS, doc)
    await document_repo.push_reference(Collection.COMPANIES, actor.company, "clients", client["id"])
    logger.info("Client %s created in company %s", client["id"], actor.company)
    return await get_single_client(client["id"])


async def update_client(client_id: str, data: ClientUpdate) -> dict:
    changes = data.to_document(partial=True)
    if changes:
        await document_repo.update_document(Collection.CLIENTS, client_id, changes)
    return await get_single_client(client_id)


async def delete_client(client: dict) -> str:
    await document_repo.delete_document(Collection.CLIENTS, client["id"])
    await document_repo.pull_reference(Collection.COMPANIES, client["company"], "clients", client["id"])
    logger.info("Client %s deleted", client["id"])
    return f"The client {client.get('firstName')} {client.get('lastName')}, has been deleted."

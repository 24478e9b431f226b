"""
bizdesk/db/population.py — Гидратация связей документов (population).

``PopulateOption`` описывает одну связь: какое поле, в какой коллекции
лежат связанные документы, какие их поля отдавать и сколько ссылок
разворачивать. Интерпретатор ``populate_documents`` на каждую связь
каждого уровня делает ровно один батч-запрос ``get_documents_by_ids``
(никакого N+1), связи одного уровня разрешаются параллельно.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from bizdesk.db.repositories import document_repo
from bizdesk.models.enums import Collection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PopulateOption:
    path: str
    collection: Collection
    select: tuple[str, ...]
    limit: int | None = None
    populate: tuple["PopulateOption", ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        """Поля выборки: allow-list + пути вложенных связей."""
        nested = tuple(p.path for p in self.populate if p.path not in self.select)
        return self.select + nested


def _references(doc: dict, option: PopulateOption) -> list[str]:
    value = doc.get(option.path)
    if isinstance(value, list):
        return value[: option.limit] if option.limit is not None else list(value)
    return [value] if value else []


async def _populate_one(docs: list[dict], option: PopulateOption) -> None:
    ids: list[str] = []
    for doc in docs:
        for ref in _references(doc, option):
            if ref not in ids:
                ids.append(ref)

    related = await document_repo.get_documents_by_ids(option.collection, ids, fields=option.fields)
    if option.populate and related:
        await populate_documents(related, option.populate)
    by_id = {r["id"]: r for r in related}

    for doc in docs:
        value = doc.get(option.path)
        if isinstance(value, list):
            doc[option.path] = [by_id[r] for r in _references(doc, option) if r in by_id]
        elif value:
            doc[option.path] = by_id.get(value)


async def populate_documents(docs: list[dict], options: tuple[PopulateOption, ...]) -> list[dict]:
    """Разворачивает ссылки в ``docs`` на месте и возвращает их же."""
    if docs and options:
        await asyncio.gather(*(_populate_one(docs, option) for option in options))
    return docs


async def fetch_with_relations(
    collection: Collection,
    doc_id: str,
    options: tuple[PopulateOption, ...],
) -> dict | None:
    """Один документ со всеми связями из ``options``."""
    doc = await document_repo.get_document(collection, doc_id)
    if doc is None:
        return None
    await populate_documents([doc], options)
    return doc

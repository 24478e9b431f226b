"""
═══════════════════════════════════════════════════════════════════════════════
Bizdesk — In-Memory хранилище (замена PostgreSQL для локальной разработки)
═══════════════════════════════════════════════════════════════════════════════

In-memory реализация ``document_repo`` с той же семантикой: проекции,
фильтры равенства, поиск подстроки без учёта регистра, skip/limit,
списки ссылок. ``activate_memory_store()`` подменяет функции репозитория
(monkey-patching); используется при недоступной БД и в тестах.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Sequence
from uuid import uuid4

from bizdesk.db.repositories.document_repo import now_iso, parse_id
from bizdesk.models.enums import Collection

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Хранилище: коллекция → id → документ
# ═══════════════════════════════════════════════════════════════════════════════
_collections: dict[str, dict[str, dict]] = {c.value: {} for c in Collection}


def reset() -> None:
    """Очистить все коллекции."""
    for docs in _collections.values():
        docs.clear()


def _docs(collection: Collection | str) -> dict[str, dict]:
    return _collections[Collection(collection).value]


def _key(doc_id) -> str | None:
    uid = parse_id(doc_id)
    return str(uid) if uid is not None else None


def _out(
    doc: dict,
    fields: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> dict:
    if fields is not None:
        keep = set(fields)
        result = {k: copy.deepcopy(v) for k, v in doc.items() if k in keep}
    else:
        skip = set(exclude or ())
        result = {k: copy.deepcopy(v) for k, v in doc.items() if k not in skip}
    result["id"] = doc["id"]
    return result


def _matches(doc: dict, filters: dict | None) -> bool:
    if not filters:
        return True
    return all(k in doc and doc[k] == v for k, v in filters.items())


# ═══════════════════════════════════════════════════════════════════════════════
# document_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def insert_document(collection: Collection | str, data: dict) -> dict:
    now = now_iso()
    doc = copy.deepcopy({k: v for k, v in data.items() if k != "id"})
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    doc["id"] = str(uuid4())
    _docs(collection)[doc["id"]] = doc
    logger.debug("Memory store: inserted %s/%s", Collection(collection).value, doc["id"])
    return _out(doc)


async def get_document(
    collection: Collection | str,
    doc_id,
    fields: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> dict | None:
    doc = _docs(collection).get(_key(doc_id))
    return _out(doc, fields, exclude) if doc else None


async def get_documents_by_ids(
    collection: Collection | str,
    ids: Iterable,
    fields: Sequence[str] | None = None,
) -> list[dict]:
    docs = _docs(collection)
    wanted = {_key(i) for i in ids}
    return [_out(d, fields) for k, d in docs.items() if k in wanted]


async def find_documents(
    collection: Collection | str,
    filters: dict | None = None,
    search: str | None = None,
    search_fields: Sequence[str] = (),
    skip: int = 0,
    limit: int | None = None,
    exclude: Sequence[str] | None = None,
) -> list[dict]:
    found = [d for d in _docs(collection).values() if _matches(d, filters)]
    if search and search_fields:
        term = search.lower()
        found = [
            d for d in found
            if any(term in str(d.get(f) or "").lower() for f in search_fields)
        ]
    found = found[skip:]
    if limit is not None:
        found = found[:limit]
    return [_out(d, exclude=exclude) for d in found]


async def find_one(collection: Collection | str, filters: dict) -> dict | None:
    docs = await find_documents(collection, filters=filters, limit=1)
    return docs[0] if docs else None


async def update_document(collection: Collection | str, doc_id, changes: dict) -> dict | None:
    doc = _docs(collection).get(_key(doc_id))
    if doc is None:
        return None
    doc.update(copy.deepcopy({k: v for k, v in changes.items() if k != "id"}))
    doc["updatedAt"] = now_iso()
    return _out(doc)


async def update_documents(collection: Collection | str, filters: dict, changes: dict) -> int:
    updated = 0
    for doc in _docs(collection).values():
        if _matches(doc, filters):
            doc.update(copy.deepcopy(changes))
            doc["updatedAt"] = now_iso()
            updated += 1
    return updated


async def delete_document(collection: Collection | str, doc_id) -> dict | None:
    doc = _docs(collection).pop(_key(doc_id), None)
    return _out(doc) if doc else None


async def delete_documents(collection: Collection | str, filters: dict) -> int:
    docs = _docs(collection)
    doomed = [k for k, d in docs.items() if _matches(d, filters)]
    for k in doomed:
        del docs[k]
    return len(doomed)


async def push_reference(collection: Collection | str, doc_id, field: str, ref_id: str) -> None:
    doc = _docs(collection).get(_key(doc_id))
    if doc is None:
        return
    refs = doc.setdefault(field, [])
    if str(ref_id) not in refs:
        refs.append(str(ref_id))


async def pull_reference(collection: Collection | str, doc_id, field: str, ref_id: str) -> None:
    doc = _docs(collection).get(_key(doc_id))
    if doc is None:
        return
    doc[field] = [r for r in doc.get(field) or [] if r != str(ref_id)]


# ═══════════════════════════════════════════════════════════════════════════════
# Активация in-memory хранилища (monkey-patching)
# ═══════════════════════════════════════════════════════════════════════════════

_PATCHED = (
    "insert_document",
    "get_document",
    "get_documents_by_ids",
    "find_documents",
    "find_one",
    "update_document",
    "update_documents",
    "delete_document",
    "delete_documents",
    "push_reference",
    "pull_reference",
)


def activate_memory_store() -> None:
    """
    Подменяет функции в bizdesk.db.repositories.document_repo на in-memory
    реализации.

    Вызывается из bizdesk.main → lifespan() при недоступности БД.
    """
    from bizdesk.db.repositories import document_repo

    current = globals()
    for name in _PATCHED:
        setattr(document_repo, name, current[name])

    logger.warning(
        "🧠 Bizdesk memory store ACTIVATED — all data is in-memory (lost on restart)."
    )


def is_active() -> bool:
    from bizdesk.db.repositories import document_repo

    return document_repo.insert_document is insert_document

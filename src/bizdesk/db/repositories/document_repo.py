"""
bizdesk/db/repositories/document_repo.py — Документный репозиторий.

Каждая коллекция — таблица ``(id UUID, doc JSONB)``. Документы отдаются
как dict с ключом ``id`` (строка UUID). Ссылки между сущностями — строки
ID внутри ``doc`` (``company``, ``createdBy``, ``products`` ...).

Проекции выполняются на стороне PostgreSQL, чтобы не тянуть лишние поля:
    • ``fields``  — allow-list ключей (используется population-конфигом)
    • ``exclude`` — deny-list ключей (пароль, аудит-поля)

При недоступности БД функции модуля подменяются реализациями из
``bizdesk.memory_store`` — поэтому вызывающий код обращается к ним
только через атрибут модуля (``document_repo.get_document(...)``).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence
from uuid import UUID, uuid4

from bizdesk.database import get_connection
from bizdesk.models.enums import Collection


# ═══════════════════════════════════════════════════════════════════════════
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# ═══════════════════════════════════════════════════════════════════════════


def _table(collection: Collection | str) -> str:
    """Имя таблицы только из перечисления — никакого пользовательского ввода."""
    return Collection(collection).value


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_id(doc_id) -> UUID | None:
    """Невалидный ID трактуется как несуществующий документ."""
    if isinstance(doc_id, UUID):
        return doc_id
    try:
        return UUID(str(doc_id))
    except (TypeError, ValueError):
        return None


def _row_to_doc(row) -> dict:
    doc = dict(row["doc"])
    doc["id"] = str(row["id"])
    return doc


def _projection(
    params: list,
    fields: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> str:
    """SQL-выражение для колонки ``doc`` с учётом проекции."""
    if fields is not None:
        params.append([f for f in fields if f != "id"])
        return (
            "(SELECT COALESCE(jsonb_object_agg(key, value), '{}'::jsonb) "
            f"FROM jsonb_each(doc) WHERE key = ANY(${len(params)}::text[])) AS doc"
        )
    if exclude:
        params.append(list(exclude))
        return f"doc - ${len(params)}::text[] AS doc"
    return "doc"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ═══════════════════════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════════════════════


async def insert_document(collection: Collection | str, data: dict) -> dict:
    """Создать документ; ``createdAt``/``updatedAt`` проставляются здесь."""
    now = now_iso()
    doc = {k: v for k, v in data.items() if k != "id"}
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"INSERT INTO {_table(collection)} (id, doc) VALUES ($1, $2::jsonb) RETURNING id, doc",
            uuid4(), doc,
        )
        return _row_to_doc(row)


async def get_document(
    collection: Collection | str,
    doc_id,
    fields: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> dict | None:
    """Найти документ по ID."""
    uid = parse_id(doc_id)
    if uid is None:
        return None
    params: list = [uid]
    projection = _projection(params, fields, exclude)
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"SELECT id, {projection} FROM {_table(collection)} WHERE id = $1",
            *params,
        )
        return _row_to_doc(row) if row else None


async def get_documents_by_ids(
    collection: Collection | str,
    ids: Iterable,
    fields: Sequence[str] | None = None,
) -> list[dict]:
    """Одним запросом получить набор документов (порядок не гарантируется)."""
    uids = [u for u in (parse_id(i) for i in ids) if u is not None]
    if not uids:
        return []
    params: list = [uids]
    projection = _projection(params, fields)
    async with get_connection() as conn:
        rows = await conn.fetch(
            f"SELECT id, {projection} FROM {_table(collection)} WHERE id = ANY($1::uuid[])",
            *params,
        )
        return [_row_to_doc(r) for r in rows]


async def find_documents(
    collection: Collection | str,
    filters: dict | None = None,
    search: str | None = None,
    search_fields: Sequence[str] = (),
    skip: int = 0,
    limit: int | None = None,
    exclude: Sequence[str] | None = None,
) -> list[dict]:
    """
    Поиск документов.

    ``filters`` — равенство по ключам (``doc @> filters``),
    ``search`` — регистронезависимая подстрока в любом из ``search_fields``.
    """
    params: list = []
    where: list[str] = []
    if filters:
        params.append(filters)
        where.append(f"doc @> ${len(params)}::jsonb")
    if search and search_fields:
        params.append(f"%{_escape_like(search)}%")
        term_idx = len(params)
        conditions = []
        for field in search_fields:
            params.append(field)
            conditions.append(f"doc->>${len(params)}::text ILIKE ${term_idx}")
        where.append("(" + " OR ".join(conditions) + ")")

    projection = _projection(params, exclude=exclude)
    sql = f"SELECT id, {projection} FROM {_table(collection)}"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY doc->>'createdAt', id"
    params.append(skip)
    sql += f" OFFSET ${len(params)}"
    if limit is not None:
        params.append(limit)
        sql += f" LIMIT ${len(params)}"

    async with get_connection() as conn:
        rows = await conn.fetch(sql, *params)
        return [_row_to_doc(r) for r in rows]


async def find_one(collection: Collection | str, filters: dict) -> dict | None:
    docs = await find_documents(collection, filters=filters, limit=1)
    return docs[0] if docs else None


async def update_document(collection: Collection | str, doc_id, changes: dict) -> dict | None:
    """Слить ``changes`` в документ (None — очистить значение)."""
    uid = parse_id(doc_id)
    if uid is None:
        return None
    payload = {k: v for k, v in changes.items() if k != "id"}
    payload["updatedAt"] = now_iso()
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"UPDATE {_table(collection)} SET doc = doc || $2::jsonb "
            "WHERE id = $1 RETURNING id, doc",
            uid, payload,
        )
        return _row_to_doc(row) if row else None


async def update_documents(collection: Collection | str, filters: dict, changes: dict) -> int:
    payload = dict(changes)
    payload["updatedAt"] = now_iso()
    async with get_connection() as conn:
        status = await conn.execute(
            f"UPDATE {_table(collection)} SET doc = doc || $2::jsonb WHERE doc @> $1::jsonb",
            filters, payload,
        )
        return int(status.split()[-1])


async def delete_document(collection: Collection | str, doc_id) -> dict | None:
    uid = parse_id(doc_id)
    if uid is None:
        return None
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"DELETE FROM {_table(collection)} WHERE id = $1 RETURNING id, doc", uid
        )
        return _row_to_doc(row) if row else None


async def delete_documents(collection: Collection | str, filters: dict) -> int:
    async with get_connection() as conn:
        status = await conn.execute(
            f"DELETE FROM {_table(collection)} WHERE doc @> $1::jsonb",
            filters,
        )
        return int(status.split()[-1])


# ═══════════════════════════════════════════════════════════════════════════
# СПИСКИ ССЫЛОК (employees, products, clients, purchases)
# ═══════════════════════════════════════════════════════════════════════════


async def push_reference(collection: Collection | str, doc_id, field: str, ref_id: str) -> None:
    """Добавить ID в массив ``field``, если его там ещё нет."""
    uid = parse_id(doc_id)
    if uid is None:
        return
    async with get_connection() as conn:
        await conn.execute(
            f"""
            UPDATE {_table(collection)}
            SET doc = jsonb_set(doc, ARRAY[$2::text],
                                COALESCE(doc->$2::text, '[]'::jsonb) || to_jsonb($3::text))
            WHERE id = $1
              AND NOT COALESCE(doc->$2::text, '[]'::jsonb) @> to_jsonb($3::text)
            """,
            uid, field, str(ref_id),
        )


async def pull_reference(collection: Collection | str, doc_id, field: str, ref_id: str) -> None:
    """Удалить ID из массива ``field``."""
    uid = parse_id(doc_id)
    if uid is None:
        return
    async with get_connection() as conn:
        await conn.execute(
            f"""
            UPDATE {_table(collection)}
            SET doc = jsonb_set(doc, ARRAY[$2::text],
                                COALESCE(doc->$2::text, '[]'::jsonb) - $3::text)
            WHERE id = $1
            """,
            uid, field, str(ref_id),
        )

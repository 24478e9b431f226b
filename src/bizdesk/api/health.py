"""
bizdesk/api/health.py — Health check эндпоинт.

GET /api/v1/health — проверяет доступность PostgreSQL.
"""

from fastapi import APIRouter

from bizdesk import memory_store
from bizdesk.database import check_connection

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check сервиса")
async def health():
    """В режиме in-memory хранилища БД не используется вовсе."""
    if memory_store.is_active():
        return {"status": "healthy", "database": "in-memory", "service": "bizdesk"}
    db_ok = await check_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "service": "bizdesk",
    }

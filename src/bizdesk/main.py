"""
═══════════════════════════════════════════════════════════════════════════════
Bizdesk — Главная точка входа сервиса (Application Entry Point)
═══════════════════════════════════════════════════════════════════════════════

Фабрика приложения (Application Factory Pattern): роутеры ``/api/v1``,
CORS, единый обработчик доменных ошибок и ошибок валидации.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bizdesk import __version__
from bizdesk.config import get_settings
from bizdesk.database import close_pool, get_pool
from bizdesk.exceptions import STATUS_BY_CODE, BizdeskError

# ── API роутеры ──────────────────────────────────────────────────────────
from bizdesk.api.accountants import router as accountants_router
from bizdesk.api.auth import router as auth_router
from bizdesk.api.clients import router as clients_router
from bizdesk.api.companies import router as companies_router
from bizdesk.api.health import router as health_router
from bizdesk.api.products import router as products_router
from bizdesk.api.purchases import router as purchases_router
from bizdesk.api.users import router as users_router

# ═══════════════════════════════════════════════════════════════════════════════
# Настройка логирования
# ═══════════════════════════════════════════════════════════════════════════════
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Автоматическое применение SQL-миграций
# ═══════════════════════════════════════════════════════════════════════════════

async def _apply_migrations(pool) -> None:
    """Применяет SQL-миграции из ``bizdesk/db/migrations/``."""
    from pathlib import Path

    migrations_dir = Path(__file__).parent / "db" / "migrations"
    sql_files = sorted(migrations_dir.glob("*.sql")) if migrations_dir.is_dir() else []
    if not sql_files:
        logger.info("No SQL migration files found — skipping")
        return

    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS _applied_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        rows = await conn.fetch("SELECT filename FROM _applied_migrations")
        applied = {row["filename"] for row in rows}

        for sql_file in sql_files:
            if sql_file.name in applied:
                continue

            logger.info(f"📄 Applying migration: {sql_file.name}")
            async with conn.transaction():
                await conn.execute(sql_file.read_text(encoding="utf-8"))
                await conn.execute(
                    "INSERT INTO _applied_migrations (filename) VALUES ($1)",
                    sql_file.name,
                )
            logger.info(f"✅ Migration applied: {sql_file.name}")

    logger.info(f"✅ All Bizdesk migrations up to date ({len(sql_files)} files checked)")


# ═══════════════════════════════════════════════════════════════════════════════
# Lifespan: управление жизненным циклом
# ═══════════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Создаём пул соединений к PostgreSQL.
        2. Применяем миграции.
        3. При недоступности БД — graceful degradation (memory store).

    Shutdown:
        1. Закрываем пул.
    """
    settings = get_settings()
    logger.info(f"🚀 Bizdesk v{__version__} starting ({settings.app_env})...")

    pool = None
    try:
        pool = await get_pool()
        logger.info("✅ Database pool initialized")
    except Exception as e:
        logger.warning(f"⚠️  Database not available — activating memory store: {e}")
        from bizdesk.memory_store import activate_memory_store
        activate_memory_store()

    if pool is not None:
        try:
            await _apply_migrations(pool)
        except Exception as e:
            logger.warning(f"⚠️  Migration apply failed (non-fatal): {e}")

    yield

    await close_pool()
    logger.info("🛑 Bizdesk stopped")


# ═══════════════════════════════════════════════════════════════════════════════
# Ответ об ошибке
# ═══════════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, code: str, message: str, details: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        },
    )


def _validation_details(errors) -> dict:
    fields = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
        }
        for err in errors
    ]
    return {"fields": fields}


# ═══════════════════════════════════════════════════════════════════════════════
# Фабрика приложения
# ═══════════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Создаёт и конфигурирует FastAPI-приложение."""
    settings = get_settings()

    _is_production = settings.app_env == "production"

    app = FastAPI(
        redirect_slashes=False,
        title="Bizdesk",
        description=(
            "Multi-tenant business management backend: companies, employees, "
            "clients, products, purchases and accountants."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url=None if _is_production else "/docs",
        redoc_url=None if _is_production else "/redoc",
        openapi_url=None if _is_production else "/api/v1/openapi.json",
    )

    # ── CORS middleware ──────────────────────────────────────────────────
    # Cookie сессии требуют allow_credentials.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Refresh-Token"],
        expose_headers=["Authorization", "X-Refresh-Token"],
    )

    # ── Подключение API-роутеров ─────────────────────────────────────────
    v1_router = APIRouter(prefix="/api/v1")
    v1_router.include_router(auth_router)
    v1_router.include_router(users_router)
    v1_router.include_router(companies_router)
    v1_router.include_router(clients_router)
    v1_router.include_router(products_router)
    v1_router.include_router(purchases_router)
    v1_router.include_router(accountants_router)
    v1_router.include_router(health_router)
    app.include_router(v1_router)

    # ── Глобальный обработчик BizdeskError ───────────────────────────────
    @app.exception_handler(BizdeskError)
    async def bizdesk_error_handler(request: Request, exc: BizdeskError) -> JSONResponse:
        """Маппинг кодов Bizdesk на HTTP-статусы."""
        status_code = STATUS_BY_CODE.get(exc.code, 500)
        if status_code >= 500:
            logger.error(f"Unmapped error code {exc.code}: {exc.message}")
        return _error_response(status_code, exc.code, exc.message, exc.details)

    # ── Ошибки валидации входных данных → 400 ────────────────────────────
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            400, "BAD_REQUEST", "Invalid request data", _validation_details(exc.errors())
        )

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(
            400, "BAD_REQUEST", "Invalid request data", _validation_details(exc.errors())
        )

    # ── Корневой эндпоинт ────────────────────────────────────────────────
    @app.get("/")
    async def root():
        return {
            "name": "Bizdesk",
            "version": __version__,
            "docs": "/docs",
            "api": {
                "v1": {
                    "health": "/api/v1/health",
                    "register": "/api/v1/auth/register",
                    "login": "/api/v1/auth/login",
                    "company": "/api/v1/companies/get-company",
                },
            },
        }

    return app


# ═══════════════════════════════════════════════════════════════════════════════
# Module-level singleton
# ═══════════════════════════════════════════════════════════════════════════════
app = create_app()


def main() -> None:
    """Запускает сервис через Uvicorn."""
    settings = get_settings()
    logger.info(f"Starting Bizdesk server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "bizdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

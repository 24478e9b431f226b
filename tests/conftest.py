"""Root conftest — shared test configuration.

Invariants:
    - Every test runs against a fresh in-memory document store
    - Auth is passed as a Bearer header built from the stored user document
    - Images are written to a throwaway media directory

Design Decisions:
    - memory_store instead of PostgreSQL: same document_repo contract,
      no external dependency
    - ASGITransport does not run the lifespan, so the store is activated here
"""

import os
import tempfile

# Settings are cached on first use: set env before importing bizdesk
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("IMAGE_STORAGE_URL", "")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="bizdesk-media-"))

import pytest
from fastapi import Response
from httpx import ASGITransport, AsyncClient

from bizdesk import memory_store
from bizdesk.db.repositories import user_repo
from bizdesk.main import app
from bizdesk.models.company import CompanyCreate
from bizdesk.models.enums import Role
from bizdesk.models.user import CurrentUser
from bizdesk.services import company_service
from bizdesk.services.token_service import create_access_token


@pytest.fixture(autouse=True)
def store():
    memory_store.activate_memory_store()
    memory_store.reset()
    yield
    memory_store.reset()


@pytest.fixture
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def make_user():
    """Factory: store a user document and return it."""
    counter = iter(range(1, 10_000))

    async def _make(email=None, role=Role.UNCATEGORIZED, company=None,
                    first_name="Nikos", last_name="Papadopoulos", password="secret123"):
        return await user_repo.create_user(
            first_name=first_name,
            last_name=last_name,
            email=email or f"user{next(counter)}@example.com",
            password=password,
            role=role,
            company=company,
        )
    return _make


def as_actor(user: dict) -> CurrentUser:
    return CurrentUser(
        user_id=user["id"],
        first_name=user["firstName"],
        last_name=user["lastName"],
        email=user["email"],
        role=user["role"],
        company=user.get("company"),
        image=user.get("image"),
    )


@pytest.fixture
def actor():
    return as_actor


@pytest.fixture
def auth():
    """Factory: Authorization header for a stored user."""
    def _auth(user: dict) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _auth


@pytest.fixture
async def owner(make_user):
    """A company owner: returns the refreshed user document and the company."""
    user = await make_user(email="owner@example.com", first_name="Eleni", last_name="Owner")
    company = await company_service.create_company(
        CompanyCreate(name="Alpha S.A."), as_actor(user), Response(),
    )
    user = await user_repo.get_user_by_id(user["id"])
    return {"user": user, "company": company}


@pytest.fixture
async def employee(make_user, owner):
    """An employee of the owner's company."""
    from bizdesk.services import user_service

    user = await make_user(email="employee@example.com", first_name="Kostas", last_name="Worker")
    await user_service.add_to_company(user["id"], owner["company"]["id"])
    return await user_repo.get_user_by_id(user["id"])

"""User service — profile, role and membership operations.

Invariants:
    - Removing a member resets role to uncategorized and clears company on both sides
    - Only members of the actor's own company can be removed or re-roled
    - The owner can be neither removed nor re-roled
    - Email uniqueness holds across profile updates
"""

import asyncpg
import pytest
from fastapi import Response

from bizdesk.db.repositories import document_repo, user_repo
from bizdesk.exceptions import BadRequestError, ConflictError, ForbiddenError, UnauthorizedError
from bizdesk.models.enums import Collection, Role
from bizdesk.models.user import UserUpdate
from bizdesk.services import user_service


# --- Membership ----------------------------------------------------------------

async def test_add_to_company_defaults_to_employ(owner, make_user):
    user = await make_user()
    result = await user_service.add_to_company(user["id"], owner["company"]["id"])

    assert result.role == Role.EMPLOY
    assert result.company == owner["company"]["id"]
    company = await document_repo.get_document(Collection.COMPANIES, owner["company"]["id"])
    assert user["id"] in company["employees"]


async def test_add_to_company_rejects_user_working_elsewhere(owner, employee):
    with pytest.raises(BadRequestError, match="User working elsewhere!"):
        await user_service.add_to_company(employee["id"], owner["company"]["id"])


async def test_remove_from_company_resets_membership(owner, employee, actor):
    message = await user_service.remove_from_company(employee["id"], actor(owner["user"]))

    assert message == "User has been removed from the company!"
    user = await user_repo.get_user_by_id(employee["id"])
    assert user["role"] == "uncategorized"
    assert user["company"] is None
    company = await document_repo.get_document(Collection.COMPANIES, owner["company"]["id"])
    assert employee["id"] not in company["employees"]


async def test_remove_user_without_company_is_rejected(owner, make_user, actor):
    user = await make_user()
    with pytest.raises(BadRequestError, match="User does not work anywhere!"):
        await user_service.remove_from_company(user["id"], actor(owner["user"]))


async def test_remove_member_of_other_company_is_forbidden(owner, make_user, actor):
    outsider = await make_user(company="another-company", role=Role.EMPLOY)
    with pytest.raises(ForbiddenError, match="same company"):
        await user_service.remove_from_company(outsider["id"], actor(owner["user"]))


async def test_owner_cannot_be_removed(owner, actor):
    with pytest.raises(ForbiddenError):
        await user_service.remove_from_company(owner["user"]["id"], actor(owner["user"]))


# --- Roles ---------------------------------------------------------------------

async def test_change_role_within_own_company(owner, employee, actor):
    response = Response()
    message = await user_service.change_user_role(
        employee["id"], Role.SENIOR_EMPLOY, actor(owner["user"]), response,
    )

    assert message == "Role changed to senior_employ"
    user = await user_repo.get_user_by_id(employee["id"])
    assert user["role"] == "senior_employ"
    assert "set-cookie" in response.headers


async def test_change_role_requires_a_role(owner, employee, actor):
    with pytest.raises(BadRequestError, match="Provide a role!"):
        await user_service.change_user_role(employee["id"], None, actor(owner["user"]), Response())


async def test_change_role_outside_company_is_unauthorized(owner, make_user, actor):
    stranger = await make_user()
    with pytest.raises(UnauthorizedError, match="can not change this user's role"):
        await user_service.change_user_role(
            stranger["id"], Role.EMPLOY, actor(owner["user"]), Response(),
        )


async def test_automated_client_gets_tokens_in_headers(owner, employee, actor):
    response = Response()
    await user_service.change_user_role(
        employee["id"], Role.EMPLOY, actor(owner["user"]), response, is_automated_client=True,
    )
    assert response.headers["Authorization"].startswith("Bearer ")
    assert "X-Refresh-Token" in response.headers
    assert "set-cookie" not in response.headers


# --- Profile -------------------------------------------------------------------

async def test_change_password_with_wrong_old_password(make_user):
    user = await make_user(password="secret123")
    with pytest.raises(BadRequestError, match="Passwords do not match!"):
        await user_service.change_password(user["id"], "wrong-one", "brand-new")


async def test_change_password_replaces_hash(make_user):
    user = await make_user(password="secret123")
    assert await user_service.change_password(user["id"], "secret123", "brand-new") == "Password has been changed!"

    stored = await user_repo.get_user_by_id(user["id"])
    assert user_repo.verify_password("brand-new", stored["password"])
    assert not user_repo.verify_password("secret123", stored["password"])


async def test_update_user_rejects_taken_email(make_user, actor):
    taken = await make_user(email="taken@example.com")
    user = await make_user()
    with pytest.raises(BadRequestError, match="Email is already in use"):
        await user_service.update_user(
            user["id"], actor(user), UserUpdate(email="TAKEN@example.com"), Response(),
        )
    assert taken["email"] == "taken@example.com"


async def test_update_user_email_race_is_a_conflict(make_user, actor, monkeypatch):
    user = await make_user()

    async def update_document(collection, doc_id, changes):
        raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")

    monkeypatch.setattr(document_repo, "update_document", update_document)
    with pytest.raises(ConflictError, match="Email is already in use"):
        await user_service.update_user(
            user["id"], actor(user), UserUpdate(email="fresh@example.com"), Response(),
        )


async def test_update_user_hides_password(make_user, actor):
    user = await make_user()
    result = await user_service.update_user(
        user["id"], actor(user), UserUpdate(first_name="Giorgos"), Response(),
    )
    assert result.first_name == "Giorgos"
    assert "password" not in result.model_dump()


async def test_owner_cannot_delete_account(owner, actor):
    with pytest.raises(ForbiddenError):
        await user_service.delete_user(owner["user"]["id"], actor(owner["user"]), Response())


async def test_delete_user_leaves_company_and_clears_session(owner, employee, actor):
    response = Response()
    message = await user_service.delete_user(employee["id"], actor(employee), response)

    assert message == "The user Kostas Worker, has been deleted."
    assert await user_repo.get_user_by_id(employee["id"]) is None
    company = await document_repo.get_document(Collection.COMPANIES, owner["company"]["id"])
    assert employee["id"] not in company["employees"]
    assert "token=logout" in response.headers["set-cookie"]


# --- Listing -------------------------------------------------------------------

async def test_get_users_searches_first_or_last_name(make_user):
    await make_user(first_name="Maria", last_name="Papadaki")
    await make_user(first_name="Nikos", last_name="Mariatos")
    await make_user(first_name="Kostas", last_name="Georgiou")

    found = await user_service.get_users(1, "maria")
    assert sorted(u.first_name for u in found) == ["Maria", "Nikos"]


async def test_get_users_pages_by_ten(make_user):
    for i in range(12):
        await make_user(email=f"p{i}@example.com")
    assert len(await user_service.get_users(1)) == 10
    assert len(await user_service.get_users(2)) == 2

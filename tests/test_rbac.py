"""Role policy — permission table lookups.

Invariants:
    - Policy is a table, not a hierarchy: uncategorized users may only create a company
    - Unknown permissions are denied
"""

import pytest

from bizdesk.models.enums import Role
from bizdesk.models.user import CurrentUser
from bizdesk.services.rbac import PERMISSIONS, has_permission


def _user(role: Role) -> CurrentUser:
    return CurrentUser(
        user_id="u1", first_name="A", last_name="B", email="a@b.gr", role=role,
    )


def test_only_newcomers_may_create_a_company():
    assert has_permission(_user(Role.UNCATEGORIZED), "company.create")
    assert not has_permission(_user(Role.EMPLOY), "company.create")
    assert not has_permission(_user(Role.OWNER), "company.create")


@pytest.mark.parametrize("permission", sorted(p for p in PERMISSIONS if p != "company.create"))
def test_newcomers_have_no_company_permissions(permission):
    assert not has_permission(_user(Role.UNCATEGORIZED), permission)


def test_owner_only_actions():
    assert has_permission(_user(Role.OWNER), "company.delete")
    assert not has_permission(_user(Role.SENIOR_EMPLOY), "company.delete")
    assert not has_permission(_user(Role.SENIOR_EMPLOY), "accountant.delete")


def test_senior_employee_manages_roles_but_employee_does_not():
    assert has_permission(_user(Role.SENIOR_EMPLOY), "user.change_role")
    assert not has_permission(_user(Role.EMPLOY), "user.change_role")


def test_employee_reads_and_creates_clients():
    employee = _user(Role.EMPLOY)
    assert has_permission(employee, "client.read")
    assert has_permission(employee, "client.create")
    assert has_permission(employee, "purchase.create")
    assert not has_permission(employee, "product.create")


def test_unknown_permission_is_denied():
    assert not has_permission(_user(Role.OWNER), "company.launch_rocket")

"""
bizdesk/services/rbac.py — RBAC Bizdesk.

Одна декларативная таблица ``(действие → допустимые роли)``. Роли не
иерархичны: создать компанию может только пользователь без компании
(UNCATEGORIZED), а владелец — нет.

Проверки принадлежности (свой аккаунт, та же компания) живут
в ``bizdesk.middlewares``.
"""

from __future__ import annotations

import logging

from fastapi import Depends

from bizdesk.exceptions import ForbiddenError
from bizdesk.models.enums import Role

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Наборы ролей
# ═══════════════════════════════════════════════════════════════════════════════

MEMBERS = frozenset({Role.EMPLOY, Role.SENIOR_EMPLOY, Role.OWNER})
MANAGERS = frozenset({Role.SENIOR_EMPLOY, Role.OWNER})
OWNERS = frozenset({Role.OWNER})
NEWCOMERS = frozenset({Role.UNCATEGORIZED})


# ═══════════════════════════════════════════════════════════════════════════════
# Permissions
# ═══════════════════════════════════════════════════════════════════════════════

PERMISSIONS: dict[str, frozenset[Role]] = {
    "company.read": MEMBERS,
    "company.create": NEWCOMERS,
    "company.update": MANAGERS,
    "company.delete": OWNERS,
    "company.add_member": MANAGERS,
    "company.remove_member": MANAGERS,
    "user.change_role": MANAGERS,
    "client.read": MEMBERS,
    "client.create": MEMBERS,
    "client.update": MEMBERS,
    "client.delete": MANAGERS,
    "product.read": MEMBERS,
    "product.create": MANAGERS,
    "product.update": MANAGERS,
    "product.delete": MANAGERS,
    "purchase.read": MEMBERS,
    "purchase.create": MEMBERS,
    "purchase.update": MEMBERS,
    "purchase.delete": MANAGERS,
    "accountant.read": MEMBERS,
    "accountant.create": MANAGERS,
    "accountant.update": MANAGERS,
    "accountant.delete": OWNERS,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Вспомогательные функции
# ═══════════════════════════════════════════════════════════════════════════════

def has_permission(user, permission: str) -> bool:
    """Проверяет, входит ли роль пользователя в набор для действия."""
    allowed = PERMISSIONS.get(permission)
    if allowed is None:
        logger.warning("Unknown permission requested: %s", permission)
        return False
    role = getattr(user, "role", None) or Role.UNCATEGORIZED
    return Role(role) in allowed


def require_permission(permission: str):
    """FastAPI dependency: требует разрешение из таблицы PERMISSIONS."""
    from bizdesk.dependencies import get_current_user

    async def _check(user=Depends(get_current_user)) -> None:
        if not has_permission(user, permission):
            logger.warning(
                "RBAC: user %s (%s) denied permission '%s'",
                getattr(user, "user_id", "?"), getattr(user, "role", "?"), permission,
            )
            raise ForbiddenError("Not authorized to access this route")
    return _check

"""
bizdesk.models — Модели данных Bizdesk-домена.

Реэкспорт основных классов для удобства:
    from bizdesk.models import CurrentUser, Role
"""

from bizdesk.models.enums import Collection, PaymentMethod, PurchaseStatus, Role  # noqa: F401
from bizdesk.models.user import (  # noqa: F401
    CompanyMembership,
    CurrentUser,
    PasswordChange,
    RoleChange,
    UserCreate,
    UserLogin,
    UserRead,
    UserUpdate,
)
from bizdesk.models.company import CompanyCreate, CompanyUpdate  # noqa: F401
from bizdesk.models.client import ClientCreate, ClientUpdate  # noqa: F401
from bizdesk.models.product import ProductCreate, ProductUpdate  # noqa: F401
from bizdesk.models.purchase import PurchaseCreate, PurchaseUpdate  # noqa: F401
from bizdesk.models.accountant import AccountantCreate, AccountantUpdate  # noqa: F401

"""
bizdesk/models/enums.py — Перечисления Bizdesk-домена.

    • Role — роль пользователя внутри компании
    • PurchaseStatus — статус покупки
    • PaymentMethod — способ оплаты
    • Collection — коллекции документного хранилища
"""

from enum import Enum


class Role(str, Enum):
    """Роль пользователя. UNCATEGORIZED — пользователь без компании."""
    UNCATEGORIZED = "uncategorized"
    EMPLOY = "employ"
    SENIOR_EMPLOY = "senior_employ"
    OWNER = "owner"


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class Collection(str, Enum):
    """Коллекция документов; значение совпадает с именем таблицы."""
    USERS = "users"
    COMPANIES = "companies"
    CLIENTS = "clients"
    PRODUCTS = "products"
    PURCHASES = "purchases"
    ACCOUNTANTS = "accountants"

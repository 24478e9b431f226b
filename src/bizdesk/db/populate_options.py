"""
bizdesk/db/populate_options.py — Конфигурация population по сущностям.

Новая связь = новая запись в наборе; код интерпретатора не меняется.
"""

from bizdesk.db.population import PopulateOption
from bizdesk.models.enums import Collection

_CREATOR = PopulateOption(
    path="createdBy",
    collection=Collection.USERS,
    select=("firstName", "lastName", "id"),
)

_PURCHASE_HISTORY = PopulateOption(
    path="purchases",
    collection=Collection.PURCHASES,
    select=("date", "totalAmount", "status", "id"),
)

_PURCHASE_CLIENT = PopulateOption(
    path="client",
    collection=Collection.CLIENTS,
    select=("firstName", "lastName", "id"),
)

_PURCHASE_PRODUCTS = PopulateOption(
    path="products",
    collection=Collection.PRODUCTS,
    select=("name", "price", "id"),
)

POPULATE_COMPANY: tuple[PopulateOption, ...] = (
    PopulateOption(
        path="owner",
        collection=Collection.USERS,
        select=("firstName", "lastName", "image", "id"),
    ),
    PopulateOption(
        path="employees",
        collection=Collection.USERS,
        select=("firstName", "lastName", "image", "role", "id"),
        limit=4,
    ),
    PopulateOption(
        path="accountant",
        collection=Collection.ACCOUNTANTS,
        select=("firstName", "lastName", "email", "id"),
    ),
    PopulateOption(
        path="products",
        collection=Collection.PRODUCTS,
        select=("name", "price", "id"),
        limit=4,
    ),
    PopulateOption(
        path="clients",
        collection=Collection.CLIENTS,
        select=("firstName", "lastName", "phone", "id"),
        limit=4,
    ),
    PopulateOption(
        path="purchases",
        collection=Collection.PURCHASES,
        select=("totalAmount", "status", "client", "id"),
        limit=4,
        populate=(_PURCHASE_CLIENT, _PURCHASE_PRODUCTS),
    ),
)

POPULATE_CLIENT: tuple[PopulateOption, ...] = (_PURCHASE_HISTORY, _CREATOR)

POPULATE_ACCOUNTANT: tuple[PopulateOption, ...] = (_CREATOR,)

POPULATE_PRODUCT: tuple[PopulateOption, ...] = (_PURCHASE_HISTORY, _CREATOR)

POPULATE_PURCHASE: tuple[PopulateOption, ...] = (
    _PURCHASE_CLIENT,
    _PURCHASE_PRODUCTS,
    _CREATOR,
)

"""Purchase routes — product reference guard and relation bookkeeping.

Invariants:
    - Products come from the path or the body, never both
    - Every referenced product must exist in the caller's company
    - Creating a purchase links it to client, company and products;
      deleting it unlinks all of them
"""

import json

import pytest

from bizdesk.db.repositories import document_repo, user_repo
from bizdesk.models.enums import Collection

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
async def catalog(client, owner, auth):
    """A client and two products in the owner's company."""
    headers = auth(owner["user"])
    buyer = await client.post(
        "/api/v1/clients/create-client",
        json={"firstName": "Maria", "lastName": "Papadaki", "phone": "6912345678"},
        headers=headers,
    )
    coffee = await client.post(
        "/api/v1/products/create-product", json={"name": "Coffee", "price": 2.5}, headers=headers,
    )
    tea = await client.post(
        "/api/v1/products/create-product", json={"name": "Tea", "price": 1.5}, headers=headers,
    )
    return {
        "client": buyer.json()["id"],
        "products": [coffee.json()["id"], tea.json()["id"]],
        "headers": headers,
    }


def _purchase(**overrides):
    body = {"totalAmount": 4.0, "paymentMethod": "cash", "date": "2024/03/15"}
    body.update(overrides)
    return body


async def test_create_purchase_links_everything(client, owner, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=catalog["products"]),
        headers=catalog["headers"],
    )

    assert res.status_code == 201
    purchase = res.json()
    assert purchase["status"] == "pending"
    assert purchase["date"] == "2024-03-15"
    assert purchase["client"]["firstName"] == "Maria"
    assert [p["name"] for p in purchase["products"]] == ["Coffee", "Tea"]

    buyer = await document_repo.get_document(Collection.CLIENTS, catalog["client"])
    company = await document_repo.get_document(Collection.COMPANIES, owner["company"]["id"])
    assert buyer["purchases"] == [purchase["id"]]
    assert company["purchases"] == [purchase["id"]]
    for pid in catalog["products"]:
        product = await document_repo.get_document(Collection.PRODUCTS, pid)
        assert product["purchases"] == [purchase["id"]]


async def test_create_purchase_with_product_in_path(client, catalog):
    coffee = catalog["products"][0]
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/{coffee}/create-purchase",
        json=_purchase(),
        headers=catalog["headers"],
    )

    assert res.status_code == 201
    assert [p["id"] for p in res.json()["products"]] == [coffee]


async def test_path_product_and_body_products_are_rejected(client, catalog):
    coffee = catalog["products"][0]
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/{coffee}/create-purchase",
        json=_purchase(products=[coffee]),
        headers=catalog["headers"],
    )

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Something went wrong, please try again"


async def test_missing_product_in_body_is_not_found(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=[catalog["products"][0], MISSING_ID]),
        headers=catalog["headers"],
    )

    assert res.status_code == 404
    assert res.json()["error"]["message"] == f"No product found with ID: {MISSING_ID}!"


async def test_body_without_content_type_is_still_checked(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        content=json.dumps(_purchase(products=[catalog["products"][0], MISSING_ID])),
        headers=catalog["headers"],
    )

    assert res.status_code == 404
    assert res.json()["error"]["message"] == f"No product found with ID: {MISSING_ID}!"
    assert await document_repo.find_documents(Collection.PURCHASES) == []


async def test_missing_product_in_path_is_not_found(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/{MISSING_ID}/create-purchase",
        json=_purchase(),
        headers=catalog["headers"],
    )

    assert res.status_code == 404
    assert res.json()["error"]["message"] == "No product found!"


async def test_purchase_without_products_is_rejected(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(),
        headers=catalog["headers"],
    )
    assert res.status_code == 400


async def test_server_owned_client_field_conflicts(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=catalog["products"], client=catalog["client"]),
        headers=catalog["headers"],
    )
    assert res.status_code == 409


async def test_invalid_date_is_rejected(client, catalog):
    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=catalog["products"], date="15-03-2024"),
        headers=catalog["headers"],
    )
    assert res.status_code == 400


async def test_client_of_another_company_is_forbidden(client, catalog, make_user, auth):
    outsider = await make_user()
    await client.post("/api/v1/companies/create-company", json={"name": "Beta"}, headers=auth(outsider))
    outsider = await user_repo.get_user_by_id(outsider["id"])

    res = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=catalog["products"]),
        headers=auth(outsider),
    )
    assert res.status_code == 403


async def test_list_purchases_filters_by_status(client, catalog):
    url = f"/api/v1/purchases/{catalog['client']}/create-purchase"
    await client.post(url, json=_purchase(products=catalog["products"]), headers=catalog["headers"])
    await client.post(
        url, json=_purchase(products=catalog["products"], status="completed"), headers=catalog["headers"],
    )

    res = await client.get("/api/v1/purchases/get-purchases?status=completed", headers=catalog["headers"])

    assert res.status_code == 200
    assert [p["status"] for p in res.json()] == ["completed"]


async def test_update_purchase_relinks_products(client, catalog):
    coffee, tea = catalog["products"]
    created = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=[coffee]),
        headers=catalog["headers"],
    )
    purchase_id = created.json()["id"]

    res = await client.patch(
        f"/api/v1/purchases/{purchase_id}/update-purchase",
        json={"products": [tea], "status": "completed"},
        headers=catalog["headers"],
    )

    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert (await document_repo.get_document(Collection.PRODUCTS, coffee))["purchases"] == []
    assert (await document_repo.get_document(Collection.PRODUCTS, tea))["purchases"] == [purchase_id]


async def test_delete_purchase_unlinks_everything(client, owner, catalog):
    created = await client.post(
        f"/api/v1/purchases/{catalog['client']}/create-purchase",
        json=_purchase(products=catalog["products"]),
        headers=catalog["headers"],
    )
    purchase_id = created.json()["id"]

    res = await client.delete(
        f"/api/v1/purchases/{purchase_id}/delete-purchase", headers=catalog["headers"],
    )

    assert res.status_code == 200
    assert (await document_repo.get_document(Collection.CLIENTS, catalog["client"]))["purchases"] == []
    company = await document_repo.get_document(Collection.COMPANIES, owner["company"]["id"])
    assert company["purchases"] == []
    for pid in catalog["products"]:
        assert (await document_repo.get_document(Collection.PRODUCTS, pid))["purchases"] == []

"""Relation population — reference expansion over the document store.

Invariants:
    - Only the selected fields of a related document are returned (plus id)
    - List relations are cut to the configured limit, order preserved
    - Nested relations are expanded on the related documents
    - One batched lookup per relation, regardless of how many documents share it
"""

from bizdesk.db.population import PopulateOption, fetch_with_relations, populate_documents
from bizdesk.db.populate_options import POPULATE_COMPANY
from bizdesk.db.repositories import document_repo
from bizdesk.models.enums import Collection


async def _insert(collection, **fields):
    return await document_repo.insert_document(collection, fields)


async def test_scalar_reference_is_replaced_with_selected_fields():
    user = await _insert(Collection.USERS, firstName="Eleni", lastName="K", email="e@k.gr", password="x")
    client = await _insert(Collection.CLIENTS, firstName="Maria", createdBy=user["id"])

    option = PopulateOption("createdBy", Collection.USERS, ("firstName", "lastName", "id"))
    [populated] = await populate_documents([client], (option,))

    assert populated["createdBy"] == {"firstName": "Eleni", "lastName": "K", "id": user["id"]}


async def test_list_reference_is_limited_and_keeps_order():
    products = [await _insert(Collection.PRODUCTS, name=f"P{i}", price=i) for i in range(6)]
    company = await _insert(
        Collection.COMPANIES, name="Alpha", products=[p["id"] for p in products],
    )

    option = PopulateOption("products", Collection.PRODUCTS, ("name", "id"), limit=4)
    await populate_documents([company], (option,))

    assert [p["name"] for p in company["products"]] == ["P0", "P1", "P2", "P3"]
    assert all(set(p) == {"name", "id"} for p in company["products"])


async def test_missing_references_are_skipped_or_null():
    product = await _insert(Collection.PRODUCTS, name="Coffee", price=2)
    dangling = "00000000-0000-4000-8000-000000000000"
    purchase = await _insert(
        Collection.PURCHASES, client=dangling, products=[dangling, product["id"]],
    )

    await populate_documents([purchase], (
        PopulateOption("client", Collection.CLIENTS, ("firstName", "id")),
        PopulateOption("products", Collection.PRODUCTS, ("name", "id")),
    ))

    assert purchase["client"] is None
    assert purchase["products"] == [{"name": "Coffee", "id": product["id"]}]


async def test_company_population_expands_nested_purchase_relations():
    owner = await _insert(Collection.USERS, firstName="Eleni", lastName="K", email="o@a.gr", password="x")
    client = await _insert(Collection.CLIENTS, firstName="Maria", lastName="P", phone="6912345678")
    product = await _insert(Collection.PRODUCTS, name="Coffee", price=2.5)
    purchase = await _insert(
        Collection.PURCHASES, totalAmount=5.0, status="pending",
        client=client["id"], products=[product["id"]], paymentMethod="cash",
    )
    company = await _insert(
        Collection.COMPANIES, name="Alpha", owner=owner["id"], employees=[],
        products=[product["id"]], clients=[client["id"]], purchases=[purchase["id"]],
        accountant=None,
    )

    doc = await fetch_with_relations(Collection.COMPANIES, company["id"], POPULATE_COMPANY)

    assert doc["owner"]["firstName"] == "Eleni"
    assert "password" not in doc["owner"]
    assert doc["accountant"] is None
    [nested] = doc["purchases"]
    assert "paymentMethod" not in nested
    assert nested["client"] == {"firstName": "Maria", "lastName": "P", "id": client["id"]}
    assert nested["products"] == [{"name": "Coffee", "price": 2.5, "id": product["id"]}]


async def test_shared_references_are_fetched_in_one_batch(monkeypatch):
    user = await _insert(Collection.USERS, firstName="Eleni", email="e@k.gr")
    clients = [await _insert(Collection.CLIENTS, createdBy=user["id"]) for _ in range(5)]

    calls = []
    original = document_repo.get_documents_by_ids

    async def counting(collection, ids, fields=None):
        calls.append(list(ids))
        return await original(collection, ids, fields=fields)

    monkeypatch.setattr(document_repo, "get_documents_by_ids", counting)
    option = PopulateOption("createdBy", Collection.USERS, ("firstName", "id"))
    await populate_documents(clients, (option,))

    assert calls == [[user["id"]]]
    assert all(c["createdBy"]["firstName"] == "Eleni" for c in clients)


async def test_fetch_missing_document_returns_none():
    assert await fetch_with_relations(
        Collection.COMPANIES, "00000000-0000-4000-8000-000000000000", POPULATE_COMPANY,
    ) is None

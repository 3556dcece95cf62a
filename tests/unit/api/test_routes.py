"""HTTP-level tests: routers wired to the in-memory unit of work."""

import pytest
from fastapi.testclient import TestClient

from app.application.ports.unit_of_work import UnitOfWork
from app.domain.errors import PersistenceError
from app.infrastructure.api.dependencies import get_uow_factory
from app.main import app


@pytest.fixture
def client(uow_factory):
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


# ─── Assignments ─────────────────────────────────────────────────────


def test_assign_then_idempotent_hit(abc_store, client):
    abc_store.add_company("X")

    first = client.post("/api/assignments/X")
    second = client.post("/api/assignments/X")

    assert first.status_code == 201
    assert first.json()["status"] == "assigned"
    assert first.json()["sales_representative_id"] == "A"
    assert second.status_code == 200
    assert second.json()["status"] == "already_assigned"
    assert second.json()["sales_representative_id"] == "A"


def test_assign_unknown_company_is_404(abc_store, client):
    resp = client.post("/api/assignments/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"]["status"] == "company_not_found"


def test_assign_with_empty_pool_is_409(store, client):
    store.add_company("X")
    resp = client.post("/api/assignments/X")
    assert resp.status_code == 409
    assert resp.json()["detail"]["status"] == "no_eligible_representatives"


def test_assign_when_store_keeps_conflicting_is_503(abc_store, client):
    abc_store.add_company("X")
    abc_store.forced_conflicts = 100
    resp = client.post("/api/assignments/X")
    assert resp.status_code == 503
    assert resp.json()["detail"]["status"] == "persistence_error"


def test_manual_assignment(abc_store, client):
    abc_store.add_company("X")

    resp = client.post(
        "/api/assignments/X/manual",
        json={"sales_representative_id": "C", "assigned_by": "ops-1"},
    )
    bad = client.post("/api/assignments/X/manual", json={"sales_representative_id": "nobody"})

    assert resp.status_code == 201
    assert abc_store.assigned_to("X") == "C"
    # already assigned wins over eligibility of the requested rep
    assert bad.status_code == 200


def test_manual_assignment_rejects_ineligible(abc_store, client):
    abc_store.add_representative("D", is_active=False)
    abc_store.add_company("X")
    resp = client.post("/api/assignments/X/manual", json={"sales_representative_id": "D"})
    assert resp.status_code == 422


def test_retry_unassigned(abc_store, client):
    for company_id in ("X", "Y"):
        abc_store.add_company(company_id)

    resp = client.post("/api/assignments/retry-unassigned")

    body = resp.json()
    assert resp.status_code == 200
    assert body["total"] == 2
    assert body["assigned"] == 2
    assert body["failed"] == 0


def test_summary(abc_store, client):
    for company_id in ("X", "Y", "Z"):
        abc_store.add_company(company_id)
    client.post("/api/assignments/X")
    client.post("/api/assignments/Y")

    body = client.get("/api/assignments/summary").json()

    assert body["total_assigned"] == 2
    assert body["unassigned"] == 1
    counts = {r["id"]: r["companies"] for r in body["by_representative"]}
    assert counts == {"A": 1, "B": 1, "C": 0}
    assert body["cursor"]["last_representative_id"] == "B"
    assert body["cursor"]["sequence"] == 2


def test_company_assignment_lookup(abc_store, client):
    abc_store.add_company("X")
    assert client.get("/api/assignments/company/X").status_code == 404

    client.post("/api/assignments/X")
    body = client.get("/api/assignments/company/X").json()

    assert body["sales_representative_id"] == "A"
    assert body["sales_representative"]["email"] == "a@example.com"
    assert body["method"] == "rotation"


def test_recipients_respect_email_preference(store, client):
    store.add_representative("A", email_notifications=False)
    store.add_company("X")
    client.post("/api/assignments/X")

    assert client.get("/api/assignments/company/X/recipients").json()["recipients"] == []
    assert client.get("/api/assignments/company/Y/recipients").json()["recipients"] == []


# ─── Companies ───────────────────────────────────────────────────────


def test_register_company_assigns_rep(abc_store, client):
    resp = client.post("/api/companies", json={"name": "Acme Freight", "industry": "Logistics"})

    body = resp.json()
    assert resp.status_code == 201
    assert body["name"] == "Acme Freight"
    assert body["assignment"]["status"] == "assigned"
    assert abc_store.assigned_to(body["id"]) == "A"


def test_register_company_without_reps(store, client):
    resp = client.post("/api/companies", json={"name": "Lonely Co"})

    body = resp.json()
    assert resp.status_code == 201
    assert body["assignment"]["status"] == "no_eligible_representatives"
    assert body["id"] in store.companies

    unassigned = client.get("/api/companies/unassigned").json()
    assert unassigned["total"] == 1


def test_register_company_validates_name(store, client):
    assert client.post("/api/companies", json={"name": ""}).status_code == 422


def test_get_company(abc_store, client):
    abc_store.add_company("X")
    assert client.get("/api/companies/X").json()["assignment"] is None
    assert client.get("/api/companies/nope").status_code == 404


# ─── Representatives ─────────────────────────────────────────────────


def test_create_and_list_representatives(store, client):
    resp = client.post("/api/representatives", json={"email": " New@Example.com ", "role": "broker"})
    client.post("/api/representatives", json={"email": "admin@example.com", "role": "admin"})

    assert resp.status_code == 201
    assert resp.json()["email"] == "new@example.com"
    assert client.get("/api/representatives").json()["total"] == 2
    eligible = client.get("/api/representatives", params={"eligible_only": True}).json()
    assert [r["email"] for r in eligible["representatives"]] == ["new@example.com"]


def test_deactivate_representative(abc_store, client):
    resp = client.patch("/api/representatives/B/active", json={"is_active": False})

    assert resp.status_code == 200
    assert resp.json()["eligible"] is False
    assert abc_store.representatives["B"].is_active is False
    assert client.patch("/api/representatives/nope/active", json={"is_active": False}).status_code == 404


def test_companies_for_representative_and_access(abc_store, client):
    for company_id in ("X", "Y", "Z", "W"):
        abc_store.add_company(company_id)
        client.post(f"/api/assignments/{company_id}")

    body = client.get("/api/representatives/A/companies").json()
    assert [c["id"] for c in body["companies"]] == ["X", "W"]

    allowed = client.get("/api/representatives/A/companies/X/access").json()
    denied = client.get("/api/representatives/B/companies/X/access").json()
    assert allowed["allowed"] is True
    assert denied["allowed"] is False
    assert client.get("/api/representatives/nope/companies").status_code == 404


def test_duplicate_representative_email_is_409(store, client):
    first = client.post("/api/representatives", json={"email": "dup@example.com"})
    second = client.post("/api/representatives", json={"email": "DUP@example.com"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert len(store.representatives) == 1


# ─── Store outage ────────────────────────────────────────────────────


class _UnreachableUnitOfWork(UnitOfWork):
    async def __aenter__(self):
        raise PersistenceError("(OperationalError) [SQL: SELECT * FROM sales_representatives] [parameters: ()]")

    async def commit(self):
        pass

    async def rollback(self):
        pass


def test_store_outage_returns_generic_503():
    app.dependency_overrides[get_uow_factory] = lambda: _UnreachableUnitOfWork
    try:
        resp = TestClient(app).get("/api/representatives")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 503
    assert "SQL" not in resp.json()["detail"]

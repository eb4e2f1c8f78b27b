from uuid import uuid4

from conftest import FakeResult, entity_handler, make_loan, make_user, sequence_handler
from loanlink.core.roles import UserRole
from loanlink.models.loan import Loan


def _loan_payload(**overrides):
    payload = {
        "title": "Education Plus",
        "description": "Tuition support",
        "category": "Education",
        "interest": 5.5,
        "maxLimit": 20000,
        "requiredDocuments": ["National ID"],
        "emiPlans": ["12 months"],
        "images": ["https://cdn.loanlink.io/edu.png"],
        "showOnHome": True,
    }
    payload.update(overrides)
    return payload


def test_list_loans_is_public_and_paginated(client, fake_db, manager):
    loans = [make_loan(creator=manager, title=f"Loan {i}") for i in range(5)]
    fake_db.on_execute(sequence_handler([FakeResult(scalar=12), FakeResult(items=loans)]))

    response = client.get("/api/loans", params={"page": 2, "limit": 5, "search": "loan"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalPages"] == 3
    assert body["currentPage"] == 2
    assert body["total"] == 12
    assert [item["title"] for item in body["loans"]] == [f"Loan {i}" for i in range(5)]
    assert body["loans"][0]["creator"]["email"] == manager.email


def test_list_loans_with_no_results(client, fake_db):
    fake_db.on_execute(sequence_handler([FakeResult(scalar=0), FakeResult(items=[])]))

    response = client.get("/api/loans")

    assert response.status_code == 200
    assert response.json()["totalPages"] == 0
    assert response.json()["currentPage"] == 1


def test_featured_loans(client, fake_db, manager):
    featured = make_loan(creator=manager, show_on_home=True)
    fake_db.on_execute(entity_handler(Loan, FakeResult(items=[featured])))

    response = client.get("/api/loans/featured")

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["loans"]] == [str(featured.id)]


def test_get_loan(client, fake_db, manager):
    loan = make_loan(creator=manager)
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))

    response = client.get(f"/api/loans/{loan.id}")

    assert response.status_code == 200
    body = response.json()["loan"]
    assert body["maxLimit"] == 50000.0
    assert body["emiPlans"] == ["6 months", "12 months"]
    assert body["createdBy"] == str(manager.id)


def test_get_missing_loan_returns_404(client):
    response = client.get(f"/api/loans/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "Loan not found"}


def test_manager_creates_loan(client, fake_db, act_as, manager):
    act_as(manager)

    response = client.post("/api/loans", json=_loan_payload())

    assert response.status_code == 201
    body = response.json()["loan"]
    assert body["createdBy"] == str(manager.id)
    assert body["createdByEmail"] == manager.email
    assert body["showOnHome"] is True
    assert len(fake_db.added) == 1


def test_borrower_cannot_create_loan(client, fake_db, act_as, borrower):
    act_as(borrower)

    response = client.post("/api/loans", json=_loan_payload())

    assert response.status_code == 403
    assert response.json() == {"message": "Access denied"}
    assert fake_db.added == []


def test_create_loan_validates_payload(client, act_as, manager):
    act_as(manager)

    response = client.post("/api/loans", json=_loan_payload(interest=-1))

    assert response.status_code == 422
    assert response.json()["message"].startswith("interest")


def test_other_manager_cannot_update_loan(client, fake_db, act_as, manager):
    loan = make_loan(creator=manager, title="Original")
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(make_user(role=UserRole.MANAGER))

    response = client.put(f"/api/loans/{loan.id}", json={"title": "Hijacked"})

    assert response.status_code == 403
    assert response.json() == {"message": "Not authorized to update this loan"}
    assert loan.title == "Original"
    assert not fake_db.committed


def test_owner_updates_only_supplied_fields(client, fake_db, act_as, manager):
    loan = make_loan(creator=manager, title="Original", category="Business")
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(manager)

    response = client.put(f"/api/loans/{loan.id}", json={"title": "Renamed"})

    assert response.status_code == 200
    body = response.json()["loan"]
    assert body["title"] == "Renamed"
    assert body["category"] == "Business"


def test_admin_updates_any_loan(client, fake_db, act_as, manager, admin):
    loan = make_loan(creator=manager)
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(admin)

    response = client.put(f"/api/loans/{loan.id}", json={"interest": 9.25})

    assert response.status_code == 200
    assert response.json()["loan"]["interest"] == 9.25
    assert response.json()["loan"]["createdBy"] == str(manager.id)


def test_other_manager_cannot_delete_loan(client, fake_db, act_as, manager):
    loan = make_loan(creator=manager)
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(make_user(role=UserRole.MANAGER))

    response = client.delete(f"/api/loans/{loan.id}")

    assert response.status_code == 403
    assert response.json() == {"message": "Not authorized to delete this loan"}
    assert fake_db.deleted == []


def test_owner_deletes_loan(client, fake_db, act_as, manager):
    loan = make_loan(creator=manager)
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(manager)

    response = client.delete(f"/api/loans/{loan.id}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Loan deleted successfully"}
    assert fake_db.deleted == [loan]


def test_manager_lists_own_loans(client, fake_db, act_as, manager):
    loan = make_loan(creator=manager)
    fake_db.on_execute(entity_handler(Loan, FakeResult(items=[loan])))
    act_as(manager)

    response = client.get("/api/loans/manager/my-loans")

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["loans"]] == [str(loan.id)]


def test_admin_cannot_use_manager_listing(client, act_as, admin):
    act_as(admin)

    response = client.get("/api/loans/manager/my-loans")

    assert response.status_code == 403


def test_admin_toggles_home_flag(client, fake_db, act_as, manager, admin):
    loan = make_loan(creator=manager, show_on_home=False)
    fake_db.on_execute(entity_handler(Loan, FakeResult(scalar=loan)))
    act_as(admin)

    first = client.patch(f"/api/loans/{loan.id}/toggle-home")
    second = client.patch(f"/api/loans/{loan.id}/toggle-home")

    assert first.json()["loan"]["showOnHome"] is True
    assert second.json()["loan"]["showOnHome"] is False


def test_manager_cannot_toggle_home_flag(client, act_as, manager):
    act_as(manager)

    response = client.patch(f"/api/loans/{uuid4()}/toggle-home")

    assert response.status_code == 403

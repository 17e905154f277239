from datetime import date
from uuid import uuid4

import pytest
from httpx import AsyncClient

from housy.models.expense import Expense
from housy.services.expense_service import ExpenseRow, summarize_expenses


async def register_user(client: AsyncClient, email: str, full_name: str | None = None) -> str:
    response = await client.post(
        "/auth/register",
        json={
            "email": email,
            "password": "testpass123",
            "full_name": full_name or email.split("@")[0],
        },
    )
    assert response.status_code == 201
    return response.json()["token"]["access_token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def admin_and_member(client: AsyncClient) -> tuple[str, str]:
    admin_token = await register_user(client, "anna@example.com", "Anna")
    member_token = await register_user(client, "bea@example.com", "Bea")
    created = await client.post("/households", json={"name": "Casa"}, headers=auth(admin_token))
    await client.post(
        "/households/join",
        json={"invite_code": created.json()["household"]["invite_code"]},
        headers=auth(member_token),
    )
    return admin_token, member_token


async def create_category(client: AsyncClient, token: str, name: str, color: str | None = None) -> dict:
    payload = {"name": name}
    if color:
        payload["color"] = color
    response = await client.post("/categories", json=payload, headers=auth(token))
    assert response.status_code == 201, response.text
    return response.json()["category"]


async def log_expense(client: AsyncClient, token: str, **overrides) -> dict:
    payload = {"amount": 10.0, "description": "Groceries", "date_incurred": "2026-03-05", **overrides}
    response = await client.post("/expenses", json=payload, headers=auth(token))
    assert response.status_code == 201, response.text
    return response.json()["expense"]


@pytest.mark.asyncio
async def test_categories_are_admin_managed_and_unique(client: AsyncClient) -> None:
    admin_token, member_token = await admin_and_member(client)

    food = await create_category(client, admin_token, "  Food  ", "#22c55e")
    assert food["name"] == "Food"
    assert food["color"] == "#22c55e"
    assert food["icon"] == "tag"

    duplicate = await client.post("/categories", json={"name": "food"}, headers=auth(admin_token))
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "already_exists"

    denied = await client.post("/categories", json={"name": "Travel"}, headers=auth(member_token))
    assert denied.status_code == 403

    renamed = await client.patch(
        f"/categories/{food['id']}",
        json={"name": "Food & Drinks"},
        headers=auth(admin_token),
    )
    assert renamed.status_code == 200
    assert renamed.json()["category"]["name"] == "Food & Drinks"

    listing = await client.get("/categories", headers=auth(member_token))
    assert [item["name"] for item in listing.json()["items"]] == ["Food & Drinks"]


@pytest.mark.asyncio
async def test_log_and_list_expenses(client: AsyncClient) -> None:
    admin_token, member_token = await admin_and_member(client)
    food = await create_category(client, admin_token, "Food")

    first = await log_expense(client, admin_token, amount=42.5, category_id=food["id"])
    assert first["category"]["name"] == "Food"
    assert first["user_name"] == "Anna"
    assert first["is_shared"] is True

    await log_expense(client, member_token, amount=8, description="Bus", date_incurred="2026-03-07")
    await log_expense(client, member_token, amount=3, description="Coffee", date_incurred="2026-02-27")

    listing = await client.get("/expenses", headers=auth(admin_token))
    assert listing.status_code == 200
    data = listing.json()
    assert data["total_count"] == 3
    assert [item["description"] for item in data["items"]] == ["Bus", "Groceries", "Coffee"]
    assert data["items"][0]["category"] is None

    march = await client.get(
        "/expenses",
        params={"start_date": "2026-03-01", "end_date": "2026-03-31", "limit": 1},
        headers=auth(admin_token),
    )
    assert march.json()["total_count"] == 2
    assert len(march.json()["items"]) == 1

    by_category = await client.get(
        "/expenses",
        params={"category_id": food["id"]},
        headers=auth(member_token),
    )
    assert [item["id"] for item in by_category.json()["items"]] == [first["id"]]

    too_many = await client.get("/expenses", params={"limit": 201}, headers=auth(admin_token))
    assert too_many.status_code == 422
    assert too_many.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_expense_amount_and_category_are_validated(client: AsyncClient) -> None:
    admin_token, _ = await admin_and_member(client)
    other_admin = await register_user(client, "zed@example.com")
    await client.post("/households", json={"name": "Elsewhere"}, headers=auth(other_admin))
    foreign = await create_category(client, other_admin, "Rent")

    zero = await client.post("/expenses", json={"amount": 0}, headers=auth(admin_token))
    assert zero.status_code == 422

    cross_household = await client.post(
        "/expenses",
        json={"amount": 5, "category_id": foreign["id"]},
        headers=auth(admin_token),
    )
    assert cross_household.status_code == 422
    assert cross_household.json()["code"] == "validation_error"

    outsider = await register_user(client, "nobody@example.com")
    no_household = await client.post("/expenses", json={"amount": 5}, headers=auth(outsider))
    assert no_household.status_code == 404


@pytest.mark.asyncio
async def test_only_the_creator_can_change_an_expense(client: AsyncClient) -> None:
    admin_token, member_token = await admin_and_member(client)
    expense = await log_expense(client, member_token, amount=20)

    denied = await client.patch(
        f"/expenses/{expense['id']}",
        json={"amount": 25},
        headers=auth(admin_token),
    )
    assert denied.status_code == 403
    assert denied.json()["code"] == "forbidden"

    denied_delete = await client.delete(f"/expenses/{expense['id']}", headers=auth(admin_token))
    assert denied_delete.status_code == 403

    updated = await client.patch(
        f"/expenses/{expense['id']}",
        json={"amount": 25, "description": "  Weekly   shop ", "is_shared": False},
        headers=auth(member_token),
    )
    assert updated.status_code == 200
    data = updated.json()["expense"]
    assert data["amount"] == 25
    assert data["description"] == "Weekly shop"
    assert data["is_shared"] is False

    deleted = await client.delete(f"/expenses/{expense['id']}", headers=auth(member_token))
    assert deleted.status_code == 200
    listing = await client.get("/expenses", headers=auth(member_token))
    assert listing.json()["total_count"] == 0


@pytest.mark.asyncio
async def test_deleting_a_category_keeps_its_expenses(client: AsyncClient) -> None:
    admin_token, _ = await admin_and_member(client)
    travel = await create_category(client, admin_token, "Travel")
    expense = await log_expense(client, admin_token, category_id=travel["id"])

    deleted = await client.delete(f"/categories/{travel['id']}", headers=auth(admin_token))
    assert deleted.status_code == 200

    listing = await client.get("/expenses", headers=auth(admin_token))
    [item] = listing.json()["items"]
    assert item["id"] == expense["id"]
    assert item["category"] is None


@pytest.mark.asyncio
async def test_summary_groups_by_category_and_user(client: AsyncClient) -> None:
    admin_token, member_token = await admin_and_member(client)
    food = await create_category(client, admin_token, "Food", "#22c55e")
    await log_expense(client, admin_token, amount=30, category_id=food["id"])
    await log_expense(client, member_token, amount=50, category_id=food["id"])
    await log_expense(client, member_token, amount=40, description="Lamp")
    await log_expense(client, admin_token, amount=999, date_incurred="2026-04-01")

    response = await client.get(
        "/expenses/summary",
        params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        headers=auth(admin_token),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 120
    assert data["count"] == 3
    assert data["average"] == 40
    assert [(group["name"], group["total"]) for group in data["by_category"]] == [
        ("Food", 80),
        ("Uncategorized", 40),
    ]
    assert data["by_category"][1]["key"] is None
    assert [(group["name"], group["total"], group["count"]) for group in data["by_user"]] == [
        ("Bea", 90, 2),
        ("Anna", 30, 1),
    ]

    reversed_window = await client.get(
        "/expenses/summary",
        params={"start_date": "2026-03-31", "end_date": "2026-03-01"},
        headers=auth(admin_token),
    )
    assert reversed_window.status_code == 422


def test_summarize_expenses_without_rows() -> None:
    summary = summarize_expenses([])
    assert summary.total == 0
    assert summary.count == 0
    assert summary.average == 0
    assert summary.by_category == []
    assert summary.by_user == []


def test_summarize_expenses_labels_missing_names() -> None:
    user_id = uuid4()
    rows = [
        ExpenseRow(
            expense=Expense(
                household_id=uuid4(),
                user_id=user_id,
                amount=12.0,
                date_incurred=date(2026, 3, 1),
            )
        )
    ]

    summary = summarize_expenses(rows)

    assert summary.by_category[0].name == "Uncategorized"
    assert summary.by_user[0].key == str(user_id)
    assert summary.by_user[0].name == "Former member"

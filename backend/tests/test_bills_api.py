from datetime import UTC, date, datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from housy.models.bill import BillStatus
from housy.models.user import User
from housy.services import bill_service, membership_service
from housy.services.access import load_actor


async def register_user(client: AsyncClient, email: str) -> str:
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": "testpass123", "full_name": email.split("@")[0]},
    )
    assert response.status_code == 201
    return response.json()["token"]["access_token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def admin_and_member(client: AsyncClient) -> tuple[str, str]:
    admin_token = await register_user(client, "admin@example.com")
    member_token = await register_user(client, "member@example.com")
    created = await client.post("/households", json={"name": "Casa"}, headers=auth(admin_token))
    await client.post(
        "/households/join",
        json={"invite_code": created.json()["household"]["invite_code"]},
        headers=auth(member_token),
    )
    return admin_token, member_token


@pytest.mark.asyncio
async def test_bill_crud_and_mark_paid(client: AsyncClient) -> None:
    admin_token, member_token = await admin_and_member(client)

    created = await client.post(
        "/bills",
        json={"name": "Electricity", "amount": 85.5, "due_day": 20, "category": "utilities"},
        headers=auth(admin_token),
    )
    assert created.status_code == 201
    bill = created.json()["bill"]
    assert bill["reminder_days_before"] == 3
    assert bill["category"] == "utilities"
    assert bill["source"] == "manual"
    assert bill["last_paid_date"] is None

    denied = await client.post(
        "/bills",
        json={"name": "Internet", "due_day": 5},
        headers=auth(member_token),
    )
    assert denied.status_code == 403

    paid = await client.post(f"/bills/{bill['id']}/paid", headers=auth(member_token))
    assert paid.status_code == 200
    assert paid.json()["bill"]["status"] == "paid"
    assert paid.json()["bill"]["last_paid_date"] == datetime.now(UTC).date().isoformat()

    updated = await client.patch(
        f"/bills/{bill['id']}",
        json={"due_day": 2, "reminder_days_before": 0},
        headers=auth(admin_token),
    )
    assert updated.status_code == 200
    assert updated.json()["bill"]["due_day"] == 2
    assert updated.json()["bill"]["reminder_days_before"] == 0

    listing = await client.get("/bills", headers=auth(member_token))
    assert [item["name"] for item in listing.json()["items"]] == ["Electricity"]

    deleted = await client.delete(f"/bills/{bill['id']}", headers=auth(admin_token))
    assert deleted.status_code == 200
    assert (await client.get("/bills", headers=auth(admin_token))).json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("due_day", [0, 32])
async def test_due_day_must_be_a_day_of_month(client: AsyncClient, due_day: int) -> None:
    admin_token, _ = await admin_and_member(client)

    response = await client.post(
        "/bills",
        json={"name": "Rent", "due_day": due_day},
        headers=auth(admin_token),
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_bill_due_today_is_upcoming(client: AsyncClient) -> None:
    admin_token, _ = await admin_and_member(client)
    today = datetime.now(UTC).date()
    await client.post(
        "/bills",
        json={"name": "Rent", "due_day": today.day, "amount": 900},
        headers=auth(admin_token),
    )

    upcoming = await client.get("/bills/upcoming", headers=auth(admin_token))
    assert upcoming.status_code == 200
    items = upcoming.json()["items"]
    assert [item["name"] for item in items] == ["Rent"]
    assert items[0]["status"] == "upcoming"


@pytest.mark.asyncio
async def test_upcoming_bills_with_fixed_today(session: AsyncSession) -> None:
    user = User(email="admin@example.com", hashed_password="not-a-real-hash")
    session.add(user)
    await session.commit()
    await membership_service.create_household(
        session,
        actor=await load_actor(session, user_id=user.id),
        name="Casa",
    )
    actor = await load_actor(session, user_id=user.id)

    for name, due_day in [("Water", 12), ("Internet", 9), ("Gas", 20), ("Phone", 3)]:
        await bill_service.create_bill(session, actor=actor, name=name, due_day=due_day)
    paid = await bill_service.create_bill(session, actor=actor, name="Rent", due_day=10)
    await bill_service.mark_bill_paid(session, actor=actor, bill_id=paid.id, paid_on=date(2026, 3, 1))

    flagged = await bill_service.list_upcoming_bills(session, actor=actor, today=date(2026, 3, 8))

    # Phone (due the 3rd) is overdue and stays out of the reminder list.
    assert [(bill.name, status) for bill, status in flagged] == [("Internet", BillStatus.UPCOMING)]


@pytest.mark.asyncio
async def test_zero_reminder_falls_back_to_default_window(session: AsyncSession) -> None:
    user = User(email="admin@example.com", hashed_password="not-a-real-hash")
    session.add(user)
    await session.commit()
    await membership_service.create_household(
        session,
        actor=await load_actor(session, user_id=user.id),
        name="Casa",
    )
    actor = await load_actor(session, user_id=user.id)

    bill = await bill_service.create_bill(
        session,
        actor=actor,
        name="Water",
        due_day=10,
        reminder_days_before=0,
    )
    assert bill.reminder_days_before == 3

    flagged = await bill_service.list_upcoming_bills(session, actor=actor, today=date(2026, 3, 8))
    assert [(item.name, status) for item, status in flagged] == [("Water", BillStatus.UPCOMING)]

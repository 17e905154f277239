import pytest
from httpx import AsyncClient


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


async def create_household(client: AsyncClient, token: str, name: str = "Casa") -> dict:
    response = await client.post("/households", json={"name": name}, headers=auth(token))
    assert response.status_code == 201
    return response.json()["household"]


async def me(client: AsyncClient, token: str) -> dict:
    response = await client.get("/auth/me", headers=auth(token))
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_create_join_and_overview(client: AsyncClient) -> None:
    admin_token = await register_user(client, "admin@example.com", "Anna Admin")
    member_token = await register_user(client, "member@example.com", "Marco Member")

    household = await create_household(client, admin_token, "Casa Bianchi")
    assert household["invite_code"]
    assert len(household["invite_code"]) == 6

    join_res = await client.post(
        "/households/join",
        json={"invite_code": household["invite_code"].lower()},
        headers=auth(member_token),
    )
    assert join_res.status_code == 200
    assert join_res.json()["success"] is True
    assert join_res.json()["error"] is None
    assert join_res.json()["household"]["id"] == household["id"]

    member_view = await client.get("/households/current", headers=auth(member_token))
    assert member_view.status_code == 200
    member_data = member_view.json()
    assert member_data["role"] == "member"
    assert member_data["household"]["invite_code"] is None
    assert [item["display_name"] for item in member_data["members"]] == ["Anna Admin", "Marco Member"]
    assert [item["role"] for item in member_data["members"]] == ["admin", "member"]

    admin_view = await client.get("/households/current", headers=auth(admin_token))
    assert admin_view.json()["household"]["invite_code"] == household["invite_code"]

    member_me = await me(client, member_token)
    assert member_me["household_id"] == household["id"]
    assert member_me["household_name"] == "Casa Bianchi"
    assert member_me["role"] == "member"


@pytest.mark.asyncio
async def test_unauthenticated_requests_use_error_envelope(client: AsyncClient) -> None:
    response = await client.post("/households/leave")
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "User is not authenticated.",
        "code": "unauthenticated",
    }

    bad_token = await client.get("/households/current", headers=auth("not-a-token"))
    assert bad_token.status_code == 401
    assert bad_token.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_join_with_invalid_code(client: AsyncClient) -> None:
    token = await register_user(client, "guest@example.com")
    response = await client.post(
        "/households/join",
        json={"invite_code": "XXXXXX"},
        headers=auth(token),
    )
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["code"] == "not_found"
    assert response.json()["error"] == "Invalid invite code."


@pytest.mark.asyncio
async def test_sole_admin_leave_rules(client: AsyncClient) -> None:
    admin_token = await register_user(client, "admin@example.com")
    member_token = await register_user(client, "member@example.com")
    household = await create_household(client, admin_token)
    await client.post(
        "/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )

    blocked = await client.post("/households/leave", headers=auth(admin_token))
    assert blocked.status_code == 409
    assert blocked.json()["code"] == "sole_admin"
    assert "only admin" in blocked.json()["error"]

    member_me = await me(client, member_token)
    promote = await client.post(
        f"/households/members/{member_me['id']}/promote",
        headers=auth(admin_token),
    )
    assert promote.status_code == 200
    assert promote.json()["success"] is True

    again = await client.post(
        f"/households/members/{member_me['id']}/promote",
        headers=auth(admin_token),
    )
    assert again.status_code == 409
    assert again.json()["code"] == "already_admin"

    left = await client.post("/households/leave", headers=auth(admin_token))
    assert left.status_code == 200
    assert (await me(client, admin_token))["household_id"] is None

    overview = await client.get("/households/current", headers=auth(member_token))
    assert [item["role"] for item in overview.json()["members"]] == ["admin"]


@pytest.mark.asyncio
async def test_only_member_can_leave_empty_household(client: AsyncClient) -> None:
    token = await register_user(client, "solo@example.com")
    await create_household(client, token)

    response = await client.post("/households/leave", headers=auth(token))
    assert response.status_code == 200

    overview = await client.get("/households/current", headers=auth(token))
    assert overview.status_code == 404
    assert overview.json()["code"] == "not_found"


@pytest.mark.asyncio
async def test_create_household_while_member_is_rejected(client: AsyncClient) -> None:
    token = await register_user(client, "admin@example.com")
    await create_household(client, token)

    response = await client.post("/households", json={"name": "Second"}, headers=auth(token))
    assert response.status_code == 409
    assert response.json()["code"] == "already_member"


@pytest.mark.asyncio
async def test_remove_member_and_permissions(client: AsyncClient) -> None:
    admin_token = await register_user(client, "admin@example.com")
    member_token = await register_user(client, "member@example.com")
    household = await create_household(client, admin_token)
    await client.post(
        "/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )
    admin_me = await me(client, admin_token)
    member_me = await me(client, member_token)

    forbidden = await client.delete(
        f"/households/members/{admin_me['id']}",
        headers=auth(member_token),
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "forbidden"

    self_remove = await client.delete(
        f"/households/members/{admin_me['id']}",
        headers=auth(admin_token),
    )
    assert self_remove.status_code == 422
    assert self_remove.json()["code"] == "validation_error"

    removed = await client.delete(
        f"/households/members/{member_me['id']}",
        headers=auth(admin_token),
    )
    assert removed.status_code == 200
    assert (await me(client, member_token))["household_id"] is None


@pytest.mark.asyncio
async def test_switch_household(client: AsyncClient) -> None:
    first_admin = await register_user(client, "first@example.com")
    second_admin = await register_user(client, "second@example.com")
    traveller = await register_user(client, "traveller@example.com")
    first = await create_household(client, first_admin, "First")
    second = await create_household(client, second_admin, "Second")
    await client.post(
        "/households/join",
        json={"invite_code": first["invite_code"]},
        headers=auth(traveller),
    )

    join_other = await client.post(
        "/households/join",
        json={"invite_code": second["invite_code"]},
        headers=auth(traveller),
    )
    assert join_other.status_code == 409
    assert join_other.json()["code"] == "already_member"

    bad_code = await client.post(
        "/households/switch",
        json={"invite_code": "000000"},
        headers=auth(traveller),
    )
    assert bad_code.status_code == 404
    assert (await me(client, traveller))["household_id"] == first["id"]

    switched = await client.post(
        "/households/switch",
        json={"invite_code": second["invite_code"]},
        headers=auth(traveller),
    )
    assert switched.status_code == 200
    assert switched.json()["household"]["id"] == second["id"]

    traveller_me = await me(client, traveller)
    assert traveller_me["household_id"] == second["id"]
    assert traveller_me["role"] == "member"


@pytest.mark.asyncio
async def test_invite_code_budget_and_rename(client: AsyncClient) -> None:
    admin_token = await register_user(client, "admin@example.com")
    member_token = await register_user(client, "member@example.com")
    household = await create_household(client, admin_token)
    await client.post(
        "/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(member_token),
    )

    denied = await client.post("/households/invite-code", headers=auth(member_token))
    assert denied.status_code == 403

    regenerated = await client.post("/households/invite-code", headers=auth(admin_token))
    assert regenerated.status_code == 200
    new_code = regenerated.json()["invite_code"]
    assert new_code != household["invite_code"]

    stale = await client.post(
        "/households/join",
        json={"invite_code": household["invite_code"]},
        headers=auth(await register_user(client, "late@example.com")),
    )
    assert stale.status_code == 404

    budget = await client.patch(
        "/households/current/budget",
        json={"monthly_budget": 1200.5},
        headers=auth(admin_token),
    )
    assert budget.status_code == 200
    assert budget.json()["household"]["monthly_budget"] == 1200.5

    negative = await client.patch(
        "/households/current/budget",
        json={"monthly_budget": -5},
        headers=auth(admin_token),
    )
    assert negative.status_code == 422

    renamed = await client.patch(
        "/households/current/name",
        json={"name": "Villa"},
        headers=auth(admin_token),
    )
    assert renamed.status_code == 200
    assert renamed.json()["household"]["name"] == "Villa"

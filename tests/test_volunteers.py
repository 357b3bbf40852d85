"""
Tests for volunteer roles and volunteers
"""

import pytest
import uuid

from sqlmodel import select

from churchflow.models import ActivityLog, Volunteer


async def _post(client, account, path, payload, expected=201):
    response = await client.post(path, json=payload, headers=account.headers)
    assert response.status_code == expected, response.text
    return response.json()


async def _actions(session_maker, entity_id):
    async with session_maker() as session:
        result = await session.exec(select(ActivityLog).where(ActivityLog.entity_id == uuid.UUID(entity_id)))
        return sorted(entry.action for entry in result.all())


# Roles

@pytest.mark.asyncio
async def test_role_lifecycle_is_audited(client, session_maker, owner):
    role = await _post(client, owner, "/api/v1/volunteers/roles", {
        "name": "Greeter",
        "ministry": "Hospitality",
        "required_training": ["Welcome basics"],
    })
    assert role["is_active"] is True
    assert role["required_training"] == ["Welcome basics"]

    response = await client.patch(
        f"/api/v1/volunteers/roles/{role['id']}",
        json={"requires_background_check": True},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert response.json()["requires_background_check"] is True

    response = await client.delete(f"/api/v1/volunteers/roles/{role['id']}", headers=owner.headers)
    assert response.json() == {"success": True}

    assert await _actions(session_maker, role["id"]) == ["CREATE", "DELETE", "UPDATE"]


@pytest.mark.asyncio
async def test_role_names_unique_per_church(client, owner, other_owner):
    await _post(client, owner, "/api/v1/volunteers/roles", {"name": "Sound Tech"})
    await _post(client, owner, "/api/v1/volunteers/roles", {"name": "sound tech"}, expected=409)

    usher = await _post(client, owner, "/api/v1/volunteers/roles", {"name": "Usher"})
    response = await client.patch(
        f"/api/v1/volunteers/roles/{usher['id']}",
        json={"name": "SOUND TECH"},
        headers=owner.headers,
    )
    assert response.status_code == 409

    # Another church has its own set of names
    await _post(client, other_owner, "/api/v1/volunteers/roles", {"name": "Sound Tech"})


@pytest.mark.asyncio
async def test_role_list_is_scoped_and_filtered(client, owner, other_owner):
    await _post(client, owner, "/api/v1/volunteers/roles", {"name": "Usher"})
    greeter = await _post(client, owner, "/api/v1/volunteers/roles", {"name": "Greeter"})
    await _post(client, other_owner, "/api/v1/volunteers/roles", {"name": "Nursery"})
    await client.patch(
        f"/api/v1/volunteers/roles/{greeter['id']}",
        json={"is_active": False},
        headers=owner.headers,
    )

    response = await client.get("/api/v1/volunteers/roles", headers=owner.headers)
    assert [role["name"] for role in response.json()] == ["Greeter", "Usher"]

    response = await client.get("/api/v1/volunteers/roles?active_only=true", headers=owner.headers)
    assert [role["name"] for role in response.json()] == ["Usher"]


# Volunteers

@pytest.mark.asyncio
async def test_volunteer_lifecycle_is_audited(client, session_maker, owner):
    member = await _post(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    volunteer = await _post(client, owner, "/api/v1/volunteers/", {
        "member_id": member["id"],
        "skills": ["music"],
        "availability": {"sunday": ["morning"]},
    })
    assert volunteer["skills"] == ["music"]
    assert volunteer["preferred_roles"] == []

    response = await client.patch(
        f"/api/v1/volunteers/{volunteer['id']}",
        json={"background_check": True, "background_check_date": "2026-09-01"},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert response.json()["background_check_date"] == "2026-09-01"

    response = await client.get(f"/api/v1/volunteers/{volunteer['id']}", headers=owner.headers)
    assert response.json()["background_check"] is True

    response = await client.delete(f"/api/v1/volunteers/{volunteer['id']}", headers=owner.headers)
    assert response.json() == {"success": True}

    # The member stays in the directory
    response = await client.get(f"/api/v1/members/{member['id']}", headers=owner.headers)
    assert response.status_code == 200

    assert await _actions(session_maker, volunteer["id"]) == ["CREATE", "DELETE", "UPDATE"]


@pytest.mark.asyncio
async def test_member_volunteers_once(client, owner):
    member = await _post(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    await _post(client, owner, "/api/v1/volunteers/", {"member_id": member["id"]})
    await _post(client, owner, "/api/v1/volunteers/", {"member_id": member["id"]}, expected=409)


@pytest.mark.asyncio
async def test_volunteer_needs_member_of_same_church(client, owner, other_owner):
    member = await _post(client, other_owner, "/api/v1/members/", {"first_name": "Ben", "last_name": "Smith"})

    response = await client.post("/api/v1/volunteers/", json={"member_id": member["id"]}, headers=owner.headers)
    assert response.status_code == 404

    response = await client.post("/api/v1/volunteers/", json={"member_id": str(uuid.uuid4())}, headers=owner.headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_volunteer_rows_of_other_church_are_not_found(client, owner, other_owner):
    member = await _post(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    volunteer = await _post(client, owner, "/api/v1/volunteers/", {"member_id": member["id"]})
    url = f"/api/v1/volunteers/{volunteer['id']}"

    assert (await client.get(url, headers=other_owner.headers)).status_code == 404
    response = await client.patch(url, json={"notes": "moved"}, headers=other_owner.headers)
    assert response.status_code == 404
    assert (await client.delete(url, headers=other_owner.headers)).status_code == 404

    response = await client.get("/api/v1/volunteers/", headers=other_owner.headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_volunteer_search_and_active_filter(client, owner):
    ana = await _post(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    ben = await _post(client, owner, "/api/v1/members/", {
        "first_name": "Ben", "last_name": "Smith", "email": "ben@example.com",
    })
    await _post(client, owner, "/api/v1/volunteers/", {"member_id": ana["id"]})
    ben_volunteer = await _post(client, owner, "/api/v1/volunteers/", {"member_id": ben["id"]})

    response = await client.get("/api/v1/volunteers/?search=LOP", headers=owner.headers)
    assert [v["member_id"] for v in response.json()] == [ana["id"]]

    response = await client.get("/api/v1/volunteers/?search=ben@", headers=owner.headers)
    assert [v["member_id"] for v in response.json()] == [ben["id"]]

    await client.patch(
        f"/api/v1/volunteers/{ben_volunteer['id']}",
        json={"is_active": False},
        headers=owner.headers,
    )
    response = await client.get("/api/v1/volunteers/?is_active=true", headers=owner.headers)
    assert [v["member_id"] for v in response.json()] == [ana["id"]]


@pytest.mark.asyncio
async def test_member_delete_removes_volunteer_profile(client, session_maker, owner):
    member = await _post(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    await _post(client, owner, "/api/v1/volunteers/", {"member_id": member["id"]})

    response = await client.delete(f"/api/v1/members/{member['id']}", headers=owner.headers)
    assert response.status_code == 200

    async with session_maker() as session:
        result = await session.exec(select(Volunteer).where(Volunteer.church_id == owner.church.id))
        assert result.all() == []

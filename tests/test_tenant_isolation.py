"""
Integration tests for church isolation

A user only ever sees their own church's rows. Rows of another church are
reported exactly like missing ones.
"""

import pytest
from uuid import UUID, uuid4

from sqlmodel import select

from churchflow.core.auth import create_access_token
from churchflow.core.errors import NoTenant, NotFound
from churchflow.core.scope import ChurchScope
from churchflow.core.tenancy import resolve_church
from churchflow.models import ChurchRole, Group, Member, PushSubscription, User


async def _create(client, account, path, payload):
    response = await client.post(path, json=payload, headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("path,payload", [
    ("/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"}),
    ("/api/v1/groups/", {"name": "Youth"}),
    ("/api/v1/events/", {"title": "Sunday Service", "start_date": "2030-01-06T10:00:00"}),
    ("/api/v1/prayer-requests/", {"title": "Healing", "description": "Please pray"}),
    ("/api/v1/donations/", {"amount": "25.00"}),
    ("/api/v1/communications/", {"subject": "Welcome", "content": "Glad you came"}),
])
async def test_other_church_rows_are_not_found(client, owner, other_owner, path, payload):
    entity = await _create(client, owner, path, payload)
    url = f"{path}{entity['id']}"

    # Owner sees it
    response = await client.get(url, headers=owner.headers)
    assert response.status_code == 200

    # Another church gets the same answer as for a missing id
    response = await client.get(url, headers=other_owner.headers)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"

    missing = await client.get(f"{path}{uuid4()}", headers=other_owner.headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == response.json()["detail"]

    # Nor can it be changed or deleted
    response = await client.delete(url, headers=other_owner.headers)
    assert response.status_code == 404
    response = await client.get(url, headers=owner.headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_lists_only_contain_own_church(client, owner, other_owner):
    await _create(client, owner, "/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"})
    await _create(client, other_owner, "/api/v1/members/", {"first_name": "Ben", "last_name": "Smith"})

    response = await client.get("/api/v1/members/", headers=owner.headers)
    assert [m["first_name"] for m in response.json()] == ["Ana"]

    response = await client.get("/api/v1/members/", headers=other_owner.headers)
    assert [m["first_name"] for m in response.json()] == ["Ben"]


@pytest.mark.asyncio
async def test_cannot_reference_other_church_member(client, owner, other_owner):
    member = await _create(client, other_owner, "/api/v1/members/", {"first_name": "Ben", "last_name": "Smith"})
    group = await _create(client, owner, "/api/v1/groups/", {"name": "Choir"})

    response = await client.post(
        f"/api/v1/groups/{group['id']}/members",
        json={"member_id": member["id"]},
        headers=owner.headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_without_church_gets_no_tenant(client, db):
    user = User(email="new@example.com", password_hash="x", name="New")
    db.add(user)
    await db.commit()

    response = await client.get(
        "/api/v1/members/",
        headers={"Authorization": f"Bearer {create_access_token(user.id)}"},
    )
    assert response.status_code == 404
    assert response.json()["code"] == "no_tenant"


@pytest.mark.asyncio
async def test_church_header_must_match_membership(client, owner, other_owner):
    headers = {**owner.headers, "X-Church-ID": str(other_owner.church.id)}
    response = await client.get("/api/v1/members/", headers=headers)
    assert response.status_code == 404
    assert response.json()["code"] == "no_tenant"

    headers = {**owner.headers, "X-Church-ID": str(owner.church.id)}
    response = await client.get("/api/v1/members/", headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_resolve_church(db, owner, make_account):
    volunteer = await make_account(church=owner.church, role=ChurchRole.VOLUNTEER)

    context = await resolve_church(db, volunteer.user.id)
    assert context.church_id == owner.church.id
    assert context.role == ChurchRole.VOLUNTEER

    with pytest.raises(NoTenant):
        await resolve_church(db, uuid4())


@pytest.mark.asyncio
async def test_scope_rejects_foreign_church_stamp(db, owner, other_owner):
    scope = ChurchScope(db, owner.context)

    member = scope.add(Member(first_name="Ana", last_name="Lopez"))
    assert member.church_id == owner.church.id

    with pytest.raises(NotFound):
        scope.add(Member(church_id=other_owner.church.id, first_name="Ben", last_name="Smith"))


@pytest.mark.asyncio
async def test_scope_update_never_moves_rows(db, owner, other_owner):
    scope = ChurchScope(db, owner.context)
    async with scope.atomic():
        group = scope.add(Group(name="Choir"))

    async with scope.atomic():
        updated = await scope.update(Group, group.id, {"church_id": other_owner.church.id, "name": "Choir II"})

    assert updated.church_id == owner.church.id
    assert updated.name == "Choir II"
    assert await ChurchScope(db, other_owner.context).count(Group) == 0


@pytest.mark.asyncio
async def test_shared_push_endpoint_stays_in_each_church(client, session_maker, owner, other_owner):
    subscription = {"endpoint": "https://push.example.com/send/shared", "keys": {"p256dh": "k", "auth": "a"}}

    mine = await _create(client, owner, "/api/v1/push/subscribe", subscription)
    theirs = await _create(client, other_owner, "/api/v1/push/subscribe", subscription)
    assert mine["id"] != theirs["id"]

    async with session_maker() as session:
        rows = (await session.exec(
            select(PushSubscription).where(PushSubscription.endpoint == subscription["endpoint"])
        )).all()
    churches = {row.id: row.church_id for row in rows}
    assert churches == {UUID(mine["id"]): owner.church.id, UUID(theirs["id"]): other_owner.church.id}

    # Each church's broadcast reaches only its own subscription
    for account in (owner, other_owner):
        response = await client.post(
            "/api/v1/push/send",
            json={"title": "Hello", "message": "Welcome"},
            headers=account.headers,
        )
        assert response.json() == {"recipients": 1, "delivered": 1}

    # Unsubscribing in one church leaves the other's row
    response = await client.delete(
        "/api/v1/push/subscribe",
        params={"endpoint": subscription["endpoint"]},
        headers=other_owner.headers,
    )
    assert response.status_code == 200

    async with session_maker() as session:
        remaining = (await session.exec(
            select(PushSubscription).where(PushSubscription.endpoint == subscription["endpoint"])
        )).all()
    assert [row.church_id for row in remaining] == [owner.church.id]

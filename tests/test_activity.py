"""
Tests for the activity log (audit trail)
"""

import pytest
import uuid

from sqlalchemy.exc import OperationalError
from sqlmodel import select

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.models import ActivityLog


async def _entries(session_maker, entity_id):
    # A fresh session per look, so no read transaction stays open between requests
    async with session_maker() as session:
        result = await session.exec(select(ActivityLog).where(ActivityLog.entity_id == uuid.UUID(entity_id)))
        return result.all()


@pytest.mark.asyncio
@pytest.mark.parametrize("path,payload,update", [
    ("/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez"}, {"phone": "555-0100"}),
    ("/api/v1/groups/", {"name": "Youth"}, {"capacity": 12}),
    ("/api/v1/events/", {"title": "Service", "start_date": "2030-01-06T10:00:00"}, {"location": "Main hall"}),
    ("/api/v1/prayer-requests/", {"title": "Healing", "description": "Please pray"}, {"is_public": True}),
    ("/api/v1/communications/", {"subject": "Welcome", "content": "Glad you came"}, {"subject": "Welcome back"}),
])
async def test_each_mutation_writes_one_entry(client, session_maker, owner, path, payload, update):
    response = await client.post(path, json=payload, headers=owner.headers)
    assert response.status_code == 201
    entity_id = response.json()["id"]

    entries = await _entries(session_maker, entity_id)
    assert [entry.action for entry in entries] == ["CREATE"]
    assert entries[0].church_id == owner.church.id
    assert entries[0].user_id == owner.user.id

    response = await client.patch(f"{path}{entity_id}", json=update, headers=owner.headers)
    assert response.status_code == 200

    response = await client.delete(f"{path}{entity_id}", headers=owner.headers)
    assert response.status_code == 200

    entries = await _entries(session_maker, entity_id)
    assert sorted(entry.action for entry in entries) == ["CREATE", "DELETE", "UPDATE"]
    assert {entry.church_id for entry in entries} == {owner.church.id}
    assert {entry.user_id for entry in entries} == {owner.user.id}


@pytest.mark.asyncio
async def test_failed_mutation_writes_no_entry(client, db, owner):
    response = await client.delete(f"/api/v1/members/{uuid.uuid4()}", headers=owner.headers)
    assert response.status_code == 404

    entries = (await db.exec(select(ActivityLog).where(ActivityLog.action == "DELETE"))).all()
    assert entries == []


@pytest.mark.asyncio
async def test_registration_records_church_created(client, session_maker):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Pat",
        "email": "pat@example.com",
        "password": "password123",
        "church_name": "Grace",
    })
    data = response.json()

    entries = await _entries(session_maker, data["church_id"])
    assert [entry.action for entry in entries] == ["CHURCH_CREATED"]
    assert str(entries[0].user_id) == data["user_id"]


@pytest.mark.asyncio
async def test_activity_list_is_scoped(client, owner, other_owner):
    await client.post("/api/v1/members/", json={"first_name": "Ana", "last_name": "Lopez"}, headers=owner.headers)

    response = await client.get("/api/v1/activity/", headers=owner.headers)
    assert response.status_code == 200
    assert [entry["entity_type"] for entry in response.json()] == ["Member"]

    response = await client.get("/api/v1/activity/", headers=other_owner.headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_audit_failure_is_swallowed(db, owner, monkeypatch):
    recorder = ActivityRecorder(db)

    async def failing_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)

    # Logged, not raised
    await recorder.record(owner.context, ActivityAction.UPDATE, "Member", uuid.uuid4())

    monkeypatch.undo()
    entries = (await db.exec(select(ActivityLog))).all()
    assert entries == []

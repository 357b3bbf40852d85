"""
Tests for communication records
"""

import pytest


async def _post(client, account, path, payload, expected=201):
    response = await client.post(path, json=payload, headers=account.headers)
    assert response.status_code == expected, response.text
    return response.json()


async def _members(client, account, *names):
    return [
        await _post(client, account, "/api/v1/members/", {"first_name": name, "last_name": "Test"})
        for name in names
    ]


@pytest.mark.asyncio
async def test_counts_every_member_by_default(client, owner, other_owner):
    await _members(client, owner, "Ana", "Ben", "Cy")
    await _members(client, other_owner, "Dee")

    message = await _post(client, owner, "/api/v1/communications/", {
        "subject": "Welcome",
        "content": "See you Sunday",
    })
    assert message["recipient_count"] == 3
    assert message["recipient_type"] == "ALL"
    assert message["status"] == "DRAFT"
    assert message["sent_at"] is None
    assert message["created_by_id"] == str(owner.user.id)


@pytest.mark.asyncio
async def test_group_audience(client, owner, other_owner):
    ana, ben, _ = await _members(client, owner, "Ana", "Ben", "Cy")
    group = await _post(client, owner, "/api/v1/groups/", {"name": "Choir"})
    for member in (ana, ben):
        await _post(client, owner, f"/api/v1/groups/{group['id']}/members", {"member_id": member["id"]})

    message = await _post(client, owner, "/api/v1/communications/", {
        "subject": "Rehearsal",
        "content": "Thursday 7pm",
        "recipient_type": "GROUP",
        "group_id": group["id"],
    })
    assert message["recipient_count"] == 2
    assert message["group_id"] == group["id"]

    # A group audience needs a group of this church
    response = await client.post(
        "/api/v1/communications/",
        json={"subject": "Rehearsal", "content": "x", "recipient_type": "GROUP"},
        headers=owner.headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"

    response = await client.post(
        "/api/v1/communications/",
        json={"subject": "Rehearsal", "content": "x", "recipient_type": "GROUP", "group_id": group["id"]},
        headers=other_owner.headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_volunteer_audience_counts_active_volunteers(client, owner):
    ana, ben, _ = await _members(client, owner, "Ana", "Ben", "Cy")
    await _post(client, owner, "/api/v1/volunteers/", {"member_id": ana["id"]})
    retired = await _post(client, owner, "/api/v1/volunteers/", {"member_id": ben["id"]})
    await client.patch(f"/api/v1/volunteers/{retired['id']}", json={"is_active": False}, headers=owner.headers)

    message = await _post(client, owner, "/api/v1/communications/", {
        "channel": "SMS",
        "subject": "Serving this week",
        "content": "Thanks for helping",
        "recipient_type": "VOLUNTEERS",
    })
    assert message["recipient_count"] == 1
    assert message["channel"] == "SMS"


@pytest.mark.asyncio
async def test_sent_communications_are_final(client, owner):
    message = await _post(client, owner, "/api/v1/communications/", {
        "subject": "Welcome",
        "content": "Glad you came",
        "status": "SENDING",
    })
    assert message["status"] == "SENT"
    assert message["sent_at"] is not None
    url = f"/api/v1/communications/{message['id']}"

    response = await client.patch(url, json={"subject": "Edited"}, headers=owner.headers)
    assert response.status_code == 422
    response = await client.delete(url, headers=owner.headers)
    assert response.status_code == 422

    response = await client.get(url, headers=owner.headers)
    assert response.json()["subject"] == "Welcome"


@pytest.mark.asyncio
async def test_sending_a_draft_stamps_sent_at(client, owner):
    draft = await _post(client, owner, "/api/v1/communications/", {"subject": "News", "content": "Update"})

    response = await client.patch(
        f"/api/v1/communications/{draft['id']}",
        json={"status": "SENDING"},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "SENT"
    assert response.json()["sent_at"] is not None


@pytest.mark.asyncio
async def test_list_filters_by_status_and_channel(client, owner, other_owner):
    await _post(client, owner, "/api/v1/communications/", {"subject": "Draft", "content": "x"})
    await _post(client, owner, "/api/v1/communications/", {
        "subject": "Sent", "content": "x", "channel": "PUSH", "status": "SENT",
    })
    await _post(client, other_owner, "/api/v1/communications/", {"subject": "Elsewhere", "content": "x"})

    response = await client.get("/api/v1/communications/", headers=owner.headers)
    assert sorted(m["subject"] for m in response.json()) == ["Draft", "Sent"]

    response = await client.get("/api/v1/communications/?status=SENT", headers=owner.headers)
    assert [m["subject"] for m in response.json()] == ["Sent"]

    response = await client.get("/api/v1/communications/?channel=EMAIL", headers=owner.headers)
    assert [m["subject"] for m in response.json()] == ["Draft"]


@pytest.mark.asyncio
async def test_group_delete_keeps_its_communications(client, owner):
    group = await _post(client, owner, "/api/v1/groups/", {"name": "Choir"})
    message = await _post(client, owner, "/api/v1/communications/", {
        "subject": "Rehearsal", "content": "x", "recipient_type": "GROUP", "group_id": group["id"],
    })

    response = await client.delete(f"/api/v1/groups/{group['id']}", headers=owner.headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/communications/{message['id']}", headers=owner.headers)
    assert response.status_code == 200
    assert response.json()["group_id"] is None

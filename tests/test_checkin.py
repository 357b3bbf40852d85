"""
Tests for event check-in and child pickup codes
"""

import pytest

from sqlmodel import select

from churchflow.core.identifiers import CODE_ALPHABET
from churchflow.models import Attendance


async def _member(client, account, first_name="Ana"):
    response = await client.post(
        "/api/v1/members/",
        json={"first_name": first_name, "last_name": "Lopez"},
        headers=account.headers,
    )
    assert response.status_code == 201
    return response.json()


async def _event(client, account, title="Sunday Service", enable_check_in=True):
    response = await client.post(
        "/api/v1/events/",
        json={"title": title, "start_date": "2030-01-06T10:00:00", "enable_check_in": enable_check_in},
        headers=account.headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_event_with_check_in_gets_code(client, owner):
    event = await _event(client, owner)
    assert len(event["check_in_code"]) == 6
    assert set(event["check_in_code"]) <= set(CODE_ALPHABET)

    plain = await _event(client, owner, title="Board meeting", enable_check_in=False)
    assert plain["check_in_code"] is None

    # Turning check-in on later allocates one
    response = await client.patch(
        f"/api/v1/events/{plain['id']}",
        json={"enable_check_in": True},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert len(response.json()["check_in_code"]) == 6


@pytest.mark.asyncio
async def test_second_check_in_same_event_same_day_conflicts(client, db, owner):
    member = await _member(client, owner)
    service = await _event(client, owner)
    youth = await _event(client, owner, title="Youth Night")

    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_id": service["id"]},
        headers=owner.headers,
    )
    assert response.status_code == 201

    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_id": service["id"]},
        headers=owner.headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"

    # A different event the same day is fine
    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_id": youth["id"]},
        headers=owner.headers,
    )
    assert response.status_code == 201

    attendance = (await db.exec(select(Attendance))).all()
    assert len(attendance) == 2


@pytest.mark.asyncio
async def test_check_in_by_event_code(client, owner):
    member = await _member(client, owner)
    event = await _event(client, owner)

    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_code": event["check_in_code"].lower()},
        headers=owner.headers,
    )
    assert response.status_code == 201
    assert response.json()["event_id"] == event["id"]


@pytest.mark.asyncio
async def test_check_in_requires_enabled_event(client, owner):
    member = await _member(client, owner)
    event = await _event(client, owner, enable_check_in=False)

    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_id": event["id"]},
        headers=owner.headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"


@pytest.mark.asyncio
async def test_child_check_in_and_pickup(client, owner):
    children = [await _member(client, owner, name) for name in ("Mia", "Leo", "Zoe")]
    event = await _event(client, owner)

    codes = []
    check_ins = []
    for child in children:
        response = await client.post(
            "/api/v1/checkin/",
            json={
                "member_id": child["id"],
                "event_id": event["id"],
                "is_child_check_in": True,
                "parent_name": "Parent",
            },
            headers=owner.headers,
        )
        assert response.status_code == 201
        check_ins.append(response.json())
        codes.append(response.json()["security_code"])

    assert len(set(codes)) == 3
    assert all(len(code) == 6 for code in codes)

    check_in = check_ins[0]
    response = await client.patch(
        f"/api/v1/checkin/{check_in['id']}/checkout",
        json={"security_code": "WRONG1"},
        headers=owner.headers,
    )
    assert response.status_code == 422

    response = await client.patch(
        f"/api/v1/checkin/{check_in['id']}/checkout",
        json={"security_code": check_in["security_code"]},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert response.json()["check_out_time"] is not None
    assert response.json()["checked_out_by_id"] == str(owner.user.id)

    response = await client.patch(
        f"/api/v1/checkin/{check_in['id']}/checkout",
        json={"security_code": check_in["security_code"]},
        headers=owner.headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_checkin_qr_is_png(client, owner):
    event = await _event(client, owner)

    response = await client.get(f"/api/v1/events/{event['id']}/checkin-qr", headers=owner.headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


@pytest.mark.asyncio
async def test_update_check_in_notes(client, owner):
    member = await _member(client, owner)
    event = await _event(client, owner)
    response = await client.post(
        "/api/v1/checkin/",
        json={"member_id": member["id"], "event_id": event["id"]},
        headers=owner.headers,
    )
    check_in = response.json()

    response = await client.patch(
        f"/api/v1/checkin/{check_in['id']}",
        json={"notes": "Allergic to peanuts"},
        headers=owner.headers,
    )
    assert response.status_code == 200
    assert response.json()["notes"] == "Allergic to peanuts"
    assert response.json()["check_out_time"] is None

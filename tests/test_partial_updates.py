"""
Tests for PATCH bodies that null out required fields
"""

import pytest


async def _create(client, account, path, payload):
    response = await client.post(path, json=payload, headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("path,payload,field", [
    ("/api/v1/members/", {"first_name": "Ana", "last_name": "Lopez", "email": "ana@example.com"}, "first_name"),
    ("/api/v1/events/", {"title": "Service", "start_date": "2030-01-06T10:00:00"}, "start_date"),
    ("/api/v1/events/", {"title": "Service", "start_date": "2030-01-06T10:00:00"}, "title"),
    ("/api/v1/groups/", {"name": "Youth"}, "name"),
    ("/api/v1/pages/", {"title": "About"}, "title"),
    ("/api/v1/prayer-requests/", {"title": "Healing", "description": "Please pray"}, "status"),
    ("/api/v1/donations/", {"amount": "10.00"}, "payment_status"),
])
async def test_null_for_required_field_is_rejected(client, owner, path, payload, field):
    entity = await _create(client, owner, path, payload)

    response = await client.patch(f"{path}{entity['id']}", json={field: None}, headers=owner.headers)

    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"
    assert field in response.json()["detail"]

    # Nothing changed
    response = await client.get(f"{path}{entity['id']}", headers=owner.headers)
    assert response.json()[field] == entity[field]


@pytest.mark.asyncio
async def test_null_church_name_is_rejected(client, owner):
    response = await client.patch("/api/v1/church/", json={"name": None}, headers=owner.headers)

    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"

    response = await client.get("/api/v1/church/", headers=owner.headers)
    assert response.json()["name"] == owner.church.name


@pytest.mark.asyncio
async def test_null_for_optional_field_clears_it(client, owner):
    member = await _create(client, owner, "/api/v1/members/", {
        "first_name": "Ana",
        "last_name": "Lopez",
        "phone": "555-0100",
    })

    response = await client.patch(f"/api/v1/members/{member['id']}", json={"phone": None}, headers=owner.headers)

    assert response.status_code == 200
    assert response.json()["phone"] is None

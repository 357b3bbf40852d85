"""
Tests for cascading deletes through ChurchScope
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from churchflow.core.scope import ChurchScope
from churchflow.models import Attendance, Donation, DonationFund, Event, Group, GroupMember, Member


async def _count(session, model, *criteria) -> int:
    result = await session.exec(select(func.count()).select_from(model).where(*criteria))
    return result.one()


async def _group_with_members(scope: ChurchScope, size: int) -> Group:
    async with scope.atomic():
        group = scope.add(Group(name="Young Adults"))
        for i in range(size):
            member = scope.add(Member(first_name=f"Member{i}", last_name="Test"))
            scope.add(GroupMember(group_id=group.id, member_id=member.id))
    return group


@pytest.mark.asyncio
async def test_group_delete_removes_memberships(db, owner):
    scope = ChurchScope(db, owner.context)
    group = await _group_with_members(scope, 4)
    assert await _count(db, GroupMember, GroupMember.group_id == group.id) == 4

    async with scope.atomic():
        await scope.delete(Group, group.id)

    assert await _count(db, Group, Group.id == group.id) == 0
    assert await _count(db, GroupMember, GroupMember.group_id == group.id) == 0
    # The people stay in the directory
    assert await scope.count(Member) == 4


@pytest.mark.asyncio
async def test_interrupted_group_delete_changes_nothing(db, owner, monkeypatch):
    scope = ChurchScope(db, owner.context)
    group = await _group_with_members(scope, 3)

    async def failing_delete(entity):
        raise RuntimeError("connection lost")

    # The dependents are already gone when the parent delete fails
    monkeypatch.setattr(db, "delete", failing_delete)

    with pytest.raises(RuntimeError):
        async with scope.atomic():
            await scope.delete(Group, group.id)

    monkeypatch.undo()
    assert await _count(db, Group, Group.id == group.id) == 1
    assert await _count(db, GroupMember, GroupMember.group_id == group.id) == 3


@pytest.mark.asyncio
async def test_interrupted_delete_through_api_rolls_back(client, owner, monkeypatch):
    response = await client.post("/api/v1/groups/", json={"name": "Choir"}, headers=owner.headers)
    group_id = response.json()["id"]
    member = (await client.post(
        "/api/v1/members/",
        json={"first_name": "Ana", "last_name": "Lopez"},
        headers=owner.headers,
    )).json()
    await client.post(f"/api/v1/groups/{group_id}/members", json={"member_id": member["id"]}, headers=owner.headers)

    async def failing_flush(self, *args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(AsyncSession, "flush", failing_flush)

    with pytest.raises(RuntimeError):
        await client.delete(f"/api/v1/groups/{group_id}", headers=owner.headers)

    monkeypatch.undo()
    response = await client.get(f"/api/v1/groups/{group_id}/members", headers=owner.headers)
    assert response.status_code == 200
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_member_delete_cascades_and_detaches(db, owner):
    scope = ChurchScope(db, owner.context)
    fund = await scope.find(DonationFund, DonationFund.is_default == True)  # noqa: E712

    async with scope.atomic():
        member = scope.add(Member(first_name="Ana", last_name="Lopez"))
        group = scope.add(Group(name="Choir", leader_id=member.id))
        event = scope.add(Event(title="Service", start_date=datetime(2030, 1, 6, 10, 0)))
        scope.add(GroupMember(group_id=group.id, member_id=member.id))
        scope.add(Attendance(member_id=member.id, event_id=event.id, attendance_date=date(2030, 1, 6)))
        donation = scope.add(Donation(fund_id=fund.id, member_id=member.id, amount=Decimal("10.00")))

    async with scope.atomic():
        await scope.delete(Member, member.id)

    assert await scope.count(Member) == 0
    assert await scope.count(GroupMember) == 0
    assert await scope.count(Attendance) == 0

    # Giving history and groups survive without the person
    await db.refresh(group)
    await db.refresh(donation)
    assert group.leader_id is None
    assert donation.member_id is None

"""
Communications API endpoints

Messages are recorded with their audience size; sending them through a mail,
SMS or push provider happens outside ChurchFlow.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Field, SQLModel
from typing import List, Optional
from datetime import datetime
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import ValidationFailed
from churchflow.core.scope import ChurchScope
from churchflow.models import (
    Communication,
    CommunicationChannel,
    CommunicationStatus,
    Group,
    GroupMember,
    Member,
    RecipientType,
    Volunteer,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


class CommunicationCreate(SQLModel):
    """Schema for recording a communication"""
    channel: CommunicationChannel = CommunicationChannel.EMAIL
    subject: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    recipient_type: RecipientType = RecipientType.ALL
    group_id: Optional[uuid.UUID] = None
    status: CommunicationStatus = CommunicationStatus.DRAFT
    scheduled_at: Optional[datetime] = None


class CommunicationUpdate(SQLModel):
    """Schema for editing an unsent communication"""
    channel: Optional[CommunicationChannel] = None
    subject: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    status: Optional[CommunicationStatus] = None
    scheduled_at: Optional[datetime] = None


async def count_recipients(
    scope: ChurchScope,
    recipient_type: RecipientType,
    group_id: Optional[uuid.UUID] = None,
) -> int:
    """Size of the audience a communication targets.

    Raises:
        ValidationFailed: a group audience without a group
        NotFound: the group is not in this church
    """
    if recipient_type == RecipientType.GROUP:
        if group_id is None:
            raise ValidationFailed("group_id is required for group communications")
        group = await scope.get(Group, group_id, "Group")
        return await scope.count(GroupMember, GroupMember.group_id == group.id)
    if recipient_type == RecipientType.VOLUNTEERS:
        return await scope.count(Volunteer, Volunteer.is_active == True)  # noqa: E712
    return await scope.count(Member)


def _apply_status(communication: Communication) -> None:
    # Delivery is external, so a send request is recorded as sent
    if communication.status in (CommunicationStatus.SENDING, CommunicationStatus.SENT):
        communication.status = CommunicationStatus.SENT
        communication.sent_at = communication.sent_at or utcnow()


@router.get("/", response_model=List[Communication])
async def list_communications(
    status_filter: Optional[CommunicationStatus] = Query(None, alias="status"),
    channel: Optional[CommunicationChannel] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List communications, newest first"""
    criteria = []
    if status_filter:
        criteria.append(Communication.status == status_filter)
    if channel:
        criteria.append(Communication.channel == channel)

    return await scope.list(
        Communication,
        *criteria,
        order_by=(Communication.created_at.desc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Communication, status_code=status.HTTP_201_CREATED)
async def create_communication(
    communication_data: CommunicationCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Record a communication and count its recipients"""
    if communication_data.recipient_type != RecipientType.GROUP:
        communication_data.group_id = None
    recipient_count = await count_recipients(
        scope, communication_data.recipient_type, communication_data.group_id
    )

    communication = Communication(
        **communication_data.model_dump(),
        recipient_count=recipient_count,
        created_by_id=scope.context.user_id,
    )
    _apply_status(communication)

    async with scope.atomic():
        scope.add(communication)

    logger.info(
        f"Communication created: {communication.id}",
        channel=communication.channel.value,
        recipients=recipient_count,
    )
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Communication",
        communication.id,
        {
            "subject": communication.subject,
            "channel": communication.channel.value,
            "status": communication.status.value,
            "recipient_count": recipient_count,
        },
    )
    return communication


@router.get("/{communication_id}", response_model=Communication)
async def get_communication(
    communication_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a communication"""
    return await scope.get(Communication, communication_id, "Communication")


@router.patch("/{communication_id}", response_model=Communication)
async def update_communication(
    communication_id: uuid.UUID,
    communication_update: CommunicationUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Edit a communication that has not been sent"""
    existing = await scope.get(Communication, communication_id, "Communication")
    if existing.status == CommunicationStatus.SENT:
        raise ValidationFailed("Sent communications cannot be edited")

    changes = communication_update.model_dump(exclude_unset=True)

    async with scope.atomic():
        communication = await scope.update(Communication, communication_id, changes, "Communication")
        _apply_status(communication)

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Communication",
        communication.id,
        {"updated_fields": sorted(changes)},
    )
    return communication


@router.delete("/{communication_id}")
async def delete_communication(
    communication_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a communication that has not been sent"""
    existing = await scope.get(Communication, communication_id, "Communication")
    if existing.status == CommunicationStatus.SENT:
        raise ValidationFailed("Sent communications cannot be deleted")

    async with scope.atomic():
        communication = await scope.delete(Communication, communication_id, "Communication")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Communication",
        communication_id,
        {"subject": communication.subject},
    )
    return {"success": True}

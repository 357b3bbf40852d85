"""
Communication model - messages composed for the congregation
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class CommunicationChannel(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"


class CommunicationStatus(str, Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class RecipientType(str, Enum):
    ALL = "ALL"
    VOLUNTEERS = "VOLUNTEERS"
    GROUP = "GROUP"


class Communication(SQLModel, table=True):
    """A message record; delivery happens outside ChurchFlow"""

    __tablename__ = "communications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    group_id: Optional[uuid.UUID] = Field(default=None, foreign_key="groups.id", nullable=True)
    created_by_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", nullable=True)

    channel: CommunicationChannel = Field(default=CommunicationChannel.EMAIL, index=True)
    subject: str = Field(nullable=False, max_length=255)
    content: str = Field(nullable=False)
    recipient_type: RecipientType = Field(default=RecipientType.ALL)
    recipient_count: int = Field(default=0)
    status: CommunicationStatus = Field(default=CommunicationStatus.DRAFT, index=True)

    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

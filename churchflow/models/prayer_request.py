"""
PrayerRequest model
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class PrayerRequestStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ANSWERED = "ANSWERED"
    ARCHIVED = "ARCHIVED"


class PrayerRequest(SQLModel, table=True):
    """Prayer request with church isolation"""

    __tablename__ = "prayer_requests"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    member_id: Optional[uuid.UUID] = Field(default=None, foreign_key="members.id", nullable=True)

    title: str = Field(nullable=False, max_length=255)
    description: str = Field(nullable=False)
    requester_name: Optional[str] = Field(default=None, max_length=200)
    is_anonymous: bool = Field(default=False)
    is_public: bool = Field(default=False)

    status: PrayerRequestStatus = Field(default=PrayerRequestStatus.ACTIVE, index=True)
    prayer_count: int = Field(default=0)
    answered_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

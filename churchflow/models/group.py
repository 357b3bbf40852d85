"""
Group model - small groups, ministries and classes
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class GroupCategory(str, Enum):
    SMALL_GROUP = "SMALL_GROUP"
    MINISTRY = "MINISTRY"
    CLASS = "CLASS"
    TEAM = "TEAM"
    OTHER = "OTHER"


class Group(SQLModel, table=True):
    """Group model with church isolation"""

    __tablename__ = "groups"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    leader_id: Optional[uuid.UUID] = Field(default=None, foreign_key="members.id", nullable=True)

    name: str = Field(nullable=False, max_length=255)
    description: Optional[str] = None
    category: GroupCategory = Field(default=GroupCategory.SMALL_GROUP)

    location: Optional[str] = Field(default=None, max_length=255)
    meeting_day: Optional[str] = Field(default=None, max_length=20)
    meeting_time: Optional[str] = Field(default=None, max_length=20)
    capacity: Optional[int] = None
    is_public: bool = Field(default=True)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

"""
Member model - people in the church directory
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class MembershipStatus(str, Enum):
    VISITOR = "VISITOR"
    REGULAR = "REGULAR"
    MEMBER = "MEMBER"
    INACTIVE = "INACTIVE"


class Member(SQLModel, table=True):
    """Directory entry with church isolation"""

    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("church_id", "email", name="uq_members_church_email"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")

    first_name: str = Field(nullable=False, max_length=100)
    last_name: str = Field(nullable=False, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    date_of_birth: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=500)
    photo: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = None

    membership_status: MembershipStatus = Field(default=MembershipStatus.VISITOR, index=True)
    joined_at: Optional[date] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

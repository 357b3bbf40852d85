"""
GroupMember model
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class GroupMember(SQLModel, table=True):
    """A member's place in a group"""

    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "member_id", name="uq_group_members_group_member"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    group_id: uuid.UUID = Field(foreign_key="groups.id", index=True)
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True)

    role: str = Field(default="MEMBER", max_length=50)
    joined_at: datetime = Field(default_factory=utcnow)

"""
ChurchUser model - binds a user to a church with a role
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class ChurchRole(str, Enum):
    """Roles within a church, most privileged first"""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    PASTOR = "PASTOR"
    STAFF = "STAFF"
    VOLUNTEER = "VOLUNTEER"
    MEMBER = "MEMBER"

    @property
    def rank(self) -> int:
        """Position in the hierarchy; 0 is the most privileged"""
        return list(ChurchRole).index(self)


class ChurchUser(SQLModel, table=True):
    """Membership of a user in a church.

    A user belongs to at most one church; ``user_id`` is unique.
    """

    __tablename__ = "church_users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    user_id: uuid.UUID = Field(foreign_key="users.id", unique=True, index=True)

    role: ChurchRole = Field(default=ChurchRole.MEMBER, nullable=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

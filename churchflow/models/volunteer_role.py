"""
VolunteerRole model - serving positions a church staffs
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, UniqueConstraint
from datetime import datetime
from typing import List, Optional
import uuid

from churchflow.core.clock import utcnow


class VolunteerRole(SQLModel, table=True):
    """A position such as greeter or sound tech, named once per church"""

    __tablename__ = "volunteer_roles"
    __table_args__ = (
        UniqueConstraint("church_id", "name", name="uq_volunteer_roles_church_name"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")

    name: str = Field(nullable=False, max_length=255)
    description: Optional[str] = None
    ministry: Optional[str] = Field(default=None, max_length=255)
    requires_background_check: bool = Field(default=False)
    required_training: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

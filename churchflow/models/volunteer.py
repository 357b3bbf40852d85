"""
Volunteer model - members registered to serve
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, UniqueConstraint
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import uuid

from churchflow.core.clock import utcnow


class Volunteer(SQLModel, table=True):
    """Volunteer profile; a member registers at most once per church"""

    __tablename__ = "volunteers"
    __table_args__ = (
        UniqueConstraint("church_id", "member_id", name="uq_volunteers_church_member"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True)

    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    availability: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    preferred_roles: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    background_check: bool = Field(default=False)
    background_check_date: Optional[date] = None
    training_completed: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    notes: Optional[str] = None
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

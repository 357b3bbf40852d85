"""
Attendance model
"""

from sqlmodel import Field, SQLModel
from datetime import date, datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class Attendance(SQLModel, table=True):
    """Attendance record for a member, optionally tied to an event"""

    __tablename__ = "attendance"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True)
    event_id: Optional[uuid.UUID] = Field(default=None, foreign_key="events.id", index=True)

    attendance_date: date = Field(index=True)
    check_in_time: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)

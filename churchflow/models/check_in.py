"""
CheckIn model - arrival at an event, with child pickup security codes
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class CheckInMethod(str, Enum):
    MANUAL = "MANUAL"
    KIOSK = "KIOSK"
    MOBILE = "MOBILE"


class CheckIn(SQLModel, table=True):
    """Check-in model with church isolation"""

    __tablename__ = "check_ins"
    __table_args__ = (
        # One check-in per member, event and day
        UniqueConstraint("member_id", "event_id", "check_in_date", name="uq_check_ins_member_event_day"),
        UniqueConstraint("church_id", "check_in_date", "security_code", name="uq_check_ins_security_code"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True)
    event_id: Optional[uuid.UUID] = Field(default=None, foreign_key="events.id", index=True)

    check_in_time: datetime = Field(default_factory=utcnow)
    check_in_date: date = Field(default_factory=date.today, index=True)
    check_out_time: Optional[datetime] = None
    checked_out_by_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    check_in_method: CheckInMethod = Field(default=CheckInMethod.MANUAL)

    # Child check-in
    is_child_check_in: bool = Field(default=False, index=True)
    security_code: Optional[str] = Field(default=None, max_length=16)
    parent_name: Optional[str] = Field(default=None, max_length=200)

    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

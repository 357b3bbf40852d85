"""
ActivityLog model - append-only audit trail
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from churchflow.core.clock import utcnow


class ActivityLog(SQLModel, table=True):
    """Audit entry; written once, never updated or deleted"""

    __tablename__ = "activity_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)

    action: str = Field(max_length=50, index=True)
    entity_type: str = Field(max_length=50)
    entity_id: Optional[uuid.UUID] = Field(default=None, index=True)
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, index=True)

"""
User model - an authenticated principal
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class User(SQLModel, table=True):
    """Authenticated account; belongs to a church through ChurchUser"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Authentication
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    password_hash: str = Field(nullable=False)

    # Profile
    name: str = Field(nullable=False, max_length=200)
    image: Optional[str] = Field(default=None, max_length=500)

    # Status
    is_active: bool = Field(default=True, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

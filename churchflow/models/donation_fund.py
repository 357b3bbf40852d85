"""
DonationFund model
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric
from decimal import Decimal
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class DonationFund(SQLModel, table=True):
    """Designated fund that donations are given to"""

    __tablename__ = "donation_funds"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")

    name: str = Field(nullable=False, max_length=255)
    description: Optional[str] = None
    goal: Optional[Decimal] = Field(
        default=None,
        description="Fundraising goal",
        sa_column=Column(Numeric(12, 2), nullable=True)
    )
    raised: Decimal = Field(
        default=Decimal("0.00"),
        description="Running total of completed donations",
        sa_column=Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    )

    is_default: bool = Field(default=False)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

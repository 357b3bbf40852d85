"""
Donation model
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric
from decimal import Decimal
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CHECK = "CHECK"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONLINE = "ONLINE"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class Donation(SQLModel, table=True):
    """Donation model with church isolation"""

    __tablename__ = "donations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    fund_id: uuid.UUID = Field(foreign_key="donation_funds.id", index=True)
    member_id: Optional[uuid.UUID] = Field(default=None, foreign_key="members.id", nullable=True, index=True)

    amount: Decimal = Field(
        description="Donation amount",
        sa_column=Column(Numeric(12, 2), nullable=False)
    )
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)
    payment_status: PaymentStatus = Field(default=PaymentStatus.COMPLETED, index=True)

    donor_name: Optional[str] = Field(default=None, max_length=200)
    donor_email: Optional[str] = Field(default=None, max_length=255)
    is_anonymous: bool = Field(default=False)
    is_recurring: bool = Field(default=False)
    recurring_frequency: Optional[str] = Field(default=None, max_length=20)
    transaction_id: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

    donated_at: datetime = Field(default_factory=utcnow, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

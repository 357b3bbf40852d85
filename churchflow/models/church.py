"""
Church model - the tenant and isolation boundary
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON
from datetime import datetime
from typing import List, Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class SubscriptionTier(str, Enum):
    """Subscription plans"""
    FREE = "FREE"
    BASIC = "BASIC"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class SubscriptionStatus(str, Enum):
    """Billing state of a church"""
    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


DEFAULT_MODULES = [
    "members",
    "events",
    "donations",
    "checkin",
    "communications",
    "groups",
    "volunteers",
]


class Church(SQLModel, table=True):
    """Church (tenant) model"""

    __tablename__ = "churches"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    slug: str = Field(
        unique=True,
        index=True,
        max_length=50,
        description="Globally unique URL identifier, permanent once assigned"
    )

    # Contact
    description: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=500)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    country: str = Field(default="United States", max_length=100)
    timezone: str = Field(default="America/New_York", max_length=64)

    # Branding
    logo: Optional[str] = Field(default=None, max_length=500)
    primary_color: Optional[str] = Field(default=None, max_length=20)

    # Subscription
    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.FREE)
    subscription_status: SubscriptionStatus = Field(default=SubscriptionStatus.TRIAL, index=True)
    trial_ends_at: Optional[datetime] = None

    # Features and quotas
    enabled_modules: List[str] = Field(default_factory=lambda: list(DEFAULT_MODULES), sa_column=Column(JSON))
    max_members: int = Field(default=500)
    max_storage: int = Field(default=25, description="Storage quota in GB")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

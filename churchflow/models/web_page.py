"""
WebPage model - pages of a church's public website
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, UniqueConstraint
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from churchflow.core.clock import utcnow


class WebPage(SQLModel, table=True):
    """CMS page; slug is unique within its church"""

    __tablename__ = "web_pages"
    __table_args__ = (
        UniqueConstraint("church_id", "slug", name="uq_web_pages_church_slug"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")

    title: str = Field(nullable=False, max_length=255)
    slug: str = Field(nullable=False, max_length=50)
    template: str = Field(default="content", max_length=50)
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = Field(default=None, max_length=500)

    is_published: bool = Field(default=False, index=True)
    is_home_page: bool = Field(default=False)
    show_in_nav: bool = Field(default=True)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

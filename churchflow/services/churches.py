"""
Church provisioning

Creating a church is one transactional group: the church row with its
allocated slug, the owner's membership and the default donation fund.
"""

from datetime import timedelta
from typing import List, Optional
import re
import uuid

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from churchflow.core.clock import utcnow
from churchflow.core.config import get_settings
from churchflow.core.identifiers import persist_unique, slug_candidates, slugify
from churchflow.models import (
    Church,
    ChurchRole,
    ChurchUser,
    DEFAULT_MODULES,
    DonationFund,
    SubscriptionStatus,
    SubscriptionTier,
)

logger = structlog.get_logger(__name__)
settings = get_settings()

GENERAL_FUND_NAME = "General Fund"
GENERAL_FUND_DESCRIPTION = "General tithes and offerings"


def tier_for_attendance(average_attendance: Optional[str]) -> SubscriptionTier:
    """Map an onboarding attendance band (e.g. "100-250", "2500+") to a tier"""
    if not average_attendance:
        return SubscriptionTier.FREE

    band = re.sub(r"[^\d+-]", "", average_attendance)
    if "2500" in band or "+" in band:
        return SubscriptionTier.ENTERPRISE
    if "1000" in band or "1001" in band:
        return SubscriptionTier.PREMIUM
    if "250" in band or "500" in band:
        return SubscriptionTier.STANDARD
    if "100" in band:
        return SubscriptionTier.BASIC
    return SubscriptionTier.FREE


async def slug_exists(session: AsyncSession, slug: str) -> bool:
    result = await session.exec(select(Church.id).where(Church.slug == slug))
    return result.first() is not None


async def create_church(
    session: AsyncSession,
    owner_id: uuid.UUID,
    name: str,
    tier: SubscriptionTier = SubscriptionTier.FREE,
    enabled_modules: Optional[List[str]] = None,
    **profile,
) -> Church:
    """Stage a church, its OWNER membership and its default fund.

    Nothing is committed; the caller wraps this in its transaction.
    """
    base = slugify(name, fallback="church")

    def build(slug: str) -> Church:
        return Church(
            name=name,
            slug=slug,
            subscription_tier=tier,
            subscription_status=SubscriptionStatus.TRIAL,
            trial_ends_at=utcnow() + timedelta(days=settings.TRIAL_DAYS),
            enabled_modules=list(enabled_modules or DEFAULT_MODULES),
            max_members=settings.DEFAULT_MAX_MEMBERS,
            max_storage=settings.DEFAULT_MAX_STORAGE_GB,
            **profile,
        )

    church = await persist_unique(
        session,
        build,
        slug_candidates(base),
        lambda candidate: slug_exists(session, candidate),
        kind="church_slug",
    )

    session.add(ChurchUser(church_id=church.id, user_id=owner_id, role=ChurchRole.OWNER))
    session.add(DonationFund(
        church_id=church.id,
        name=GENERAL_FUND_NAME,
        description=GENERAL_FUND_DESCRIPTION,
        is_default=True,
    ))
    await session.flush()

    logger.info(f"Church provisioned: {church.id}", slug=church.slug)
    return church

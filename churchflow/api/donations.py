"""
Donations and donation funds API endpoints

A fund's ``raised`` total moves in the same transaction as the completed
donations that feed it.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import update
from sqlmodel import Field, SQLModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import ValidationFailed
from churchflow.core.scope import ChurchScope
from churchflow.models import Donation, DonationFund, Member, PaymentMethod, PaymentStatus
from churchflow.services.churches import GENERAL_FUND_DESCRIPTION, GENERAL_FUND_NAME

logger = structlog.get_logger(__name__)
router = APIRouter()


class DonationCreate(SQLModel):
    """Schema for recording a donation"""
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    fund_id: Optional[uuid.UUID] = None
    member_id: Optional[uuid.UUID] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.COMPLETED
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    is_anonymous: bool = False
    is_recurring: bool = False
    recurring_frequency: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    donated_at: Optional[datetime] = None


class DonationUpdate(SQLModel):
    """Schema for updating a donation; amount and fund are fixed once recorded"""
    payment_status: Optional[PaymentStatus] = None
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    is_anonymous: Optional[bool] = None
    notes: Optional[str] = None


class FundCreate(SQLModel):
    """Schema for creating a donation fund"""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    goal: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    is_default: bool = False


async def _adjust_raised(scope: ChurchScope, fund_id: uuid.UUID, delta: Decimal):
    await scope.session.exec(
        update(DonationFund)
        .where(DonationFund.id == fund_id, DonationFund.church_id == scope.church_id)
        .values(raised=DonationFund.raised + delta)
    )


async def _default_fund(scope: ChurchScope) -> DonationFund:
    """The church's default fund, created on first use"""
    fund = await scope.find(DonationFund, DonationFund.is_default == True)  # noqa: E712
    if fund is None:
        fund = scope.add(DonationFund(
            name=GENERAL_FUND_NAME,
            description=GENERAL_FUND_DESCRIPTION,
            is_default=True,
        ))
        await scope.session.flush()
        logger.info(f"Default fund created: {fund.id}", church_id=str(scope.church_id))
    return fund


@router.get("/funds", response_model=List[DonationFund])
async def list_funds(
    active_only: bool = True,
    scope: ChurchScope = Depends(get_scope),
):
    """List donation funds"""
    criteria = [DonationFund.is_active == True] if active_only else []  # noqa: E712
    return await scope.list(
        DonationFund,
        *criteria,
        order_by=(DonationFund.is_default.desc(), DonationFund.name.asc()),
        limit=None,
    )


@router.post("/funds", response_model=DonationFund, status_code=status.HTTP_201_CREATED)
async def create_fund(
    fund_data: FundCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a donation fund; a new default replaces the previous one"""
    async with scope.atomic():
        if fund_data.is_default:
            await scope.session.exec(
                update(DonationFund)
                .where(DonationFund.church_id == scope.church_id)
                .values(is_default=False)
            )
        fund = scope.add(DonationFund(**fund_data.model_dump()))

    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "DonationFund",
        fund.id,
        {"name": fund.name},
    )
    return fund


@router.get("/", response_model=List[Donation])
async def list_donations(
    fund_id: Optional[uuid.UUID] = None,
    member_id: Optional[uuid.UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List donations, newest first"""
    criteria = []
    if fund_id:
        criteria.append(Donation.fund_id == fund_id)
    if member_id:
        criteria.append(Donation.member_id == member_id)
    if start_date:
        criteria.append(Donation.donated_at >= start_date)
    if end_date:
        criteria.append(Donation.donated_at <= end_date)

    return await scope.list(
        Donation,
        *criteria,
        order_by=(Donation.donated_at.desc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Donation, status_code=status.HTTP_201_CREATED)
async def create_donation(
    donation_data: DonationCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Record a donation"""
    if donation_data.amount <= 0:
        raise ValidationFailed("Amount must be greater than zero")
    if donation_data.member_id is not None:
        await scope.get(Member, donation_data.member_id, "Member")

    values = donation_data.model_dump(exclude_none=True)
    async with scope.atomic():
        if donation_data.fund_id is not None:
            fund = await scope.get(DonationFund, donation_data.fund_id, "Fund")
        else:
            fund = await _default_fund(scope)
        values["fund_id"] = fund.id

        donation = scope.add(Donation(**values))
        if donation.payment_status == PaymentStatus.COMPLETED:
            await _adjust_raised(scope, fund.id, donation.amount)

    logger.info(f"Donation recorded: {donation.id}", fund_id=str(fund.id))
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Donation",
        donation.id,
        {"amount": str(donation.amount), "fund": fund.name},
    )
    return donation


@router.get("/{donation_id}", response_model=Donation)
async def get_donation(
    donation_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a donation"""
    return await scope.get(Donation, donation_id, "Donation")


@router.patch("/{donation_id}", response_model=Donation)
async def update_donation(
    donation_id: uuid.UUID,
    donation_update: DonationUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a donation; status changes in or out of COMPLETED move the fund total"""
    changes = donation_update.model_dump(exclude_unset=True)

    async with scope.atomic():
        donation = await scope.get(Donation, donation_id, "Donation")
        was_completed = donation.payment_status == PaymentStatus.COMPLETED
        donation = await scope.update(Donation, donation_id, changes, "Donation")
        is_completed = donation.payment_status == PaymentStatus.COMPLETED

        if was_completed != is_completed:
            delta = donation.amount if is_completed else -donation.amount
            await _adjust_raised(scope, donation.fund_id, delta)

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Donation",
        donation.id,
        {"updated_fields": sorted(changes)},
    )
    return donation


@router.delete("/{donation_id}")
async def delete_donation(
    donation_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a donation and take it off its fund's total"""
    async with scope.atomic():
        donation = await scope.delete(Donation, donation_id, "Donation")
        if donation.payment_status == PaymentStatus.COMPLETED:
            await _adjust_raised(scope, donation.fund_id, -donation.amount)

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Donation",
        donation_id,
        {"amount": str(donation.amount)},
    )
    return {"success": True}

"""
Authentication API endpoints - sign-up, login and current user
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.auth import create_access_token, hash_password, verify_password
from churchflow.core.clock import utcnow
from churchflow.core.database import get_session
from churchflow.core.dependencies import get_activity_recorder, get_current_user_id
from churchflow.core.errors import Conflict, Forbidden, NotFound, Unauthenticated
from churchflow.core.tenancy import ChurchContext, find_membership
from churchflow.models import ChurchRole, SubscriptionTier, User
from churchflow.schemas import MeResponse, RegisterResponse, TokenResponse, UserLogin, UserRegister
from churchflow.services.churches import create_church

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserRegister,
    session: AsyncSession = Depends(get_session),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Register a new user together with their church"""
    email = user_data.email.lower()
    existing_user = (await session.exec(select(User).where(User.email == email))).first()
    if existing_user:
        raise Conflict("An account with this email already exists")

    try:
        user = User(
            email=email,
            password_hash=hash_password(user_data.password),
            name=user_data.name.strip(),
        )
        session.add(user)
        await session.flush()

        church = await create_church(
            session,
            owner_id=user.id,
            name=user_data.church_name.strip(),
            tier=SubscriptionTier.STANDARD,
            enabled_modules=["members", "events", "communications", "donations", "volunteers"],
            email=email,
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("An account with this email already exists")
    except Exception:
        await session.rollback()
        raise

    logger.info(f"User registered: {user.id}", church_id=str(church.id))

    await recorder.record(
        ChurchContext(user_id=user.id, church_id=church.id, role=ChurchRole.OWNER),
        ActivityAction.CHURCH_CREATED,
        "Church",
        church.id,
        {"church_name": church.name},
    )

    return RegisterResponse(
        user_id=user.id,
        church_id=church.id,
        church_slug=church.slug,
        access_token=create_access_token(user.id),
    )


@router.post("/login", response_model=TokenResponse)
async def login_user(
    login_data: UserLogin,
    session: AsyncSession = Depends(get_session)
):
    """Login user"""
    user = (await session.exec(select(User).where(User.email == login_data.email.lower()))).first()

    if not user or not verify_password(login_data.password, user.password_hash):
        raise Unauthenticated("Invalid email or password")

    if not user.is_active:
        raise Forbidden("User account is inactive")

    user.last_login_at = utcnow()
    session.add(user)
    await session.commit()

    logger.info(f"User logged in: {user.id}")

    return TokenResponse(
        access_token=create_access_token(user.id),
        user_id=str(user.id),
    )


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session)
):
    """Get current user info; church fields are empty before onboarding"""
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    membership = await find_membership(session, user_id)

    return MeResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
        church_id=membership.church_id if membership else None,
        role=membership.role if membership else None,
    )

"""
Tests for JWT authentication and the auth endpoints
"""

import pytest
from datetime import timedelta
import uuid
from jose import jwt

from sqlmodel import select

from churchflow.core.auth import create_access_token, decode_access_token, verify_token
from churchflow.core.config import get_settings
from churchflow.models import Church, ChurchRole, ChurchUser, DonationFund, SubscriptionStatus, User


settings = get_settings()


def test_create_access_token():
    """Test JWT token creation"""
    user_id = uuid.uuid4()

    token = create_access_token(user_id=user_id, expires_delta=timedelta(hours=24))

    payload = decode_access_token(token)
    assert payload is not None
    assert payload["sub"] == str(user_id)
    assert "exp" in payload
    # The church is never carried in the token
    assert "church_id" not in payload
    assert "role" not in payload


def test_verify_token_returns_user_id():
    user_id = uuid.uuid4()
    assert verify_token(create_access_token(user_id)) == user_id


def test_expired_token_is_rejected():
    token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
    assert verify_token(token) is None


def test_token_with_wrong_secret_is_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4())}, "another-secret", algorithm=settings.JWT_ALGORITHM)
    assert verify_token(token) is None


@pytest.mark.asyncio
async def test_register_creates_user_church_and_fund(client, db):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Pat Jones",
        "email": "Pat@Example.com",
        "password": "password123",
        "church_name": "Grace Community",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["church_slug"] == "grace-community"
    assert data["access_token"]

    user = (await db.exec(select(User).where(User.email == "pat@example.com"))).one()
    church = await db.get(Church, uuid.UUID(data["church_id"]))
    assert church.subscription_status == SubscriptionStatus.TRIAL
    assert church.trial_ends_at is not None

    membership = (await db.exec(select(ChurchUser).where(ChurchUser.user_id == user.id))).one()
    assert membership.church_id == church.id
    assert membership.role == ChurchRole.OWNER

    funds = (await db.exec(select(DonationFund).where(DonationFund.church_id == church.id))).all()
    assert [fund.name for fund in funds] == ["General Fund"]
    assert funds[0].is_default


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client):
    payload = {
        "name": "Pat",
        "email": "pat@example.com",
        "password": "password123",
        "church_name": "Grace",
    }
    assert (await client.post("/api/v1/auth/register", json=payload)).status_code == 201

    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_register_validates_password_length(client):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Pat",
        "email": "pat@example.com",
        "password": "short",
        "church_name": "Grace",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_and_me(client, owner):
    response = await client.post("/api/v1/auth/login", json={
        "email": owner.user.email,
        "password": "password123",
    })
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(owner.user.id)
    assert data["church_id"] == str(owner.church.id)
    assert data["role"] == "OWNER"


@pytest.mark.asyncio
async def test_login_with_bad_password(client, owner):
    response = await client.post("/api/v1/auth/login", json={
        "email": owner.user.email,
        "password": "wrong-password",
    })
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_missing_token_is_unauthenticated(client):
    response = await client.get("/api/v1/members/")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

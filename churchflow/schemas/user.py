"""
Pydantic schemas for users
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime
import uuid

from churchflow.models.church_user import ChurchRole


class UserRegister(BaseModel):
    """Sign-up schema: creates the user and their church"""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    church_name: str = Field(..., min_length=1, max_length=255)


class UserLogin(BaseModel):
    """User login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class UserResponse(BaseModel):
    """User response model"""
    id: uuid.UUID
    email: str
    name: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class RegisterResponse(BaseModel):
    message: str = "Account created successfully"
    user_id: uuid.UUID
    church_id: uuid.UUID
    church_slug: str
    access_token: str
    token_type: str = "bearer"


class MeResponse(UserResponse):
    """Current user with their membership, if any"""
    church_id: Optional[uuid.UUID] = None
    role: Optional[ChurchRole] = None

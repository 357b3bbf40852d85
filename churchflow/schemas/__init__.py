"""
Schemas for API responses and requests
"""

from churchflow.schemas.token import TokenResponse
from churchflow.schemas.user import MeResponse, RegisterResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "MeResponse",
    "RegisterResponse",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
]

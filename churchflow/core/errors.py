"""
Error taxonomy shared by every router

Each error is an HTTPException with a stable machine-readable code so
clients can branch on it (e.g. ``no_tenant`` routes to onboarding).
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ChurchFlowError(HTTPException):
    """Base class for application errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal"
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=self.__class__.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class Unauthenticated(ChurchFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class NoTenant(ChurchFlowError):
    """Authenticated user has no church yet; clients send them to onboarding"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "no_tenant"
    default_detail = "No church found for this account"


class NotFound(ChurchFlowError):
    """Entity is absent or belongs to another church; the two are never distinguished"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found"


class Forbidden(ChurchFlowError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Insufficient permissions"


class ValidationFailed(ChurchFlowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_failed"
    default_detail = "Invalid request"


class Conflict(ChurchFlowError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_detail = "Resource already exists"


class AllocationExhausted(ChurchFlowError):
    """No free identifier within the allowed attempts; reported to callers as an internal error"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal"
    default_detail = "Could not allocate a unique identifier"


def error_body(exc: ChurchFlowError) -> Dict[str, Any]:
    return {"detail": exc.detail, "code": exc.code}


async def churchflow_error_handler(request: Request, exc: ChurchFlowError) -> JSONResponse:
    """Render application errors as ``{"detail", "code"}``"""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc),
        headers=exc.headers,
    )

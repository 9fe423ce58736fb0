"""
Authentication and Authorization Module

Provides the principal resolver for FastAPI endpoints. A bearer JWT issued
by the auth subsystem is verified and turned into a Principal carrying
{id, role, course}.

Authorization for workflow transitions is NOT done here - the transition
guard in modules.admissions.transitions is the single source of truth for
that. Role gates on the read views live with the view definitions in
modules.admissions.service.
"""

import enum
import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tti_admissions.core.security import decode_token
from tti_admissions.modules.admissions.models import Course

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token for authentication",
)


class Role(str, enum.Enum):
    """Reviewer roles."""

    HEAD = "HEAD"
    TEACHER = "TEACHER"


@dataclass(frozen=True)
class Principal:
    """
    An authenticated reviewer.

    Attributes:
        id: User id from the token subject
        role: HEAD or TEACHER
        course: The TEACHER's course (None for HEAD)
        name: Display name, recorded in audit entries
        email: Email address (optional)
    """

    id: str
    role: Role
    course: Course | None = None
    name: str = ""
    email: str | None = None

    @property
    def is_head(self) -> bool:
        return self.role == Role.HEAD

    def __str__(self) -> str:
        return f"Principal(id={self.id}, role={self.role.value}, course={self.course})"


def _unauthenticated(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_principal(token: str) -> Principal:
    """
    Verify a bearer token and build the Principal from its claims.

    Raises:
        HTTPException 401: If the token is invalid, expired, or its claims
            don't describe a usable reviewer.
    """
    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthenticated("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthenticated("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    subject = payload.get("sub")
    if not subject:
        raise _unauthenticated("INVALID_TOKEN_CLAIMS", "Token is missing the subject claim.")

    try:
        role = Role(str(payload.get("role", "")).upper())
        raw_course = payload.get("course")
        course = Course(raw_course) if raw_course else None
    except ValueError as e:
        logger.warning(f"Invalid token claims for subject {subject}: {e}")
        raise _unauthenticated(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e

    if role == Role.TEACHER and course is None:
        logger.warning(f"TEACHER token without course claim: {subject}")
        raise _unauthenticated("INVALID_TOKEN_CLAIMS", "Teacher tokens must carry a course.")

    return Principal(
        id=str(subject),
        role=role,
        course=course if role == Role.TEACHER else None,
        name=payload.get("name") or "",
        email=payload.get("email"),
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    """
    FastAPI dependency that validates the bearer token and returns the principal.

    Raises:
        HTTPException 401: If the token is missing, invalid, or expired
    """
    if credentials is None or not credentials.credentials:
        raise _unauthenticated("NOT_AUTHENTICATED", "No token provided. Please login first.")

    principal = resolve_principal(credentials.credentials)
    logger.debug(f"Authenticated {principal}")
    return principal


__all__ = [
    "Principal",
    "Role",
    "get_current_principal",
    "resolve_principal",
]

"""
Authentication and Authorization

Admission control for every resource route: API key authentication
followed by fixed-window rate limiting. Admission runs in its own
database session, committed before the route handler touches the
request session, so a counted request stays counted even if the handler
later fails.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import get_settings
from helpdesk.core.database import get_db_context
from helpdesk.core.rate_limit import FixedWindowRateLimiter, get_rate_limiter
from helpdesk.core.security import display_prefix, hash_api_key
from helpdesk.models.enums import UserRole
from helpdesk.repositories.api_key import ApiKeyRepository

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base class for rejected credentials."""

    detail = "Not authenticated"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class MissingAPIKeyError(AuthenticationError):
    detail = "API key is required"


class InvalidAPIKeyError(AuthenticationError):
    detail = "Invalid API key"


class OrphanedAPIKeyError(AuthenticationError):
    detail = "User not found"


@dataclass
class UserPrincipal:
    """
    Authenticated user principal.

    Represents the user owning the presented API key, with the tenant every
    request of theirs is scoped to.
    """

    user_id: int
    organization_id: int
    email: str
    name: str = ""
    role: UserRole = UserRole.AGENT
    api_key_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return UserRole.can_manage(self.role)


async def authenticate_api_key(db: AsyncSession, api_key: str | None) -> UserPrincipal:
    """
    Resolve an API key to its owning user.

    Args:
        db: Database session
        api_key: Raw key from the request header

    Returns:
        UserPrincipal for the key's owner

    Raises:
        MissingAPIKeyError: No key presented
        InvalidAPIKeyError: Key not recognized
        OrphanedAPIKeyError: Key's user no longer exists
    """
    if not api_key:
        raise MissingAPIKeyError()

    api_key_obj = await ApiKeyRepository(db).get_by_key_hash(hash_api_key(api_key))
    if api_key_obj is None:
        raise InvalidAPIKeyError()

    user = api_key_obj.user
    if user is None:
        raise OrphanedAPIKeyError()

    return UserPrincipal(
        user_id=user.id,
        organization_id=user.organization_id,
        email=user.email,
        name=user.name,
        role=UserRole(user.role),
        api_key_id=api_key_obj.id,
    )


async def _record_key_use(db: AsyncSession, api_key_id: int) -> None:
    # Best-effort: admission must not fail because of this bookkeeping write
    try:
        await ApiKeyRepository(db).touch_last_used(api_key_id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"Failed to record API key use: {e}", extra={"api_key_id": api_key_id})


async def admit_request(
    request: Request,
    response: Response,
    limiter: Annotated[FixedWindowRateLimiter, Depends(get_rate_limiter)],
) -> UserPrincipal:
    """
    Authenticate and rate-limit the request (FastAPI dependency).

    Sets the x-ratelimit-* headers on the response and records them on
    ``request.state`` for responses built outside the route (errors, files).
    A rejected request gets them on the 429 along with Retry-After.
    The key's last_used_at is recorded for every authenticated request,
    rate limited or not.

    Args:
        request: FastAPI request object
        response: Response whose headers receive the rate limit state
        limiter: Rate limiter

    Returns:
        UserPrincipal for the caller

    Raises:
        HTTPException: 401 on authentication failure, 429 when rate limited
    """
    api_key = request.headers.get(get_settings().api_key_header)

    async with get_db_context() as db:
        try:
            principal = await authenticate_api_key(db, api_key)
        except AuthenticationError as e:
            logger.info(
                f"Rejected request: {e.detail}",
                extra={"path": request.url.path, "key_prefix": display_prefix(api_key or "")},
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=e.detail,
            ) from e

        await _record_key_use(db, principal.api_key_id)

        decision = await limiter.hit(db, hash_api_key(api_key))
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"api_key_id": principal.api_key_id, "reset_time": decision.reset_time},
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers=decision.headers(),
            )

    headers = decision.headers()
    response.headers.update(headers)
    request.state.rate_limit_headers = headers
    request.state.principal = principal
    return principal


# Type alias for dependency injection
CurrentUser = Annotated[UserPrincipal, Depends(admit_request)]


async def require_admin(user: CurrentUser) -> UserPrincipal:
    """
    Require the caller to be an organization admin.

    Raises:
        HTTPException: 403 if the caller is not an admin
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user


RequireAdmin = Annotated[UserPrincipal, Depends(require_admin)]


def ensure_owned(entity, user: UserPrincipal, label: str):
    """
    Check a fetched entity against the caller's organization.

    Args:
        entity: Entity with organization_id, or None when not found
        user: Caller
        label: Entity name for the 404 message

    Returns:
        The entity

    Raises:
        HTTPException: 404 when missing, 403 when owned by another organization
    """
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    if entity.organization_id != user.organization_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return entity

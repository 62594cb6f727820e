"""FastAPI dependencies for authentication and request-scoped collaborators."""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from jwt import ExpiredSignatureError, PyJWTError
from pydantic import ValidationError as PydanticValidationError

from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError
from .security import decode_access_token
from ..schemas.auth import CurrentUser, Role
from ..services.booking_workflow import BookingWorkflow
from ..services.notification_service import BookingNotifier


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> CurrentUser:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        CurrentUser: Identity carried by the validated token

    Raises:
        AuthenticationError: If the token is missing, malformed or expired
    """
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except PyJWTError:
        raise AuthenticationError("Invalid token")

    try:
        return CurrentUser(
            id=payload["sub"],
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            role=payload.get("role"),
        )
    except (KeyError, PydanticValidationError):
        raise AuthenticationError("Invalid token payload")


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only admin tokens."""
    if user.role != Role.ADMIN:
        raise AuthorizationError("Admin access required")
    return user


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Optional[CurrentUser]:
    """Resolve the caller if a token is present; anonymous otherwise."""
    if not authorization:
        return None
    return await get_current_user(authorization)


def get_notifier(request: Request) -> BookingNotifier:
    return request.app.state.notifier


def get_booking_workflow(
    db: AsyncSession = Depends(get_db),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingWorkflow:
    return BookingWorkflow(db, notifier)


CurrentUserDep = Depends(get_current_user)
AdminUser = Depends(require_admin)
OptionalUser = Depends(get_optional_user)
DatabaseSession = Depends(get_db)
Workflow = Depends(get_booking_workflow)

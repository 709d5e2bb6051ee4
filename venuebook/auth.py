import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import ROLE_ADMIN, ROLE_VENUE_MANAGER, User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _user_from_token(token: str, db: Session) -> User:
    payload = verify_jwt_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Authentication failed. Invalid token.")

    if payload.get("type") != "access" or not payload.get("sub"):
        logger.warning("Rejected non-access token on an authenticated route")
        raise HTTPException(status_code=401, detail="Authentication failed. Invalid token.")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Authentication failed. Invalid token.") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="Authentication failed. User not found.")

    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer access token to a User, 401 otherwise"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Authentication failed. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = _user_from_token(credentials.credentials, db)
    logger.debug(f"User authenticated: {user.email}")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers and bad tokens resolve to None"""
    if not credentials:
        return None
    try:
        return _user_from_token(credentials.credentials, db)
    except HTTPException:
        return None


def require_roles(*roles: str):
    """
    Route guard: allow only the listed roles (admins always pass).

    Example usage:
        @router.post("", dependencies=[Depends(require_roles("venue_manager"))])
    """

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role == ROLE_ADMIN or user.role in roles:
            return user
        logger.warning(f"User {user.email} with role {user.role} denied; requires {roles}")
        raise HTTPException(
            status_code=403,
            detail=f"Access denied. {' or '.join(r.replace('_', ' ') for r in roles)} role required.",
        )

    return role_checker


def is_manager(user: Optional[User]) -> bool:
    return bool(user) and user.role in (ROLE_ADMIN, ROLE_VENUE_MANAGER)

from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.core.security import decode_access_token
from app.models.user import User
from app.services.user_service import get_user_by_username

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """The authenticated user; its username is the actor recorded in lifecycle history."""
    token_data = decode_access_token(token)
    if not token_data.username:
        raise _unauthorized("Could not validate credentials")

    user = get_user_by_username(db, token_data.username)
    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return user


def require_auth(user: User = Depends(get_current_user)) -> User:
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    """Dependency admitting only users whose role is one of roles."""

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}",
            )
        return user

    return checker


# approving, activating and retiring products
require_admin = require_roles("admin")
# drafting products and submitting them for approval
require_staff = require_roles("admin", "warehouse_staff")

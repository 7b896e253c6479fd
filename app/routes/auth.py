import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.dependencies.auth import require_admin, require_auth
from app.models.user import User
from app.schemas.user import RefreshRequest, RoleUpdate, UserCreate, UserResponse, Token
from app.services.user_service import create_user, get_user_by_username, set_user_role
from app.core.security import (
    verify_password,
    create_access_token,
    decode_refresh_token,
    create_refresh_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(username: str, role: str, with_refresh: bool = True) -> Token:
    claims = {"sub": username, "role": role}
    return Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims) if with_refresh else None,
    )


# Public sign-up always yields a plain "user"; roles are granted by an admin.
@router.post("/register", response_model=UserResponse, status_code=201)
def register_user(data: UserCreate, db: Session = Depends(get_db)):
    return create_user(db, data.username, data.password, email=data.email)


@router.put("/users/{username}/role", response_model=UserResponse)
def update_user_role(
    username: str,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return set_user_role(db, username, data.role, changed_by=admin.username)


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = get_user_by_username(db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.info("Failed login for %s", form_data.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _issue_tokens(user.username, user.role)


@router.post("/refresh", response_model=Token)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    payload = decode_refresh_token(body.refresh_token)
    user = get_user_by_username(db, payload.username) if payload.username else None
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    # role comes from the stored user, not the presented token
    return _issue_tokens(user.username, user.role, with_refresh=False)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(require_auth)):
    return user

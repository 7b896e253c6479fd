import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.security import get_password_hash
from app.models.user import User

logger = logging.getLogger(__name__)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(
    db: Session,
    username: str,
    password: str,
    email: Optional[str] = None,
    role: str = "user",
) -> User:
    if get_user_by_username(db, username):
        raise ConflictError("Username already taken", [f"username '{username}' exists"])

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User created: %s (%s)", user.username, user.role)
    return user


def set_user_role(db: Session, username: str, role: str, changed_by: str) -> User:
    """Only admins reach this; nobody changes their own role."""
    if username == changed_by:
        raise ValidationError("Cannot change your own role")

    user = get_user_by_username(db, username)
    if user is None:
        raise NotFoundError("User", username)

    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("Role of %s set to %s by %s", username, role, changed_by)
    return user


def ensure_initial_admin(db: Session) -> Optional[User]:
    """Create the configured first admin when no user has that name yet."""
    username = settings.INITIAL_ADMIN_USERNAME
    password = settings.INITIAL_ADMIN_PASSWORD
    if not username or not password:
        return None

    existing = get_user_by_username(db, username)
    if existing is not None:
        return existing
    return create_user(db, username, password, role="admin")

"""User registration and credential verification."""

import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fileshare.core.security import burn_password_check, hash_password, verify_password
from fileshare.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(Exception):
    """Raised when the username or email is already registered."""

    def __init__(self, message: str = "User already exists") -> None:
        self.message = message
        super().__init__(message)


class InvalidCredentialsError(Exception):
    """Raised for an unknown username or a wrong password (deliberately indistinguishable)."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        self.message = message
        super().__init__(message)


def register_user(db: Session, username: str, email: str, password: str) -> User:
    """
    Create a user. The first user ever created becomes admin, everyone after is a user.

    The role is decided by counting rows before the insert; two concurrent
    first registrations can both see an empty table and both become admin.
    """
    existing = (
        db.query(User.id)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if existing is not None:
        raise UserAlreadyExistsError()

    user_count = db.query(func.count(User.id)).scalar() or 0
    role = UserRole.ADMIN if user_count == 0 else UserRole.USER

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UserAlreadyExistsError() from e
    db.refresh(user)
    logger.info("Registered user id=%s username=%s role=%s", user.id, user.username, role.value)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User:
    """Return the user for valid credentials; raise InvalidCredentialsError otherwise."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        burn_password_check(password)
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return user

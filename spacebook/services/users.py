from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from ..errors import AuthError, ConflictError, ValidationError
from ..extensions import bcrypt, db
from ..models import User, UserRole


def get_user_by_username(username: str) -> Optional[User]:
    return db.session.execute(db.select(User).filter_by(username=username)).scalar_one_or_none()


def get_user_by_id(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def verify_password(user: User, password: str) -> bool:
    return bcrypt.check_password_hash(user.password_hash, password)


def authenticate(username: str | None, password: str | None) -> User:
    if not username or not password:
        raise ValidationError("username and password are required")
    user = get_user_by_username(username)
    # Same answer for unknown user and wrong password.
    if not user or not verify_password(user, password):
        raise AuthError("invalid credentials", code="invalid_credentials")
    return user


def create_user(username: str | None, password: str | None, role: UserRole = UserRole.student) -> User:
    if not username or not password:
        raise ValidationError("username and password are required")
    if get_user_by_username(username):
        raise ConflictError("username is already taken", code="duplicate_username")

    hashed = bcrypt.generate_password_hash(password).decode("utf-8")
    user = User(username=username, password_hash=hashed, role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError("username is already taken", code="duplicate_username") from exc
    return user


def register_student(username: str | None, password: str | None) -> User:
    """Self-registration never grants more than the student role."""
    return create_user(username, password, role=UserRole.student)

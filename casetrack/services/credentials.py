"""
Credential store: registration, password verification and role management.

Passwords are hashed with bcrypt (passlib) before they reach the database.
The very first account created becomes ``admin``; everyone after that is a
plain ``user`` until an admin promotes them.
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from casetrack.exceptions import (
    ConflictError,
    InvalidCredentials,
    NotFound,
    SelfRoleChange,
    ValidationError,
)
from casetrack.models.users import User, UserRole
from casetrack.utils.audit import write_log
from casetrack.utils.hashing import DEFAULT_ROUNDS, dummy_verify, get_password_hash, verify_password

logger = logging.getLogger(__name__)

USERNAME_MIN = 3
USERNAME_MAX = 30
PASSWORD_MIN = 6


def _validate_registration(username: str, password: str) -> None:
    errors = []
    if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        errors.append({
            "field": "username",
            "message": f"Username must be between {USERNAME_MIN} and {USERNAME_MAX} characters.",
        })
    if len(password or "") < PASSWORD_MIN:
        errors.append({
            "field": "password",
            "message": f"Password must be at least {PASSWORD_MIN} characters long.",
        })
    if errors:
        raise ValidationError(errors)


def _parse_role(role: str) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError.single("role", 'Role must be "user" or "admin".')


def register(
    db: Session,
    username: str,
    password: str,
    role: Optional[str] = None,
    rounds: int = DEFAULT_ROUNDS,
) -> User:
    username = (username or "").strip()
    _validate_registration(username, password)

    if db.query(User).filter(User.username == username).first():
        raise ConflictError()

    if role is not None:
        final_role = _parse_role(role)
    else:
        # Not serialized against a concurrent first registration
        is_first = db.query(func.count(User.id)).scalar() == 0
        final_role = UserRole.ADMIN if is_first else UserRole.USER

    user = User(
        username=username,
        password_hash=get_password_hash(password, rounds=rounds),
        role=final_role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against another registration of the same name
        db.rollback()
        raise ConflictError()
    db.refresh(user)

    logger.info("Registered user %s with role %s", user.username, user.role)
    return user


def verify(db: Session, username: str, password: str, rounds: int = DEFAULT_ROUNDS) -> User:
    """Return the user for a correct username/password pair.

    Unknown usernames and wrong passwords fail with the same
    ``InvalidCredentials`` so callers cannot enumerate accounts. Unknown names
    still pay for one bcrypt check at *rounds*, the cost new hashes are made with.
    """
    user = db.query(User).filter(User.username == (username or "").strip()).first()
    if user is None:
        dummy_verify(rounds)
        raise InvalidCredentials()
    if not verify_password(password or "", user.password_hash):
        raise InvalidCredentials()
    return user


def list_all(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found.")
    return user


def set_role(db: Session, acting_user_id: str, user_id: str, role: str, ip: Optional[str] = None) -> User:
    # Admins may never change their own role, whatever the requested value
    if acting_user_id == user_id:
        raise SelfRoleChange()

    new_role = _parse_role(role)
    user = get_user(db, user_id)

    previous = user.role
    user.role = new_role.value
    db.commit()
    db.refresh(user)

    write_log(
        db, user_id=acting_user_id, action="ROLE_CHANGE", resource="users", ip=ip,
        meta={"target_id": user.id, "old": previous, "new": user.role},
    )

    logger.info("User %s role changed to %s by %s", user.id, user.role, acting_user_id)
    return user

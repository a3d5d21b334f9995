# casetrack/models/users.py
import enum
import uuid

from sqlalchemy import Column, String, DateTime

from casetrack.database import Base
from casetrack.utils.clock import utcnow


# Roles recognised by the access guard
class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime, nullable=False, default=utcnow)

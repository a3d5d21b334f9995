# casetrack/models/person.py
import enum
import uuid

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship

from casetrack.database import Base
from casetrack.utils.clock import utcnow


# Statuses the client offers; the store itself accepts any non-empty string
class CaseStatus(str, enum.Enum):
    NEW = "new"
    PENDING = "pending"
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"


# A case record tracked through the status workflow
class Person(Base):
    __tablename__ = "people"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    middle_name = Column(String(255), nullable=True)
    date_of_birth = Column(String(255), nullable=True)
    nationality = Column(String(255), nullable=True)
    passport_number = Column(String(255), nullable=True)
    phone = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    status = Column(String(255), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Documents go away with their person
    documents = relationship(
        "Document",
        back_populates="person",
        cascade="all, delete-orphan",
        order_by="Document.uploaded_at.desc()",
    )

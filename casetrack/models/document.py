# casetrack/models/document.py
import uuid

from sqlalchemy import Column, String, DateTime, BigInteger, ForeignKey
from sqlalchemy.orm import relationship

from casetrack.database import Base
from casetrack.utils.clock import utcnow


# Metadata of an uploaded file; the bytes live in the upload directory
class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    person_id = Column(String(36), ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False, unique=True)  # name on disk
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False)
    uploaded_at = Column(DateTime, nullable=False, default=utcnow)

    person = relationship("Person", back_populates="documents")

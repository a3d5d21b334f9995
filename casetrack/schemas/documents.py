# schemas/documents.py
from datetime import datetime

from casetrack.schemas.user import ORMBase


# Metadata of an uploaded document attached to a case
class DocumentOut(ORMBase):
    id: str
    person_id: str
    file_name: str
    original_name: str
    mime_type: str
    size: int
    uploaded_at: datetime

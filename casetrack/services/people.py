import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from casetrack.exceptions import NotFound, ValidationError
from casetrack.models.person import Person
from casetrack.utils.clock import utcnow
from casetrack.utils.storage import UploadStorage

logger = logging.getLogger(__name__)

# Columns a client may write; id and timestamps are managed here
MUTABLE_FIELDS = (
    "first_name", "last_name", "middle_name", "date_of_birth", "nationality",
    "passport_number", "phone", "email", "address", "status", "notes",
)
REQUIRED_FIELDS = {
    "first_name": "First name is required.",
    "last_name": "Last name is required.",
    "status": "Status is required.",
}


def _clean(data: Dict[str, Optional[str]], partial: bool) -> Dict[str, Optional[str]]:
    """Trim required fields and reject blank or missing ones."""
    cleaned = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
    errors = []
    for field, message in REQUIRED_FIELDS.items():
        if partial and field not in cleaned:
            continue
        value = (cleaned.get(field) or "").strip()
        if not value:
            errors.append({"field": field, "message": message})
        else:
            cleaned[field] = value
    if errors:
        raise ValidationError(errors)
    return cleaned


def list_people(db: Session) -> List[Person]:
    return db.query(Person).order_by(Person.created_at.desc()).all()


def get_person(db: Session, person_id: str) -> Person:
    person = db.query(Person).filter(Person.id == person_id).first()
    if person is None:
        raise NotFound("Person not found.")
    return person


def create_person(db: Session, data: Dict[str, Optional[str]]) -> Person:
    fields = _clean(data, partial=False)
    now = utcnow()
    person = Person(created_at=now, updated_at=now, **fields)
    db.add(person)
    db.commit()
    db.refresh(person)
    return person


def update_person(db: Session, person_id: str, changes: Dict[str, Optional[str]]) -> Person:
    """Apply a partial update; fields absent from *changes* are left alone.

    An empty change-set is a plain read and does not touch ``updated_at``.
    """
    fields = _clean(changes, partial=True)
    person = get_person(db, person_id)
    if not fields:
        return person

    for key, value in fields.items():
        setattr(person, key, value)
    person.updated_at = utcnow()

    db.commit()
    db.refresh(person)
    return person


def delete_person(db: Session, person_id: str, storage: Optional[UploadStorage] = None) -> None:
    person = get_person(db, person_id)
    file_names = [doc.file_name for doc in person.documents]

    db.delete(person)
    db.commit()

    # Rows are gone; the files are removed best-effort
    if storage is not None:
        for file_name in file_names:
            storage.remove(file_name)
    logger.info("Deleted person %s with %d document(s)", person_id, len(file_names))

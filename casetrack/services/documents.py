import logging
from pathlib import Path
from typing import BinaryIO, List, Optional

from sqlalchemy.orm import Session

from casetrack.exceptions import NotFound, ValidationError
from casetrack.models.document import Document
from casetrack.services.people import get_person
from casetrack.utils.clock import utcnow
from casetrack.utils.storage import FileTooLarge, UploadStorage, check_file_type

logger = logging.getLogger(__name__)


def list_for_person(db: Session, person_id: str) -> List[Document]:
    return (
        db.query(Document)
        .filter(Document.person_id == person_id)
        .order_by(Document.uploaded_at.desc())
        .all()
    )


def get_document(db: Session, document_id: str) -> Document:
    document = db.query(Document).filter(Document.id == document_id).first()
    if document is None:
        raise NotFound("Document not found.")
    return document


def upload(
    db: Session,
    storage: UploadStorage,
    person_id: str,
    source: BinaryIO,
    original_name: Optional[str],
    content_type: Optional[str],
    declared_size: Optional[int] = None,
) -> Document:
    """Validate, store and record one uploaded file.

    Nothing reaches the disk for an unknown person or a rejected type. If the
    database write fails after the file was stored, the file is removed again.
    """
    if not original_name:
        raise ValidationError.single("document", "Document file is required.")
    if declared_size is not None and declared_size > storage.max_size:
        raise FileTooLarge(storage.max_size)
    check_file_type(original_name, content_type)
    get_person(db, person_id)

    file_name, size = storage.save(source, original_name)
    try:
        document = Document(
            person_id=person_id,
            file_name=file_name,
            original_name=Path(original_name).name,
            mime_type=content_type,
            size=size,
            uploaded_at=utcnow(),
        )
        db.add(document)
        db.commit()
        db.refresh(document)
    except Exception:
        db.rollback()
        storage.remove(file_name)
        raise

    logger.info("Stored document %s (%d bytes) for person %s", document.id, size, person_id)
    return document


def delete(db: Session, storage: UploadStorage, document_id: str) -> None:
    document = get_document(db, document_id)
    file_name = document.file_name

    db.delete(document)
    db.commit()
    storage.remove(file_name)


def file_path(storage: UploadStorage, document: Document) -> Path:
    path = storage.path_for(document.file_name)
    if not path.is_file():
        logger.error("Document %s is missing its file %s", document.id, path)
        raise NotFound("Document file not found.")
    return path

# casetrack/routes/documents.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.exceptions import ValidationError
from casetrack.schemas.documents import DocumentOut
from casetrack.services import documents
from casetrack.utils import rate_limit
from casetrack.utils.audit import client_ip, write_log
from casetrack.utils.tokenJWT import TokenClaims, get_current_user

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
    dependencies=[Depends(get_current_user), Depends(rate_limit.rate_limit(rate_limit.API))],
)


@router.get("/person/{person_id}", response_model=List[DocumentOut])
def list_documents(person_id: str, db: Session = Depends(get_db)):
    return [DocumentOut.model_validate(d) for d in documents.list_for_person(db, person_id)]


# Upload one file (multipart field "document") for a person
@router.post("/person/{person_id}", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def upload_document(
    person_id: str,
    request: Request,
    document: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    if document is None:
        raise ValidationError.single("document", "Document file is required.")

    try:
        saved = documents.upload(
            db, request.app.state.storage, person_id,
            source=document.file,
            original_name=document.filename,
            content_type=document.content_type,
            declared_size=document.size,
        )
    finally:
        document.file.close()

    out = DocumentOut.model_validate(saved)
    write_log(
        db, user_id=current_user.user_id, action="DOCUMENT_UPLOAD", resource="documents",
        ip=client_ip(request), meta={"id": out.id, "person_id": person_id, "size": out.size},
    )
    return out


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    documents.delete(db, request.app.state.storage, document_id)

    write_log(
        db, user_id=current_user.user_id, action="DOCUMENT_DELETE", resource="documents",
        ip=client_ip(request), meta={"id": document_id},
    )
    return {"message": "Document deleted."}


# Download as attachment under the original file name
@router.get("/{document_id}/download")
def download_document(document_id: str, request: Request, db: Session = Depends(get_db)):
    document = documents.get_document(db, document_id)
    path = documents.file_path(request.app.state.storage, document)
    return FileResponse(str(path), media_type=document.mime_type, filename=document.original_name)


# Same bytes, served inline for the browser viewer
@router.get("/{document_id}/content")
def document_content(document_id: str, request: Request, db: Session = Depends(get_db)):
    document = documents.get_document(db, document_id)
    path = documents.file_path(request.app.state.storage, document)
    return FileResponse(
        str(path),
        media_type=document.mime_type,
        filename=document.original_name,
        content_disposition_type="inline",
    )

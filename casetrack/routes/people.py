# casetrack/routes/people.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.schemas.person import PersonCreate, PersonOut, PersonUpdate
from casetrack.services import people
from casetrack.utils import rate_limit
from casetrack.utils.audit import client_ip, write_log
from casetrack.utils.tokenJWT import TokenClaims, get_current_user

router = APIRouter(
    prefix="/people",
    tags=["People"],
    dependencies=[Depends(get_current_user), Depends(rate_limit.rate_limit(rate_limit.API))],
)


@router.get("", response_model=List[PersonOut])
def list_people(db: Session = Depends(get_db)):
    return [PersonOut.model_validate(p) for p in people.list_people(db)]


@router.get("/{person_id}", response_model=PersonOut)
def get_person(person_id: str, db: Session = Depends(get_db)):
    return PersonOut.model_validate(people.get_person(db, person_id))


@router.post("", response_model=PersonOut, status_code=status.HTTP_201_CREATED)
def create_person(
    payload: PersonCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    person = people.create_person(db, payload.model_dump())
    out = PersonOut.model_validate(person)

    write_log(
        db, user_id=current_user.user_id, action="PERSON_CREATE", resource="people",
        ip=client_ip(request), meta={"id": out.id},
    )
    return out


# Partial update: only the fields present in the body are written
@router.put("/{person_id}", response_model=PersonOut)
def update_person(
    person_id: str,
    payload: PersonUpdate,
    db: Session = Depends(get_db),
):
    person = people.update_person(db, person_id, payload.model_dump(exclude_unset=True))
    return PersonOut.model_validate(person)


@router.delete("/{person_id}")
def delete_person(
    person_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    people.delete_person(db, person_id, storage=request.app.state.storage)

    write_log(
        db, user_id=current_user.user_id, action="PERSON_DELETE", resource="people",
        ip=client_ip(request), meta={"id": person_id},
    )
    return {"message": "Person deleted."}

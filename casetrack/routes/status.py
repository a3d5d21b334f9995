# casetrack/routes/status.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.schemas.person import PersonOut, StatusUpdate
from casetrack.services import status as status_gate
from casetrack.utils import rate_limit
from casetrack.utils.audit import client_ip
from casetrack.utils.tokenJWT import TokenClaims, require_admin

router = APIRouter(
    prefix="/status",
    tags=["Status"],
    dependencies=[Depends(rate_limit.rate_limit(rate_limit.API))],
)


# Change the workflow status of a case (Admin only)
@router.put("/{person_id}", response_model=PersonOut)
def update_status(
    person_id: str,
    payload: StatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin),
):
    person = status_gate.set_status(
        db, person_id, payload.status,
        acting_role=current_user.role.value,
        acting_user_id=current_user.user_id,
        ip=client_ip(request),
    )
    return PersonOut.model_validate(person)

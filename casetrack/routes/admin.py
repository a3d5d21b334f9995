# casetrack/routes/admin.py
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.schemas.user import RoleUpdate, UserPublic
from casetrack.services import credentials
from casetrack.utils import rate_limit
from casetrack.utils.audit import client_ip
from casetrack.utils.tokenJWT import TokenClaims, require_admin

router = APIRouter(
    prefix="/users",
    tags=["Admin"],
    dependencies=[Depends(require_admin), Depends(rate_limit.rate_limit(rate_limit.API))],
)


# List every account (Admin only)
@router.get("", response_model=List[UserPublic])
def get_all_users(db: Session = Depends(get_db)):
    return [UserPublic.model_validate(u) for u in credentials.list_all(db)]


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return UserPublic.model_validate(credentials.get_user(db, user_id))


# Update user role (Admin only, never on oneself)
@router.put("/{user_id}/role", response_model=UserPublic)
def update_user_role(
    user_id: str,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin),
):
    user = credentials.set_role(db, current_user.user_id, user_id, new_role.role, ip=client_ip(request))
    return UserPublic.model_validate(user)

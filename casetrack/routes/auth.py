# casetrack/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.exceptions import InvalidCredentials
from casetrack.schemas import user as schemas
from casetrack.services import credentials
from casetrack.utils import rate_limit
from casetrack.utils.audit import client_ip, write_log
from casetrack.utils.tokenJWT import TokenClaims, create_access_token, get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])

# Lower ceiling for credential checks only
auth_limit = Depends(rate_limit.rate_limit(rate_limit.AUTH))


# Register a new user; the first account ever created becomes admin
@router.post(
    "/register",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[auth_limit],
)
def register(payload: schemas.Credentials, request: Request, db: Session = Depends(get_db)):
    settings = request.app.state.settings
    user = credentials.register(db, payload.username, payload.password, rounds=settings.BCRYPT_ROUNDS)

    write_log(
        db, user_id=user.id, action="REGISTER", resource="auth",
        ip=client_ip(request), meta={"username": user.username, "role": user.role},
    )

    token = create_access_token(user, settings)
    return {"token": token, "user": schemas.UserPublic.model_validate(user)}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse, dependencies=[auth_limit])
def login(payload: schemas.Credentials, request: Request, db: Session = Depends(get_db)):
    try:
        user = credentials.verify(
            db, payload.username, payload.password, rounds=request.app.state.settings.BCRYPT_ROUNDS
        )
    except InvalidCredentials:
        write_log(
            db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
            ip=client_ip(request), meta={"username": payload.username},
        )
        raise

    write_log(
        db, user_id=user.id, action="LOGIN", resource="auth",
        ip=client_ip(request), meta={"username": user.username},
    )

    token = create_access_token(user, request.app.state.settings)
    return {"token": token, "user": schemas.UserPublic.model_validate(user)}


# Identity carried by the presented token
@router.get(
    "/me",
    response_model=schemas.CurrentUser,
    dependencies=[Depends(rate_limit.rate_limit(rate_limit.API))],
)
def me(current_user: TokenClaims = Depends(get_current_user)):
    return {"id": current_user.user_id, "username": current_user.username, "role": current_user.role}

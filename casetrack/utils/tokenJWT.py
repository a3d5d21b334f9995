# casetrack/utils/tokenJWT.py
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from casetrack.config import Settings
from casetrack.exceptions import Forbidden, TokenInvalid, Unauthenticated
from casetrack.models.users import User, UserRole
from casetrack.utils.clock import utcnow

# Missing credentials are answered with 401 by the guard, not by the scheme
bearer_scheme = HTTPBearer(auto_error=False)


# Decoded payload of a verified session token
class TokenClaims(BaseModel):
    sub: str
    username: str
    role: UserRole

    @property
    def user_id(self) -> str:
        return self.sub

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_settings_from_request(request: Request) -> Settings:
    return request.app.state.settings


# Generate a new JWT access token for the given user
def create_access_token(user: User, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    now = utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    """Verify signature and expiry and return the claims.

    Every failure (garbage input, forged signature, expired token, missing
    claims) raises the same ``TokenInvalid``.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return TokenClaims.model_validate(payload)
    except (JWTError, PydanticValidationError) as e:
        raise TokenInvalid() from e


# Retrieve the identity attached to the request's bearer token
def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings_from_request),
) -> TokenClaims:
    # No Authorization header, or not a Bearer one
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    try:
        claims = decode_access_token(credentials.credentials, settings)
    except TokenInvalid:
        raise Forbidden("Invalid or expired authorization token.")
    request.state.user = claims
    return claims


# Admin gate; always runs after authentication
def require_admin(current_user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
    if not current_user.is_admin:
        raise Forbidden("Admin access required.")
    return current_user

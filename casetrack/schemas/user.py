from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from casetrack.models.users import UserRole


# Base configuration: ORM compatibility and camelCase JSON
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# Credentials sent to /auth/register and /auth/login
class Credentials(BaseModel):
    username: str
    password: str


# Public view of a user, never carries the password hash
class UserPublic(ORMBase):
    id: str
    username: str
    role: UserRole
    created_at: datetime


# Token plus the user it was issued for
class AuthResponse(BaseModel):
    token: str
    user: UserPublic


# Claims of the presented token, as returned by /auth/me
class CurrentUser(ORMBase):
    id: str
    username: str
    role: UserRole


# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: str

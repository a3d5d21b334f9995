from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from casetrack.schemas.user import ORMBase


# Mutable fields shared by create and update
class PersonFields(ORMBase):
    middle_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    passport_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


# Schema for creating a new case record
class PersonCreate(PersonFields):
    first_name: str
    last_name: str
    status: str


# Schema for partial updates - all fields optional, unset fields untouched
class PersonUpdate(PersonFields):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[str] = None


# Full case record as returned by the API
class PersonOut(PersonFields):
    id: str
    first_name: str
    last_name: str
    status: str
    created_at: datetime
    updated_at: datetime


# Body of PUT /status/{person_id}
class StatusUpdate(BaseModel):
    status: str

"""
Status transition gate for case records.

Any status may follow any other; the gate only decides *who* may move a case.
Each accepted transition leaves an audit entry with the old and new value.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from casetrack.exceptions import Forbidden, ValidationError
from casetrack.models.person import Person
from casetrack.models.users import UserRole
from casetrack.services.people import get_person
from casetrack.utils.audit import write_log
from casetrack.utils.clock import utcnow

logger = logging.getLogger(__name__)


def set_status(
    db: Session,
    person_id: str,
    new_status: str,
    acting_role: str,
    acting_user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Person:
    if acting_role != UserRole.ADMIN.value:
        raise Forbidden("Admin access required.")

    status = (new_status or "").strip()
    if not status:
        raise ValidationError.single("status", "Status is required.")

    person = get_person(db, person_id)
    previous = person.status

    person.status = status
    person.updated_at = utcnow()
    db.commit()
    db.refresh(person)

    write_log(
        db, user_id=acting_user_id, action="STATUS_CHANGE", resource="people", ip=ip,
        meta={"person_id": person_id, "old": previous, "new": status},
    )
    logger.info("Person %s status %s -> %s", person_id, previous, status)
    return person

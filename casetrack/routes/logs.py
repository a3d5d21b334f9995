# casetrack/routes/logs.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from casetrack.database import get_db
from casetrack.exceptions import ValidationError
from casetrack.models.log import Log
from casetrack.schemas.logs import LogPage, LogResponse
from casetrack.utils import rate_limit
from casetrack.utils.tokenJWT import require_admin

router = APIRouter(
    prefix="/logs",
    tags=["Logs"],
    dependencies=[Depends(require_admin), Depends(rate_limit.rate_limit(rate_limit.API))],
)


def _parse_date(field: str, value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    # A bare date on the upper bound covers the whole day
    if end_of_day and len(value) == 10:
        value += " 23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError.single(field, f"Bad date format: {value}")


# Audit trail, newest first (Admin only)
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[str] = Query(None, description="Filter by acting user id"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by outcome (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status)

    dt_from = _parse_date("date_from", date_from)
    dt_to = _parse_date("date_to", date_to, end_of_day=True)
    if dt_from:
        query = query.filter(Log.ts >= dt_from)
    if dt_to:
        query = query.filter(Log.ts <= dt_to)

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return LogPage(
        items=[LogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=page_size,
    )

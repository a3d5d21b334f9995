from datetime import datetime
from typing import Any, List, Optional

from casetrack.schemas.user import ORMBase


class LogResponse(ORMBase):
    id: int
    user_id: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None


class LogPage(ORMBase):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

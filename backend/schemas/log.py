from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


# One audit trail entry as stored by utils.audit.write_log
class LogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None


class LogPage(BaseModel):
    items: List[LogEntry]
    total: int
    page: int
    page_size: int

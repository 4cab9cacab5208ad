import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from models.log import Log

logger = logging.getLogger(__name__)


def write_log(db: Session, *, user_id, action, resource, status="SUCCESS",
              request: Optional[Request] = None, meta=None):
    """Stage an audit row; it is committed together with the caller's own changes."""
    ip = request.client.host if request is not None and request.client else None
    db.add(Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {}))
    logger.info("%s %s %s user=%s meta=%s", action, resource, status, user_id, meta or {})

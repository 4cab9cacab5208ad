# backend/routes/logs.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from models.users import User
from schemas.log import LogPage
from utils.tokenJWT import role_required

router = APIRouter(prefix="/logs", tags=["Logs"])


# Audit trail for admins, newest entries first
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Exact action, e.g. CART_ADD"),
    resource: Optional[str] = Query(None, description="auth, categories, products, cart or orders"),
    status: Optional[Literal["SUCCESS", "FAIL"]] = Query(None),
    user_id: Optional[int] = Query(None),
    since: Optional[datetime] = Query(None, description="Entries at or after this time"),
    until: Optional[datetime] = Query(None, description="Entries at or before this time"),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action == action.strip().upper())
    if resource:
        query = query.filter(Log.resource == resource.strip().lower())
    if status:
        query = query.filter(Log.status == status)
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if since is not None:
        query = query.filter(Log.ts >= since)
    if until is not None:
        query = query.filter(Log.ts <= until)

    total = query.count()
    offset = (page - 1) * page_size
    entries = []
    if offset < total:
        entries = query.order_by(Log.ts.desc(), Log.id.desc()).offset(offset).limit(page_size).all()

    return {"items": entries, "total": total, "page": page, "page_size": page_size}

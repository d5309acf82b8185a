# backend/routes/logs.py
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from errors import ValidationError
from models.log import Log
from models.users import User
from schemas.log import LogPage
from utils.tokenJWT import role_required

router = APIRouter(prefix="/logs", tags=["Logs"])


def _day(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field} must be a YYYY-MM-DD date", {field: "invalid date"})


# Audit trail, newest first (admin only)
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by acting user ID"),
    order_id: Optional[int] = Query(None, description="Filter by order ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="Last day (inclusive), YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    start, end = _day(date_from, "date_from"), _day(date_to, "date_to")
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if order_id is not None:
        query = query.filter(Log.order_id == order_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status.upper())
    if start:
        query = query.filter(Log.ts >= datetime.combine(start, time.min))
    if end:
        query = query.filter(Log.ts < datetime.combine(end + timedelta(days=1), time.min))

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": logs, "total": total, "page": page, "page_size": page_size}

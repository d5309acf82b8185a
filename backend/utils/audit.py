import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

# Append an audit entry. The audited change is already committed, so a failure here is only logged.
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None, order_id=None):
    entry = Log(user_id=user_id, order_id=order_id, action=action, resource=resource,
                status=status, ip=ip, meta=meta or {})
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to write audit log %s/%s: %s", resource, action, e)

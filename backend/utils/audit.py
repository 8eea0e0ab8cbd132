import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.log import Log

logger = logging.getLogger(__name__)


# Actions recorded in the audit trail
class AuditAction:
    REGISTER = "REGISTER"
    LOGIN = "LOGIN"
    PRODUCT_CREATE = "PRODUCT_CREATE"
    PRODUCT_UPDATE = "PRODUCT_UPDATE"
    PRODUCT_DELETE = "PRODUCT_DELETE"
    ORDER_CREATE = "ORDER_CREATE"


def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None, best_effort=False):
    """Commit one audit row.

    With ``best_effort`` a database failure is logged and rolled back instead of
    raised; use it once the audited change is already committed.
    """
    db.add(Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {}))
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        if not best_effort:
            raise
        logger.exception(f"Audit entry {action} for user {user_id} was not saved")


def client_ip(request) -> str | None:
    return request.client.host if request is not None and request.client else None

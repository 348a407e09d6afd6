"""Shared API helpers for route handlers."""

from typing import TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from corporate_actions.exceptions import CorporateActionError, ErrorCode
from database import Base

T = TypeVar("T", bound=Base)

NOT_FOUND_CODES = {
    ErrorCode.ACTION_NOT_FOUND,
    ErrorCode.LOT_NOT_FOUND,
    ErrorCode.UNKNOWN_SYMBOL,
}

CONFLICT_CODES = {
    ErrorCode.NOT_PENDING,
    ErrorCode.ALREADY_APPLIED,
    ErrorCode.NOT_APPLIED,
    ErrorCode.CANNOT_REVERSE_OUT_OF_ORDER,
    ErrorCode.CANNOT_APPLY_OUT_OF_ORDER,
    ErrorCode.FUTURE_EX_DATE,
}


def get_or_404(db: Session, model: type[T], entity_id: str, detail: str = "Not found") -> T:
    """Fetch a single entity by primary key or raise 404.

    Args:
        db: Database session.
        model: SQLAlchemy model class.
        entity_id: Primary key value.
        detail: Error message for the 404 response.

    Returns:
        The entity instance.

    Raises:
        HTTPException: 404 if the entity doesn't exist.
    """
    entity = db.query(model).filter(model.id == entity_id).first()
    if not entity:
        raise HTTPException(status_code=404, detail=detail)
    return entity


def status_code_for(code: ErrorCode) -> int:
    """HTTP status for a corporate action error code."""
    if code in NOT_FOUND_CODES:
        return 404
    if code in CONFLICT_CODES:
        return 409
    if code == ErrorCode.LOT_STORE_UNAVAILABLE:
        return 503
    return 400


def corporate_action_http_error(error: CorporateActionError) -> HTTPException:
    """Translate a CorporateActionError into an HTTPException.

    The detail is ``{"code": ..., "message": ...}`` so clients can branch
    on the code.
    """
    return HTTPException(
        status_code=status_code_for(error.code),
        detail={"code": error.code.value, "message": str(error)},
    )

"""Corporate action API endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.helpers import corporate_action_http_error, get_or_404
from corporate_actions.exceptions import CorporateActionError
from corporate_actions.types import ActionStatus
from database import get_db
from models import Security
from schemas.corporate_action import (
    ActionPreviewResponse,
    ApplyResponse,
    BatchApplyResponse,
    CorporateActionCreate,
    CorporateActionDetailResponse,
    CorporateActionResponse,
    ReverseRequest,
)
from services.corporate_action_applier import CorporateActionApplier
from services.corporate_action_service import CorporateActionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/corporate-actions", tags=["corporate-actions"])


@router.post("/", response_model=CorporateActionResponse, status_code=201)
def create_corporate_action(
    data: CorporateActionCreate,
    db: Session = Depends(get_db),
):
    """Record a new pending corporate action."""
    try:
        action = CorporateActionService.create_action(db, data)
        db.commit()
        db.refresh(action)
        return action
    except CorporateActionError as e:
        raise corporate_action_http_error(e)


@router.get("/", response_model=list[CorporateActionResponse])
def list_corporate_actions(
    symbol_id: Optional[str] = None,
    status: Optional[ActionStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """List corporate actions, most recent ex-date first."""
    return CorporateActionService.list_actions(
        db, symbol_id=symbol_id, status=status, start=start_date, end=end_date
    )


@router.get("/pending", response_model=list[CorporateActionResponse])
def list_pending_corporate_actions(
    symbol_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Pending actions whose ex-date has been reached, in apply order."""
    return CorporateActionService.list_pending(db, symbol_id=symbol_id)


@router.get("/{action_id}", response_model=CorporateActionDetailResponse)
def get_corporate_action(action_id: str, db: Session = Depends(get_db)):
    """Get an action with its adjustment records."""
    try:
        return CorporateActionService.get_action(db, action_id)
    except CorporateActionError as e:
        raise corporate_action_http_error(e)


@router.get("/{action_id}/preview", response_model=ActionPreviewResponse)
def preview_corporate_action(action_id: str, db: Session = Depends(get_db)):
    """Project the adjustments a pending action would make."""
    try:
        preview = CorporateActionApplier(db).preview(action_id)
        return ActionPreviewResponse.model_validate(preview)
    except CorporateActionError as e:
        raise corporate_action_http_error(e)


@router.post("/{action_id}/apply", response_model=ApplyResponse)
def apply_corporate_action(
    action_id: str,
    applied_by: str = Query(default="api"),
    db: Session = Depends(get_db),
):
    """Apply a pending action to the lot ledger."""
    try:
        result = CorporateActionApplier(db).apply_single(action_id, applied_by=applied_by)
        db.commit()
        return ApplyResponse.model_validate(result)
    except CorporateActionError as e:
        raise corporate_action_http_error(e)


@router.post("/symbols/{symbol_id}/apply-pending", response_model=BatchApplyResponse)
def apply_pending_for_symbol(
    symbol_id: str,
    applied_by: str = Query(default="api"),
    db: Session = Depends(get_db),
):
    """Apply every due pending action for a security in ex-date order."""
    get_or_404(db, Security, symbol_id, "Security not found")
    result = CorporateActionApplier(db).batch_apply_pending(symbol_id, applied_by=applied_by)
    db.commit()
    return BatchApplyResponse.model_validate(result)


@router.post("/{action_id}/reverse", response_model=CorporateActionResponse)
def reverse_corporate_action(
    action_id: str,
    data: ReverseRequest,
    db: Session = Depends(get_db),
):
    """Undo an applied action, restoring every lot it touched."""
    try:
        action = CorporateActionApplier(db).reverse(action_id, reason=data.reason)
        db.commit()
        db.refresh(action)
        return action
    except CorporateActionError as e:
        raise corporate_action_http_error(e)


@router.post("/{action_id}/cancel", response_model=CorporateActionResponse)
def cancel_corporate_action(action_id: str, db: Session = Depends(get_db)):
    """Cancel a pending action."""
    try:
        action = CorporateActionService.cancel(db, action_id)
        db.commit()
        db.refresh(action)
        return action
    except CorporateActionError as e:
        raise corporate_action_http_error(e)

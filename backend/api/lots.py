"""Lot management API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import corporate_action_http_error, get_or_404
from corporate_actions.exceptions import CorporateActionError
from database import get_db
from models import Account, Security
from schemas.lot import HoldingLotCreate, HoldingLotResponse
from services.lot_ledger_service import LotLedgerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["lots"])
securities_router = APIRouter(prefix="/api/securities", tags=["lots"])


@router.post("/{account_id}/lots", response_model=HoldingLotResponse, status_code=201)
def create_lot(
    account_id: str,
    lot_data: HoldingLotCreate,
    db: Session = Depends(get_db),
):
    """Create a new manual lot."""
    get_or_404(db, Account, account_id, "Account not found")
    try:
        lot = LotLedgerService(db).add_manual_lot(account_id, lot_data)
        db.commit()
        db.refresh(lot)
        return lot
    except CorporateActionError as e:
        raise corporate_action_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@securities_router.get("/{security_id}/lots", response_model=list[HoldingLotResponse])
def get_security_lots(
    security_id: str,
    include_closed: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    """Get lots for a security across all accounts, oldest first."""
    get_or_404(db, Security, security_id, "Security not found")
    return LotLedgerService(db).get_lots_for_security(security_id, include_closed)

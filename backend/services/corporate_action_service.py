"""Service for recording and querying corporate actions."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from corporate_actions.exceptions import (
    ActionNotFoundError,
    NotPendingError,
    UnknownSymbolError,
)
from corporate_actions.registry import CalculatorRegistry
from corporate_actions.types import ActionStatus, ActionTerms, ActionType
from models import CorporateAction
from schemas.corporate_action import CorporateActionCreate
from services.security_service import SecurityService

logger = logging.getLogger(__name__)

# Columns copied verbatim from the create request onto the record
_PARAMETER_FIELDS = (
    "ratio_from",
    "ratio_to",
    "amount_per_share",
    "currency",
    "qualified",
    "exchange_ratio",
    "cash_per_share",
    "acquirer_share_price",
    "basis_allocation_percent",
    "record_date",
    "pay_date",
    "description",
    "source",
)


def terms_from_action(action) -> ActionTerms:
    """Build calculator input from a CorporateAction (or a create request).

    Enum values are passed through as stored; calculators reject unknown
    values with ``unknown_action_type``.
    """
    merger_type = action.merger_type
    if merger_type is not None and hasattr(merger_type, "value"):
        merger_type = merger_type.value
    return ActionTerms(
        action_type=ActionType(action.action_type),
        symbol_id=action.symbol_id,
        ex_date=action.ex_date,
        action_id=getattr(action, "id", None),
        new_symbol_id=action.new_symbol_id,
        ratio_from=action.ratio_from,
        ratio_to=action.ratio_to,
        amount_per_share=action.amount_per_share,
        qualified=bool(action.qualified),
        merger_type=merger_type,
        exchange_ratio=action.exchange_ratio,
        cash_per_share=action.cash_per_share,
        acquirer_share_price=action.acquirer_share_price,
        basis_allocation_percent=action.basis_allocation_percent,
        description=action.description or "",
    )


class CorporateActionService:
    """Create, look up and cancel corporate action records.

    Applying and reversing live in ``CorporateActionApplier``; this service
    only deals with records in their pending life.
    """

    @staticmethod
    def create_action(
        db: Session,
        data: CorporateActionCreate,
        registry: Optional[CalculatorRegistry] = None,
    ) -> CorporateAction:
        """Validate and persist a new pending action.

        A spinoff target given as ``new_ticker`` is registered as a security
        if it does not exist yet.

        Raises:
            UnknownSymbolError: The affected (or spinoff) security is unknown.
            CorporateActionError: Type-specific parameters are invalid.
        """
        registry = registry or CalculatorRegistry.default()
        calculator = registry.get(data.action_type)

        if not SecurityService.exists(db, data.symbol_id):
            raise UnknownSymbolError(f"Unknown security: {data.symbol_id}")

        new_symbol_id = data.new_symbol_id
        if data.new_ticker:
            new_symbol_id = SecurityService.ensure_exists(
                db, data.new_ticker.strip().upper(), data.new_security_name
            ).id
        elif new_symbol_id and not SecurityService.exists(db, new_symbol_id):
            raise UnknownSymbolError(f"Unknown spinoff security: {new_symbol_id}")

        action = CorporateAction(
            action_type=data.action_type.value,
            symbol_id=data.symbol_id,
            new_symbol_id=new_symbol_id,
            ex_date=data.ex_date,
            merger_type=data.merger_type.value if data.merger_type else None,
            status=ActionStatus.PENDING.value,
        )
        for name in _PARAMETER_FIELDS:
            setattr(action, name, getattr(data, name))

        calculator.validate(terms_from_action(action))

        db.add(action)
        db.flush()
        logger.info(
            "Recorded %s %s for security %s (ex-date %s)",
            action.action_type,
            action.id,
            action.symbol_id,
            action.ex_date,
        )
        return action

    @staticmethod
    def get_action(db: Session, action_id: str) -> CorporateAction:
        action = db.query(CorporateAction).filter(CorporateAction.id == action_id).first()
        if not action:
            raise ActionNotFoundError(f"Corporate action not found: {action_id}")
        return action

    @staticmethod
    def list_by_symbol(db: Session, symbol_id: str) -> list[CorporateAction]:
        """All actions for a security, most recent ex-date first."""
        return (
            db.query(CorporateAction)
            .filter(CorporateAction.symbol_id == symbol_id)
            .order_by(CorporateAction.ex_date.desc(), CorporateAction.created_at.desc())
            .all()
        )

    @staticmethod
    def list_pending(
        db: Session,
        symbol_id: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> list[CorporateAction]:
        """Pending actions effective on or before ``as_of`` (default today).

        Ordered by ex-date ascending with creation time as tiebreak, which
        is the order they must be applied in.
        """
        as_of = as_of or date.today()
        query = db.query(CorporateAction).filter(
            CorporateAction.status == ActionStatus.PENDING.value,
            CorporateAction.ex_date <= as_of,
        )
        if symbol_id:
            query = query.filter(CorporateAction.symbol_id == symbol_id)
        return query.order_by(
            CorporateAction.ex_date.asc(),
            CorporateAction.created_at.asc(),
            CorporateAction.id.asc(),
        ).all()

    @staticmethod
    def list_by_status(db: Session, status: ActionStatus | str) -> list[CorporateAction]:
        return (
            db.query(CorporateAction)
            .filter(CorporateAction.status == ActionStatus(status).value)
            .order_by(CorporateAction.ex_date.asc(), CorporateAction.created_at.asc())
            .all()
        )

    @staticmethod
    def list_by_date_range(db: Session, start: date, end: date) -> list[CorporateAction]:
        """Actions with ex-date in [start, end], ascending."""
        return (
            db.query(CorporateAction)
            .filter(CorporateAction.ex_date >= start, CorporateAction.ex_date <= end)
            .order_by(CorporateAction.ex_date.asc(), CorporateAction.created_at.asc())
            .all()
        )

    @staticmethod
    def list_actions(
        db: Session,
        symbol_id: Optional[str] = None,
        status: Optional[ActionStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[CorporateAction]:
        """Filtered listing used by the API, ex-date descending."""
        query = db.query(CorporateAction)
        if symbol_id:
            query = query.filter(CorporateAction.symbol_id == symbol_id)
        if status:
            query = query.filter(CorporateAction.status == ActionStatus(status).value)
        if start:
            query = query.filter(CorporateAction.ex_date >= start)
        if end:
            query = query.filter(CorporateAction.ex_date <= end)
        return query.order_by(
            CorporateAction.ex_date.desc(), CorporateAction.created_at.desc()
        ).all()

    @staticmethod
    def cancel(db: Session, action_id: str) -> CorporateAction:
        """Move a pending action to cancelled.

        Raises:
            ActionNotFoundError: No such action.
            NotPendingError: The action is not pending.
        """
        action = CorporateActionService.get_action(db, action_id)
        updated = (
            db.query(CorporateAction)
            .filter(
                CorporateAction.id == action_id,
                CorporateAction.status == ActionStatus.PENDING.value,
            )
            .update(
                {CorporateAction.status: ActionStatus.CANCELLED.value},
                synchronize_session=False,
            )
        )
        if not updated:
            raise NotPendingError(
                f"Corporate action {action_id} is {action.status}, only pending actions can be cancelled"
            )
        db.flush()
        db.refresh(action)
        logger.info("Cancelled corporate action %s", action_id)
        return action

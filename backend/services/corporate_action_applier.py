"""Applies and reverses corporate actions against the lot ledger.

Each apply or reverse runs inside one savepoint (``LotStore.transaction``):
the status flip, every lot mutation and every LotAdjustment row either all
land or none do. The status flip is a conditional UPDATE, so of two
concurrent applies of the same action only one can claim it. Callers commit
the outer transaction.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from corporate_actions.exceptions import (
    AlreadyAppliedError,
    ApplyOrderError,
    CorporateActionError,
    FutureExDateError,
    LotStoreUnavailableError,
    NotAppliedError,
    NotPendingError,
    ReversalOrderError,
)
from corporate_actions.protocol import LotStore
from corporate_actions.registry import CalculatorRegistry
from corporate_actions.rounding import BASIS_QUANTUM, QUANTITY_QUANTUM, RESIDUAL_QUANTUM
from corporate_actions.types import (
    ZERO,
    ActionStatus,
    ActionType,
    AdjustmentPlan,
    CalculationContext,
    PlannedAdjustment,
)
from models import CorporateAction, LotAdjustment
from services.corporate_action_service import CorporateActionService, terms_from_action
from services.lot_ledger_service import LotLedgerService
from services.security_service import SecurityService

logger = logging.getLogger(__name__)


@dataclass
class ActionPreview:
    """What applying a pending action would do, without doing it."""

    corporate_action_id: str
    action_type: ActionType
    ex_date: date
    plan: AdjustmentPlan

    @property
    def affected_lots(self) -> int:
        return self.plan.affected_lots

    @property
    def estimated_adjustments(self) -> int:
        return len(self.plan.adjustments)

    @property
    def lots_created(self) -> int:
        return self.plan.lots_created

    @property
    def total_basis_before(self) -> Decimal:
        return self.plan.total_basis_before

    @property
    def total_basis_after(self) -> Decimal:
        return self.plan.total_basis_after

    @property
    def total_basis_residual(self) -> Decimal:
        return self.plan.total_basis_residual

    @property
    def total_cash_received(self) -> Decimal:
        return self.plan.total_cash_received

    @property
    def total_realized_gain(self) -> Decimal:
        return self.plan.total_realized_gain

    @property
    def gross_income(self) -> Decimal:
        return self.plan.gross_income

    @property
    def withholding(self) -> Decimal:
        return self.plan.withholding

    @property
    def net_income(self) -> Decimal:
        return self.plan.net_income

    @property
    def adjustments(self) -> list[PlannedAdjustment]:
        return self.plan.adjustments


@dataclass
class ApplyResult:
    """Outcome of a successful apply."""

    corporate_action_id: str
    status: ActionStatus
    adjustments_created: int
    lots_created: int
    total_realized_gain: Decimal = ZERO
    gross_income: Decimal = ZERO
    withholding: Decimal = ZERO
    net_income: Decimal = ZERO


@dataclass
class ActionOutcome:
    """One action's line in a batch run."""

    corporate_action_id: str
    ex_date: date
    action_type: ActionType
    ok: bool
    adjustments_created: int = 0
    error_code: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class BatchApplyResult:
    symbol_id: str
    per_action_results: list[ActionOutcome] = field(default_factory=list)

    @property
    def actions_processed(self) -> int:
        return len(self.per_action_results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.per_action_results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.per_action_results if not r.ok)

    @property
    def total_adjustments(self) -> int:
        return sum(r.adjustments_created for r in self.per_action_results)


def _quantity(value: Decimal) -> Decimal:
    return Decimal(value).quantize(QUANTITY_QUANTUM, rounding=ROUND_HALF_UP)


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(BASIS_QUANTUM, rounding=ROUND_HALF_UP)


def _residual(value: Decimal) -> Decimal:
    return Decimal(value).quantize(RESIDUAL_QUANTUM, rounding=ROUND_HALF_UP)


class CorporateActionApplier:
    """Orchestrates calculators, the lot store and adjustment records.

    Example:
        applier = CorporateActionApplier(db)
        result = applier.apply_single(action_id, applied_by="ops")
        db.commit()
    """

    def __init__(
        self,
        db: Session,
        lot_store: Optional[LotStore] = None,
        registry: Optional[CalculatorRegistry] = None,
    ):
        self.db = db
        self.lot_store = lot_store or LotLedgerService(db)
        self.registry = registry or CalculatorRegistry.default()

    # --- Preview ---

    def preview(self, action_id: str) -> ActionPreview:
        """Project the adjustments a pending action would make. Read-only."""
        action = CorporateActionService.get_action(self.db, action_id)
        self._require_pending(action)

        plan = self._calculate(action)
        return ActionPreview(
            corporate_action_id=action.id,
            action_type=ActionType(action.action_type),
            ex_date=action.ex_date,
            plan=plan,
        )

    # --- Apply ---

    def apply_single(self, action_id: str, applied_by: str = "system") -> ApplyResult:
        """Apply one pending action.

        Raises:
            AlreadyAppliedError: The action was already applied.
            NotPendingError: The action is reversed, cancelled, or was
                claimed concurrently.
            FutureExDateError: The ex-date has not been reached.
            ApplyOrderError: An action with a later ex-date on the same
                security is already applied.
            LotStoreUnavailableError: The database failed mid-apply.
            CorporateActionError: Validation or calculation failed.
        """
        action = CorporateActionService.get_action(self.db, action_id)
        self._require_pending(action)
        if action.ex_date > date.today():
            raise FutureExDateError(
                f"Corporate action {action.id} has ex-date {action.ex_date} in the future"
            )
        later = self._applied_after_ex_date(action)
        if later is not None:
            raise ApplyOrderError(
                f"Corporate action {later.id} (ex-date {later.ex_date}) is already applied; "
                f"reverse it before applying {action.id} (ex-date {action.ex_date})"
            )

        terms = terms_from_action(action)
        calculator = self.registry.get(terms.action_type)
        calculator.validate(terms)
        context = self._context(action)

        try:
            with self.lot_store.transaction():
                self._claim(
                    action.id,
                    ActionStatus.PENDING,
                    {
                        CorporateAction.status: ActionStatus.APPLIED.value,
                        CorporateAction.applied_at: datetime.now(timezone.utc),
                        CorporateAction.applied_by: applied_by,
                    },
                )
                lots = self.lot_store.lots_open_before(action.symbol_id, action.ex_date)
                plan = calculator.calculate(lots, terms, context)
                self._write_plan(action, plan)
        except SQLAlchemyError as e:
            logger.error("Lot store failure applying %s: %s", action_id, e)
            raise LotStoreUnavailableError(
                f"Lot store unavailable while applying {action_id}: {e}"
            ) from e

        self.db.refresh(action)
        logger.info(
            "Applied %s %s: %d adjustments, %d lots created",
            action.action_type,
            action.id,
            len(plan.adjustments),
            plan.lots_created,
        )
        return ApplyResult(
            corporate_action_id=action.id,
            status=ActionStatus.APPLIED,
            adjustments_created=len(plan.adjustments),
            lots_created=plan.lots_created,
            total_realized_gain=plan.total_realized_gain,
            gross_income=plan.gross_income,
            withholding=plan.withholding,
            net_income=plan.net_income,
        )

    def batch_apply_pending(
        self, symbol_id: str, applied_by: str = "system"
    ) -> BatchApplyResult:
        """Apply every due pending action for a security, oldest ex-date first.

        A failing action is recorded and left pending; later actions are
        still attempted.
        """
        result = BatchApplyResult(symbol_id=symbol_id)
        for action in CorporateActionService.list_pending(self.db, symbol_id=symbol_id):
            outcome = ActionOutcome(
                corporate_action_id=action.id,
                ex_date=action.ex_date,
                action_type=ActionType(action.action_type),
                ok=False,
            )
            try:
                applied = self.apply_single(action.id, applied_by=applied_by)
                outcome.ok = True
                outcome.adjustments_created = applied.adjustments_created
            except CorporateActionError as e:
                logger.warning(
                    "Failed to apply %s %s: [%s] %s",
                    action.action_type,
                    action.id,
                    e.code.value,
                    e,
                )
                outcome.error_code = e.code.value
                outcome.error_message = str(e)
            result.per_action_results.append(outcome)

        logger.info(
            "Batch apply for %s: %d processed, %d succeeded, %d failed, %d adjustments",
            symbol_id,
            result.actions_processed,
            result.succeeded,
            result.failed,
            result.total_adjustments,
        )
        return result

    # --- Reverse ---

    def reverse(self, action_id: str, reason: Optional[str] = None) -> CorporateAction:
        """Undo an applied action from its adjustment records.

        Mutated lots are restored to their recorded ``*_before`` values and
        lots the action created are deleted. Only the most recent applied
        action on a security can be reversed.

        Raises:
            NotAppliedError: The action is not applied.
            ReversalOrderError: A later applied action touches the same
                security.
            LotStoreUnavailableError: The database failed mid-reversal.
        """
        action = CorporateActionService.get_action(self.db, action_id)
        if action.status != ActionStatus.APPLIED.value:
            raise NotAppliedError(
                f"Corporate action {action_id} is {action.status}, only applied actions can be reversed"
            )
        later = self._later_applied_action(action)
        if later is not None:
            raise ReversalOrderError(
                f"Corporate action {later.id} (ex-date {later.ex_date}) was applied after "
                f"{action_id}; reverse it first"
            )

        try:
            with self.lot_store.transaction():
                self._claim(
                    action.id,
                    ActionStatus.APPLIED,
                    {
                        CorporateAction.status: ActionStatus.REVERSED.value,
                        CorporateAction.reversed_at: datetime.now(timezone.utc),
                        CorporateAction.reversal_reason: reason,
                    },
                )
                adjustments = (
                    self.db.query(LotAdjustment)
                    .filter(LotAdjustment.corporate_action_id == action.id)
                    .order_by(LotAdjustment.fifo_order.asc())
                    .all()
                )
                created_lot_ids = []
                for adjustment in adjustments:
                    if adjustment.created_lot:
                        created_lot_ids.append(adjustment.lot_id)
                    elif adjustment.lot_mutated:
                        self.lot_store.mutate_lot(
                            adjustment.lot_id,
                            Decimal(adjustment.quantity_before),
                            Decimal(adjustment.unit_basis_before),
                        )
                for adjustment in adjustments:
                    self.db.delete(adjustment)
                self.db.flush()
                for lot_id in created_lot_ids:
                    self.lot_store.delete_lot(lot_id)
        except SQLAlchemyError as e:
            logger.error("Lot store failure reversing %s: %s", action_id, e)
            raise LotStoreUnavailableError(
                f"Lot store unavailable while reversing {action_id}: {e}"
            ) from e

        self.db.refresh(action)
        logger.info(
            "Reversed %s %s: %d adjustments undone, %d lots deleted",
            action.action_type,
            action.id,
            len(adjustments),
            len(created_lot_ids),
        )
        return action

    # --- Helpers ---

    @staticmethod
    def _require_pending(action: CorporateAction) -> None:
        if action.status == ActionStatus.APPLIED.value:
            raise AlreadyAppliedError(f"Corporate action {action.id} is already applied")
        if action.status != ActionStatus.PENDING.value:
            raise NotPendingError(f"Corporate action {action.id} is {action.status}")

    def _context(self, action: CorporateAction) -> CalculationContext:
        increment = SecurityService.quantity_increment(self.db, action.symbol_id)
        new_increment = settings.DEFAULT_QUANTITY_INCREMENT
        if action.new_symbol_id:
            new_increment = SecurityService.quantity_increment(self.db, action.new_symbol_id)
        return CalculationContext(
            quantity_increment=increment,
            new_quantity_increment=new_increment,
            basis_tolerance=settings.BASIS_TOLERANCE,
            qualified_holding_days=settings.QUALIFIED_DIVIDEND_MIN_HOLDING_DAYS,
            withholding_rate=settings.DIVIDEND_WITHHOLDING_RATE,
        )

    def _calculate(self, action: CorporateAction) -> AdjustmentPlan:
        terms = terms_from_action(action)
        calculator = self.registry.get(terms.action_type)
        lots = self.lot_store.lots_open_before(action.symbol_id, action.ex_date)
        return calculator.calculate(lots, terms, self._context(action))

    def _claim(self, action_id: str, expected: ActionStatus, values: dict) -> None:
        """Conditionally move an action out of ``expected`` status."""
        claimed = (
            self.db.query(CorporateAction)
            .filter(
                CorporateAction.id == action_id,
                CorporateAction.status == expected.value,
            )
            .update(values, synchronize_session=False)
        )
        if not claimed:
            if expected == ActionStatus.APPLIED:
                raise NotAppliedError(f"Corporate action {action_id} is no longer applied")
            raise NotPendingError(f"Corporate action {action_id} is no longer pending")

    def _write_plan(self, action: CorporateAction, plan: AdjustmentPlan) -> None:
        """Persist lot changes and one LotAdjustment per planned adjustment."""
        for planned in plan.adjustments:
            if planned.created_lot:
                lot_id = self.lot_store.create_lot(
                    account_id=planned.account_id,
                    symbol_id=planned.symbol_id,
                    quantity=planned.quantity_after,
                    unit_basis=planned.unit_basis_after,
                    purchase_date=planned.purchase_date,
                    corporate_action_id=action.id,
                )
            else:
                lot_id = planned.lot_id
                if planned.closes_lot and planned.unit_basis_after == planned.unit_basis_before:
                    self.lot_store.close_lot(lot_id)
                elif planned.mutates_lot:
                    self.lot_store.mutate_lot(
                        lot_id, planned.quantity_after, planned.unit_basis_after
                    )

            self.db.add(
                LotAdjustment(
                    corporate_action_id=action.id,
                    lot_id=lot_id,
                    account_id=planned.account_id,
                    security_id=planned.symbol_id,
                    adjustment_type=planned.adjustment_type.value,
                    fifo_order=planned.fifo_order,
                    quantity_before=_quantity(planned.quantity_before),
                    quantity_after=_quantity(planned.quantity_after),
                    unit_basis_before=_money(planned.unit_basis_before),
                    unit_basis_after=_money(planned.unit_basis_after),
                    total_basis_before=_money(planned.total_basis_before),
                    total_basis_after=_money(planned.total_basis_after),
                    cash_received=_money(planned.cash_received),
                    realized_gain=_money(planned.realized_gain),
                    deferred_gain=_money(planned.deferred_gain),
                    income_amount=_money(planned.income_amount),
                    tax_treatment=planned.tax_treatment.value if planned.tax_treatment else None,
                    cash_in_lieu_quantity=_quantity(planned.cash_in_lieu_quantity),
                    cash_in_lieu_basis=_money(planned.cash_in_lieu_basis),
                    basis_residual=_residual(planned.basis_residual),
                    created_lot=planned.created_lot,
                    lot_mutated=planned.mutates_lot,
                    reason=planned.reason[:500] or None,
                )
            )
        self.db.flush()

    def _applied_on_same_securities(self, action: CorporateAction):
        """Other applied actions on any security ``action`` touches."""
        symbols = [action.symbol_id]
        if action.new_symbol_id:
            symbols.append(action.new_symbol_id)
        return self.db.query(CorporateAction).filter(
            CorporateAction.id != action.id,
            CorporateAction.status == ActionStatus.APPLIED.value,
            or_(
                CorporateAction.symbol_id.in_(symbols),
                CorporateAction.new_symbol_id.in_(symbols),
            ),
        )

    def _applied_after_ex_date(self, action: CorporateAction) -> Optional[CorporateAction]:
        return (
            self._applied_on_same_securities(action)
            .filter(CorporateAction.ex_date > action.ex_date)
            .order_by(CorporateAction.ex_date.desc())
            .first()
        )

    def _later_applied_action(self, action: CorporateAction) -> Optional[CorporateAction]:
        """An action applied after ``action`` on any security it touched.

        Reversal restores ``*_before`` snapshots, so it has to unwind in
        apply order; ex-date only breaks ties.
        """
        return (
            self._applied_on_same_securities(action)
            .filter(
                or_(
                    CorporateAction.applied_at > action.applied_at,
                    and_(
                        CorporateAction.applied_at == action.applied_at,
                        CorporateAction.ex_date > action.ex_date,
                    ),
                )
            )
            .order_by(CorporateAction.applied_at.desc())
            .first()
        )

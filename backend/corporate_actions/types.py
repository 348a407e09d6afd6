"""Value types shared by the corporate action calculators.

Calculators never touch ORM objects. The applier converts lots into
``LotSnapshot`` values and action records into ``ActionTerms``, and gets
back an ``AdjustmentPlan`` describing every lot mutation to persist.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class ActionType(str, Enum):
    """Kind of corporate event."""

    SPLIT = "split"
    CASH_DIVIDEND = "cash_dividend"
    MERGER = "merger"
    SPINOFF = "spinoff"
    RETURN_OF_CAPITAL = "return_of_capital"


class MergerType(str, Enum):
    """Consideration paid to holders in a merger."""

    STOCK_FOR_STOCK = "stock_for_stock"
    CASH = "cash"
    MIXED = "mixed"


class ActionStatus(str, Enum):
    """Processing status of a corporate action."""

    PENDING = "pending"
    APPLIED = "applied"
    REVERSED = "reversed"
    CANCELLED = "cancelled"


class AdjustmentType(str, Enum):
    """What an adjustment record did to its lot."""

    SPLIT = "split"
    DIVIDEND_INCOME = "dividend_income"
    MERGER_STOCK = "merger_stock"
    MERGER_CASH = "merger_cash"
    MERGER_MIXED = "merger_mixed"
    SPINOFF_PARENT = "spinoff_parent"
    SPINOFF_NEW_LOT = "spinoff_new_lot"
    RETURN_OF_CAPITAL = "return_of_capital"


class TaxTreatment(str, Enum):
    """Tax character of the amount recorded on an adjustment."""

    QUALIFIED = "qualified"
    ORDINARY = "ordinary"
    DEFERRED = "deferred"
    TAXABLE = "taxable"
    PARTIALLY_TAXABLE = "partially_taxable"


@dataclass(frozen=True)
class LotSnapshot:
    """Read-only view of an open lot as of an action's ex-date."""

    lot_id: str
    account_id: str
    symbol_id: str
    quantity: Decimal
    unit_basis: Decimal
    purchase_date: date

    @property
    def total_basis(self) -> Decimal:
        return self.quantity * self.unit_basis


@dataclass(frozen=True)
class ActionTerms:
    """Parameters of a corporate action, detached from persistence."""

    action_type: ActionType
    symbol_id: str
    ex_date: date
    action_id: str | None = None
    new_symbol_id: str | None = None
    ratio_from: Decimal | None = None
    ratio_to: Decimal | None = None
    amount_per_share: Decimal | None = None
    qualified: bool = False
    merger_type: MergerType | None = None
    exchange_ratio: Decimal | None = None
    cash_per_share: Decimal | None = None
    acquirer_share_price: Decimal | None = None
    basis_allocation_percent: Decimal | None = None
    description: str = ""


@dataclass(frozen=True)
class CalculationContext:
    """Environment-dependent knobs applied to a calculation.

    ``quantity_increment`` belongs to the affected security and
    ``new_quantity_increment`` to the spun-off security.
    """

    quantity_increment: Decimal = Decimal("0.00000001")
    new_quantity_increment: Decimal = Decimal("0.00000001")
    basis_tolerance: Decimal = Decimal("0.01")
    qualified_holding_days: int = 61
    withholding_rate: Decimal = ZERO


@dataclass(frozen=True)
class PlannedAdjustment:
    """One lot touched by an action.

    ``total_basis_before``/``total_basis_after`` hold exact figures used for
    conservation checks; ``unit_basis_after`` is the storage value,
    quantized to the ledger's per-unit precision. ``basis_residual`` is
    ``total_basis_after - quantity_after * unit_basis_after``, recorded so
    the stored lot plus its residual reproduces the exact basis.
    """

    adjustment_type: AdjustmentType
    account_id: str
    symbol_id: str
    fifo_order: int
    purchase_date: date
    quantity_before: Decimal
    quantity_after: Decimal
    unit_basis_before: Decimal
    unit_basis_after: Decimal
    total_basis_before: Decimal
    total_basis_after: Decimal
    lot_id: str | None = None
    created_lot: bool = False
    cash_received: Decimal = ZERO
    realized_gain: Decimal = ZERO
    deferred_gain: Decimal = ZERO
    income_amount: Decimal = ZERO
    tax_treatment: TaxTreatment | None = None
    cash_in_lieu_quantity: Decimal = ZERO
    cash_in_lieu_basis: Decimal = ZERO
    basis_residual: Decimal = ZERO
    reason: str = ""

    @property
    def closes_lot(self) -> bool:
        return not self.created_lot and self.quantity_after == 0

    @property
    def mutates_lot(self) -> bool:
        """True when the ledger row must change (or be created)."""
        if self.created_lot:
            return True
        return (
            self.quantity_after != self.quantity_before
            or self.unit_basis_after != self.unit_basis_before
        )


@dataclass
class AdjustmentPlan:
    """Deterministic output of a calculator run."""

    action_type: ActionType
    adjustments: list[PlannedAdjustment] = field(default_factory=list)
    withholding_rate: Decimal = ZERO

    @property
    def affected_lots(self) -> int:
        return sum(1 for a in self.adjustments if not a.created_lot)

    @property
    def lots_created(self) -> int:
        return sum(1 for a in self.adjustments if a.created_lot)

    @property
    def total_basis_before(self) -> Decimal:
        return sum((a.total_basis_before for a in self.adjustments), ZERO)

    @property
    def total_basis_after(self) -> Decimal:
        return sum((a.total_basis_after for a in self.adjustments), ZERO)

    @property
    def total_basis_residual(self) -> Decimal:
        return sum((a.basis_residual for a in self.adjustments), ZERO)

    @property
    def total_cash_received(self) -> Decimal:
        return sum((a.cash_received for a in self.adjustments), ZERO)

    @property
    def total_realized_gain(self) -> Decimal:
        return sum((a.realized_gain for a in self.adjustments), ZERO)

    @property
    def total_cash_in_lieu_basis(self) -> Decimal:
        return sum((a.cash_in_lieu_basis for a in self.adjustments), ZERO)

    @property
    def gross_income(self) -> Decimal:
        return sum((a.income_amount for a in self.adjustments), ZERO)

    @property
    def withholding(self) -> Decimal:
        # Flat deduction on the aggregate, not per lot
        return self.gross_income * self.withholding_rate

    @property
    def net_income(self) -> Decimal:
        return self.gross_income - self.withholding

"""Spinoff calculator.

Holders keep their parent shares and receive shares of a newly tracked
security. Basis is split between the two; nothing is recognized:

- spinoff quantity = quantity x exchange ratio
- spinoff basis = basis x allocation percent / 100
- parent basis after = basis - spinoff basis (parent quantity unchanged)

The new lot inherits the parent lot's account and purchase date, so the
holding period carries over.
"""

from decimal import Decimal

from corporate_actions.exceptions import (
    InvalidAmountError,
    MissingParameterError,
    NoAffectedLotsError,
)
from corporate_actions.rounding import check_residual, rebase, unit_basis_for
from corporate_actions.types import (
    ZERO,
    ActionTerms,
    ActionType,
    AdjustmentPlan,
    AdjustmentType,
    CalculationContext,
    LotSnapshot,
    PlannedAdjustment,
    TaxTreatment,
)
from corporate_actions.validation import require_positive_amount, require_positive_ratio

HUNDRED = Decimal("100")


class SpinoffCalculator:
    """Basis allocation between a parent security and its spinoff."""

    action_type = ActionType.SPINOFF

    def validate(self, terms: ActionTerms) -> None:
        if not terms.new_symbol_id:
            raise MissingParameterError("New security is required for a spinoff")
        if terms.new_symbol_id == terms.symbol_id:
            raise MissingParameterError("Spinoff security must differ from the parent")
        require_positive_ratio(terms.exchange_ratio, "Spinoff exchange ratio")
        percent = require_positive_amount(
            terms.basis_allocation_percent, "Basis allocation percent"
        )
        if percent > HUNDRED:
            raise InvalidAmountError(
                f"Basis allocation percent cannot exceed 100, got {percent}"
            )

    def calculate(
        self,
        lots: list[LotSnapshot],
        terms: ActionTerms,
        context: CalculationContext,
    ) -> AdjustmentPlan:
        self.validate(terms)
        if not lots:
            raise NoAffectedLotsError(
                f"No open lots for security {terms.symbol_id} before {terms.ex_date}"
            )

        fraction = terms.basis_allocation_percent / HUNDRED
        reason = (
            f"Spinoff: {terms.exchange_ratio} ratio, "
            f"{terms.basis_allocation_percent}% of basis allocated"
        )
        if terms.description:
            reason = f"{reason} - {terms.description}"

        plan = AdjustmentPlan(action_type=self.action_type)
        order = 0
        for lot in lots:
            original_basis = lot.total_basis
            spinoff_basis = original_basis * fraction
            parent_basis = original_basis - spinoff_basis

            parent_unit_basis = unit_basis_for(parent_basis, lot.quantity)
            parent_residual = check_residual(
                lot.quantity, parent_unit_basis, parent_basis, context.basis_tolerance
            )

            spun = rebase(
                lot.quantity * terms.exchange_ratio,
                spinoff_basis,
                context.new_quantity_increment,
                context.basis_tolerance,
            )

            order += 1
            plan.adjustments.append(
                PlannedAdjustment(
                    adjustment_type=AdjustmentType.SPINOFF_PARENT,
                    lot_id=lot.lot_id,
                    account_id=lot.account_id,
                    symbol_id=lot.symbol_id,
                    fifo_order=order,
                    purchase_date=lot.purchase_date,
                    quantity_before=lot.quantity,
                    quantity_after=lot.quantity,
                    unit_basis_before=lot.unit_basis,
                    unit_basis_after=parent_unit_basis,
                    total_basis_before=original_basis,
                    total_basis_after=parent_basis,
                    tax_treatment=TaxTreatment.DEFERRED,
                    # A spinoff share count that rounds to nothing is paid out
                    cash_in_lieu_quantity=spun.cash_in_lieu_quantity if spun.quantity == 0 else ZERO,
                    cash_in_lieu_basis=spun.cash_in_lieu_basis,
                    basis_residual=parent_residual,
                    reason=reason,
                )
            )

            if spun.quantity == 0:
                continue

            order += 1
            plan.adjustments.append(
                PlannedAdjustment(
                    adjustment_type=AdjustmentType.SPINOFF_NEW_LOT,
                    account_id=lot.account_id,
                    symbol_id=terms.new_symbol_id,
                    fifo_order=order,
                    purchase_date=lot.purchase_date,
                    quantity_before=ZERO,
                    quantity_after=spun.quantity,
                    unit_basis_before=ZERO,
                    unit_basis_after=spun.unit_basis,
                    total_basis_before=ZERO,
                    total_basis_after=spun.total_basis,
                    created_lot=True,
                    tax_treatment=TaxTreatment.DEFERRED,
                    cash_in_lieu_quantity=spun.cash_in_lieu_quantity,
                    basis_residual=spun.basis_residual,
                    reason=reason,
                )
            )
        return plan

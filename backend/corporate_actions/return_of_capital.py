"""Return of capital calculator.

A non-dividend distribution reduces basis instead of producing income.
Once basis reaches zero, the remainder of the distribution is a capital
gain. Quantity is unchanged.
"""

from corporate_actions.rounding import check_residual, unit_basis_for
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
from corporate_actions.validation import require_positive_amount


class ReturnOfCapitalCalculator:
    action_type = ActionType.RETURN_OF_CAPITAL

    def validate(self, terms: ActionTerms) -> None:
        require_positive_amount(terms.amount_per_share, "Distribution amount per share")

    def calculate(
        self,
        lots: list[LotSnapshot],
        terms: ActionTerms,
        context: CalculationContext,
    ) -> AdjustmentPlan:
        self.validate(terms)
        reason = f"{terms.amount_per_share} per share return of capital"
        if terms.description:
            reason = f"{reason} - {terms.description}"

        plan = AdjustmentPlan(action_type=self.action_type)
        for order, lot in enumerate(lots, start=1):
            distribution = lot.quantity * terms.amount_per_share
            basis_before = lot.total_basis
            excess = max(ZERO, distribution - basis_before)
            basis_after = basis_before - distribution + excess

            unit_basis_after = unit_basis_for(basis_after, lot.quantity)
            residual = check_residual(
                lot.quantity, unit_basis_after, basis_after, context.basis_tolerance
            )

            plan.adjustments.append(
                PlannedAdjustment(
                    adjustment_type=AdjustmentType.RETURN_OF_CAPITAL,
                    lot_id=lot.lot_id,
                    account_id=lot.account_id,
                    symbol_id=lot.symbol_id,
                    fifo_order=order,
                    purchase_date=lot.purchase_date,
                    quantity_before=lot.quantity,
                    quantity_after=lot.quantity,
                    unit_basis_before=lot.unit_basis,
                    unit_basis_after=unit_basis_after,
                    total_basis_before=basis_before,
                    total_basis_after=basis_after,
                    cash_received=distribution,
                    realized_gain=excess,
                    tax_treatment=TaxTreatment.TAXABLE if excess else TaxTreatment.DEFERRED,
                    basis_residual=residual,
                    reason=reason,
                )
            )
        return plan

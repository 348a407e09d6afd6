"""Stock split calculator.

For a split of ``ratio_from`` -> ``ratio_to``:

- new quantity = quantity x ratio_to / ratio_from
- new unit basis = unit basis x ratio_from / ratio_to
- total basis is unchanged

2:1 forward split (ratio 1 -> 2): 100 shares @ $200 -> 200 shares @ $100.
1:2 reverse split (ratio 2 -> 1): 200 shares @ $50 -> 100 shares @ $100.

Quantities are rounded down to the security's tradable increment and the
full basis stays on the whole shares; the fractional remainder is reported
as cash in lieu.
"""

import logging

from corporate_actions.rounding import rebase
from corporate_actions.types import (
    ActionTerms,
    ActionType,
    AdjustmentPlan,
    AdjustmentType,
    CalculationContext,
    LotSnapshot,
    PlannedAdjustment,
    TaxTreatment,
)
from corporate_actions.validation import require_positive_ratio

logger = logging.getLogger(__name__)


class SplitCalculator:
    """Forward and reverse stock splits."""

    action_type = ActionType.SPLIT

    def validate(self, terms: ActionTerms) -> None:
        require_positive_ratio(terms.ratio_from, "Split ratio from")
        require_positive_ratio(terms.ratio_to, "Split ratio to")

    def calculate(
        self,
        lots: list[LotSnapshot],
        terms: ActionTerms,
        context: CalculationContext,
    ) -> AdjustmentPlan:
        self.validate(terms)
        factor = terms.ratio_to / terms.ratio_from
        reason = f"{terms.ratio_to}:{terms.ratio_from} stock split"
        if terms.description:
            reason = f"{reason} - {terms.description}"

        plan = AdjustmentPlan(action_type=self.action_type)
        for order, lot in enumerate(lots, start=1):
            position = rebase(
                lot.quantity * factor,
                lot.total_basis,
                context.quantity_increment,
                context.basis_tolerance,
                unit_basis_if_closed=lot.unit_basis,
            )
            if position.cash_in_lieu_quantity:
                logger.info(
                    "Split leaves %s fractional shares as cash in lieu on lot %s",
                    position.cash_in_lieu_quantity,
                    lot.lot_id,
                )
            plan.adjustments.append(
                PlannedAdjustment(
                    adjustment_type=AdjustmentType.SPLIT,
                    lot_id=lot.lot_id,
                    account_id=lot.account_id,
                    symbol_id=lot.symbol_id,
                    fifo_order=order,
                    purchase_date=lot.purchase_date,
                    quantity_before=lot.quantity,
                    quantity_after=position.quantity,
                    unit_basis_before=lot.unit_basis,
                    unit_basis_after=position.unit_basis,
                    total_basis_before=lot.total_basis,
                    total_basis_after=position.total_basis,
                    tax_treatment=TaxTreatment.DEFERRED,
                    cash_in_lieu_quantity=position.cash_in_lieu_quantity,
                    cash_in_lieu_basis=position.cash_in_lieu_basis,
                    basis_residual=position.basis_residual,
                    reason=reason,
                )
            )
        return plan

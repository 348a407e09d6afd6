"""Cash dividend calculator.

Dividends do not change a lot's quantity or basis; each lot held before
the ex-date yields an income event:

    income = quantity x amount per share

Qualified treatment is decided per lot. A lot whose holding period at the
ex-date is shorter than the configured minimum (61 days by default) is
taxed as ordinary income even when the action is marked qualified.
"""

from datetime import date

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
from corporate_actions.validation import require_positive_amount


def holding_period_days(purchase_date: date, ex_date: date) -> int:
    """Days a lot has been held as of the ex-date."""
    return (ex_date - purchase_date).days


def classify_dividend(
    qualified: bool, purchase_date: date, ex_date: date, min_holding_days: int
) -> TaxTreatment:
    """Tax treatment of a dividend received on a single lot."""
    if not qualified:
        return TaxTreatment.ORDINARY
    if holding_period_days(purchase_date, ex_date) < min_holding_days:
        return TaxTreatment.ORDINARY
    return TaxTreatment.QUALIFIED


class DividendCalculator:
    """Cash dividends with per-lot qualified/ordinary classification."""

    action_type = ActionType.CASH_DIVIDEND

    def validate(self, terms: ActionTerms) -> None:
        require_positive_amount(terms.amount_per_share, "Dividend amount per share")

    def calculate(
        self,
        lots: list[LotSnapshot],
        terms: ActionTerms,
        context: CalculationContext,
    ) -> AdjustmentPlan:
        self.validate(terms)
        reason = f"{terms.amount_per_share} per share dividend"
        if terms.description:
            reason = f"{reason} - {terms.description}"

        plan = AdjustmentPlan(
            action_type=self.action_type,
            withholding_rate=context.withholding_rate,
        )
        for order, lot in enumerate(lots, start=1):
            treatment = classify_dividend(
                terms.qualified,
                lot.purchase_date,
                terms.ex_date,
                context.qualified_holding_days,
            )
            plan.adjustments.append(
                PlannedAdjustment(
                    adjustment_type=AdjustmentType.DIVIDEND_INCOME,
                    lot_id=lot.lot_id,
                    account_id=lot.account_id,
                    symbol_id=lot.symbol_id,
                    fifo_order=order,
                    purchase_date=lot.purchase_date,
                    quantity_before=lot.quantity,
                    quantity_after=lot.quantity,
                    unit_basis_before=lot.unit_basis,
                    unit_basis_after=lot.unit_basis,
                    total_basis_before=lot.total_basis,
                    total_basis_after=lot.total_basis,
                    income_amount=lot.quantity * terms.amount_per_share,
                    tax_treatment=treatment,
                    reason=reason,
                )
            )
        return plan

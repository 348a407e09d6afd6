"""Merger and acquisition calculator.

Stock-for-stock merger (tax-deferred):
- new quantity = quantity x exchange ratio
- total basis carried over unchanged, purchase date preserved

Cash merger (taxable, position closed):
- cash received = quantity x cash per share
- realized gain = cash received - basis

Mixed consideration (boot recognition):
- stock value = quantity x exchange ratio x acquirer share price
- total gain = stock value + cash received - basis
- recognized gain = max(0, min(total gain, cash received))
- new basis = basis + recognized gain - cash received, carried on the
  shares received with the original purchase date

A loss is never recognized in a mixed exchange; it stays embedded in the
carried-over basis.
"""

import logging
from decimal import Decimal

from corporate_actions.exceptions import NoAffectedLotsError, UnknownActionTypeError
from corporate_actions.rounding import rebase
from corporate_actions.types import (
    ZERO,
    ActionTerms,
    ActionType,
    AdjustmentPlan,
    AdjustmentType,
    CalculationContext,
    LotSnapshot,
    MergerType,
    PlannedAdjustment,
    TaxTreatment,
)
from corporate_actions.validation import require_positive_amount, require_positive_ratio

logger = logging.getLogger(__name__)


def mixed_recognized_gain(total_gain: Decimal, cash_received: Decimal) -> Decimal:
    """Gain recognized on boot: the lesser of total gain and cash, never negative."""
    return max(ZERO, min(total_gain, cash_received))


class MergerCalculator:
    """Stock-for-stock, cash and mixed consideration mergers."""

    action_type = ActionType.MERGER

    def __init__(self):
        self._handlers = {
            MergerType.STOCK_FOR_STOCK: self._stock_for_stock,
            MergerType.CASH: self._cash,
            MergerType.MIXED: self._mixed,
        }

    def validate(self, terms: ActionTerms) -> None:
        merger_type = self._merger_type(terms)
        if merger_type in (MergerType.STOCK_FOR_STOCK, MergerType.MIXED):
            require_positive_ratio(terms.exchange_ratio, "Exchange ratio")
        if merger_type in (MergerType.CASH, MergerType.MIXED):
            require_positive_amount(terms.cash_per_share, "Cash per share")
        if merger_type == MergerType.MIXED:
            require_positive_amount(terms.acquirer_share_price, "Acquirer share price")

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

        handler = self._handlers[self._merger_type(terms)]
        plan = AdjustmentPlan(action_type=self.action_type)
        for order, lot in enumerate(lots, start=1):
            plan.adjustments.append(handler(lot, order, terms, context))
        return plan

    @staticmethod
    def _merger_type(terms: ActionTerms) -> MergerType:
        if terms.merger_type is None:
            raise UnknownActionTypeError("Merger type is required")
        try:
            return MergerType(terms.merger_type)
        except ValueError:
            raise UnknownActionTypeError(f"Unsupported merger type: {terms.merger_type}") from None

    @staticmethod
    def _reason(label: str, terms: ActionTerms) -> str:
        if terms.description:
            return f"{label} - {terms.description}"
        return label

    def _stock_for_stock(
        self,
        lot: LotSnapshot,
        order: int,
        terms: ActionTerms,
        context: CalculationContext,
    ) -> PlannedAdjustment:
        position = rebase(
            lot.quantity * terms.exchange_ratio,
            lot.total_basis,
            context.quantity_increment,
            context.basis_tolerance,
            unit_basis_if_closed=lot.unit_basis,
        )
        return PlannedAdjustment(
            adjustment_type=AdjustmentType.MERGER_STOCK,
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
            reason=self._reason(
                f"Stock-for-stock merger: {terms.exchange_ratio} exchange ratio", terms
            ),
        )

    def _cash(
        self,
        lot: LotSnapshot,
        order: int,
        terms: ActionTerms,
        context: CalculationContext,
    ) -> PlannedAdjustment:
        cash_received = lot.quantity * terms.cash_per_share
        return PlannedAdjustment(
            adjustment_type=AdjustmentType.MERGER_CASH,
            lot_id=lot.lot_id,
            account_id=lot.account_id,
            symbol_id=lot.symbol_id,
            fifo_order=order,
            purchase_date=lot.purchase_date,
            quantity_before=lot.quantity,
            quantity_after=ZERO,
            unit_basis_before=lot.unit_basis,
            unit_basis_after=lot.unit_basis,
            total_basis_before=lot.total_basis,
            total_basis_after=ZERO,
            cash_received=cash_received,
            realized_gain=cash_received - lot.total_basis,
            tax_treatment=TaxTreatment.TAXABLE,
            reason=self._reason(f"Cash merger: {terms.cash_per_share} per share", terms),
        )

    def _mixed(
        self,
        lot: LotSnapshot,
        order: int,
        terms: ActionTerms,
        context: CalculationContext,
    ) -> PlannedAdjustment:
        basis = lot.total_basis
        cash_received = lot.quantity * terms.cash_per_share
        exact_quantity = lot.quantity * terms.exchange_ratio
        stock_value = exact_quantity * terms.acquirer_share_price
        total_gain = stock_value + cash_received - basis
        recognized = mixed_recognized_gain(total_gain, cash_received)
        new_basis = basis + recognized - cash_received

        position = rebase(
            exact_quantity,
            new_basis,
            context.quantity_increment,
            context.basis_tolerance,
            unit_basis_if_closed=lot.unit_basis,
        )
        if total_gain <= 0 and cash_received > 0:
            logger.debug(
                "Mixed merger on lot %s: no gain recognized (economic gain %s)",
                lot.lot_id,
                total_gain,
            )
        return PlannedAdjustment(
            adjustment_type=AdjustmentType.MERGER_MIXED,
            lot_id=lot.lot_id,
            account_id=lot.account_id,
            symbol_id=lot.symbol_id,
            fifo_order=order,
            purchase_date=lot.purchase_date,
            quantity_before=lot.quantity,
            quantity_after=position.quantity,
            unit_basis_before=lot.unit_basis,
            unit_basis_after=position.unit_basis,
            total_basis_before=basis,
            total_basis_after=position.total_basis,
            cash_received=cash_received,
            realized_gain=recognized,
            deferred_gain=total_gain - recognized,
            tax_treatment=TaxTreatment.PARTIALLY_TAXABLE,
            cash_in_lieu_quantity=position.cash_in_lieu_quantity,
            cash_in_lieu_basis=position.cash_in_lieu_basis,
            basis_residual=position.basis_residual,
            reason=self._reason(
                f"Mixed merger: {terms.exchange_ratio} ratio + {terms.cash_per_share} cash",
                terms,
            ),
        )

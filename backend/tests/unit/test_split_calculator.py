"""Tests for SplitCalculator."""

from datetime import date
from decimal import Decimal

import pytest

from corporate_actions.exceptions import CalculationPrecisionError, ErrorCode, InvalidRatioError
from corporate_actions.split import SplitCalculator
from corporate_actions.types import (
    ActionTerms,
    ActionType,
    AdjustmentType,
    CalculationContext,
    LotSnapshot,
    TaxTreatment,
)

EX_DATE = date(2024, 6, 1)


def _lot(quantity: str, unit_basis: str, lot_id: str = "lot-1") -> LotSnapshot:
    return LotSnapshot(
        lot_id=lot_id,
        account_id="acct-1",
        symbol_id="sec-1",
        quantity=Decimal(quantity),
        unit_basis=Decimal(unit_basis),
        purchase_date=date(2023, 1, 15),
    )


def _terms(ratio_from, ratio_to, description: str = "") -> ActionTerms:
    return ActionTerms(
        action_type=ActionType.SPLIT,
        symbol_id="sec-1",
        ex_date=EX_DATE,
        ratio_from=Decimal(ratio_from) if ratio_from is not None else None,
        ratio_to=Decimal(ratio_to) if ratio_to is not None else None,
        description=description,
    )


@pytest.fixture
def calculator():
    return SplitCalculator()


class TestForwardSplit:
    def test_two_for_one(self, calculator):
        """100 @ $200 -> 200 @ $100."""
        plan = calculator.calculate([_lot("100", "200")], _terms("1", "2"), CalculationContext())

        assert len(plan.adjustments) == 1
        adj = plan.adjustments[0]
        assert adj.adjustment_type == AdjustmentType.SPLIT
        assert adj.quantity_before == Decimal("100")
        assert adj.quantity_after == Decimal("200")
        assert adj.unit_basis_after == Decimal("100")
        assert adj.total_basis_after == Decimal("20000")
        assert adj.tax_treatment == TaxTreatment.DEFERRED
        assert adj.cash_in_lieu_quantity == 0
        assert adj.mutates_lot

    def test_value_conserved_across_lots(self, calculator):
        lots = [
            _lot("100", "200", "lot-1"),
            _lot("37", "151.13", "lot-2"),
            _lot("0.5", "98.765432", "lot-3"),
        ]
        plan = calculator.calculate(lots, _terms("2", "7"), CalculationContext())

        tolerance = CalculationContext().basis_tolerance
        for adj in plan.adjustments:
            stored_value = adj.quantity_after * adj.unit_basis_after
            assert abs(stored_value - adj.total_basis_before) <= tolerance
        assert plan.total_basis_after == plan.total_basis_before

    def test_fifo_order_follows_input(self, calculator):
        lots = [_lot("10", "5", "a"), _lot("20", "6", "b")]
        plan = calculator.calculate(lots, _terms("1", "3"), CalculationContext())

        assert [a.lot_id for a in plan.adjustments] == ["a", "b"]
        assert [a.fifo_order for a in plan.adjustments] == [1, 2]

    def test_reason_includes_description(self, calculator):
        plan = calculator.calculate(
            [_lot("1", "1")], _terms("1", "4", "4-for-1 split"), CalculationContext()
        )
        assert "4-for-1 split" in plan.adjustments[0].reason


class TestReverseSplit:
    def test_one_for_two(self, calculator):
        """200 @ $50 -> 100 @ $100."""
        plan = calculator.calculate([_lot("200", "50")], _terms("2", "1"), CalculationContext())

        adj = plan.adjustments[0]
        assert adj.quantity_after == Decimal("100")
        assert adj.unit_basis_after == Decimal("100")

    def test_fractional_shares_rounded_down_to_increment(self, calculator):
        """1:3 reverse split of 100 whole shares leaves 33 and a fraction."""
        context = CalculationContext(quantity_increment=Decimal("1"))
        plan = calculator.calculate([_lot("100", "10")], _terms("3", "1"), context)

        adj = plan.adjustments[0]
        assert adj.quantity_after == Decimal("33")
        assert Decimal("0.33") < adj.cash_in_lieu_quantity < Decimal("0.34")
        # Full basis stays on the whole shares
        assert adj.total_basis_after == Decimal("1000")
        assert adj.unit_basis_after == Decimal("30.303030")

    def test_position_smaller_than_one_share_is_closed(self, calculator):
        context = CalculationContext(quantity_increment=Decimal("1"))
        plan = calculator.calculate([_lot("2", "25")], _terms("10", "1"), context)

        adj = plan.adjustments[0]
        assert adj.quantity_after == 0
        assert adj.closes_lot
        assert adj.unit_basis_after == Decimal("25")
        assert adj.cash_in_lieu_basis == Decimal("50")
        assert adj.total_basis_after == 0


class TestSplitValidation:
    @pytest.mark.parametrize(
        "ratio_from,ratio_to",
        [("0", "2"), ("1", "0"), ("-1", "2"), (None, "2"), ("1", None)],
    )
    def test_invalid_ratio(self, calculator, ratio_from, ratio_to):
        with pytest.raises(InvalidRatioError) as exc_info:
            calculator.calculate([_lot("1", "1")], _terms(ratio_from, ratio_to), CalculationContext())
        assert exc_info.value.code == ErrorCode.INVALID_RATIO

    def test_no_lots_is_empty_plan(self, calculator):
        plan = calculator.calculate([], _terms("1", "2"), CalculationContext())
        assert plan.adjustments == []
        assert plan.affected_lots == 0

    def test_coarse_unit_basis_raises(self, calculator, monkeypatch):
        """A unit basis rounded to cents misses $1,000 by a dollar on 300 shares."""
        monkeypatch.setattr(
            "corporate_actions.rounding.unit_basis_for",
            lambda total, quantity: (total / quantity).quantize(Decimal("0.01")),
        )
        with pytest.raises(CalculationPrecisionError) as exc_info:
            calculator.calculate([_lot("100", "10")], _terms("1", "3"), CalculationContext())
        assert exc_info.value.code == ErrorCode.CALCULATION_PRECISION_ERROR


class TestLargePositions:
    def test_three_for_one_on_thirty_thousand_shares(self, calculator):
        """30,000 @ $100 -> 90,000 @ $33.333333; the $0.03 left over is recorded."""
        plan = calculator.calculate(
            [_lot("30000", "100")], _terms("1", "3"), CalculationContext()
        )

        adj = plan.adjustments[0]
        assert adj.quantity_after == Decimal("90000")
        assert adj.unit_basis_after == Decimal("33.333333")
        assert adj.total_basis_after == Decimal("3000000")
        assert adj.basis_residual == Decimal("0.03")
        assert adj.quantity_after * adj.unit_basis_after + adj.basis_residual == Decimal("3000000")

    def test_residual_zero_when_basis_divides_evenly(self, calculator):
        plan = calculator.calculate([_lot("100", "200")], _terms("1", "2"), CalculationContext())
        assert plan.adjustments[0].basis_residual == 0

"""Fractional-share rounding and basis reconciliation helpers."""

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from corporate_actions.exceptions import CalculationPrecisionError, InvalidAmountError
from corporate_actions.types import ZERO

# Match the ledger column scales: Numeric(18, 8) quantities, Numeric(18, 6) basis
QUANTITY_QUANTUM = Decimal("0.00000001")
BASIS_QUANTUM = Decimal("0.000001")
# quantity x unit basis carries at most 14 decimals
RESIDUAL_QUANTUM = Decimal("0.00000000000001")


@dataclass(frozen=True)
class RebasedPosition:
    """A lot's new quantity and unit basis after rounding.

    ``total_basis`` is the exact basis carried by the remaining shares and
    ``basis_residual`` is the part of it that ``quantity * unit_basis``
    does not reproduce. When rounding is material, the fractional quantity
    is reported as ``cash_in_lieu_quantity``; if nothing is left, the whole
    basis moves to ``cash_in_lieu_basis``.
    """

    quantity: Decimal
    unit_basis: Decimal
    total_basis: Decimal
    basis_residual: Decimal = ZERO
    cash_in_lieu_quantity: Decimal = ZERO
    cash_in_lieu_basis: Decimal = ZERO


def round_quantity(quantity: Decimal, increment: Decimal) -> tuple[Decimal, Decimal]:
    """Round a quantity down to a tradable increment.

    Returns ``(rounded, remainder)``.
    """
    if increment is None or increment <= 0:
        raise InvalidAmountError(f"Quantity increment must be positive, got {increment}")
    units = (quantity / increment).to_integral_value(rounding=ROUND_DOWN)
    rounded = (units * increment).quantize(QUANTITY_QUANTUM, rounding=ROUND_DOWN)
    return rounded, quantity - rounded


def unit_basis_for(total_basis: Decimal, quantity: Decimal) -> Decimal:
    """Per-unit basis at ledger precision."""
    return (total_basis / quantity).quantize(BASIS_QUANTUM, rounding=ROUND_HALF_UP)


def residual_allowance(quantity: Decimal, tolerance: Decimal) -> Decimal:
    """Largest residual a ledger-precision unit basis can leave.

    Half a basis quantum per share, plus the configured ``tolerance``.
    """
    return abs(quantity) * BASIS_QUANTUM / 2 + tolerance


def check_residual(
    quantity: Decimal, unit_basis: Decimal, total_basis: Decimal, tolerance: Decimal
) -> Decimal:
    """Reconcile ``quantity * unit_basis`` against ``total_basis``.

    Returns the signed residual ``total_basis - quantity * unit_basis``,
    the basis the stored per-unit figure leaves unrepresented. Raises
    CalculationPrecisionError when it exceeds ``residual_allowance``.
    """
    residual = total_basis - quantity * unit_basis
    allowance = residual_allowance(quantity, tolerance)
    if abs(residual) > allowance:
        raise CalculationPrecisionError(
            f"Rounding residual {residual} exceeds allowance {allowance} "
            f"({quantity} x {unit_basis} vs basis {total_basis})"
        )
    return residual


def rebase(
    exact_quantity: Decimal,
    total_basis: Decimal,
    increment: Decimal,
    tolerance: Decimal,
    unit_basis_if_closed: Decimal = ZERO,
) -> RebasedPosition:
    """Spread ``total_basis`` over ``exact_quantity`` rounded to ``increment``.

    The whole basis stays on the whole shares; the quantization residual
    is returned alongside so the ledger can account for it.
    """
    quantity, remainder = round_quantity(exact_quantity, increment)
    if quantity == 0:
        return RebasedPosition(
            quantity=ZERO,
            unit_basis=unit_basis_if_closed,
            total_basis=ZERO,
            cash_in_lieu_quantity=remainder,
            cash_in_lieu_basis=total_basis,
        )

    unit_basis = unit_basis_for(total_basis, quantity)
    residual = check_residual(quantity, unit_basis, total_basis, tolerance)
    return RebasedPosition(
        quantity=quantity,
        unit_basis=unit_basis,
        total_basis=total_basis,
        basis_residual=residual,
        cash_in_lieu_quantity=remainder,
    )

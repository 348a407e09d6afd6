"""Protocols for the corporate action engine.

``Calculator`` is implemented once per action type and selected through
the registry. ``LotStore`` is the contract the engine needs from the lot
ledger; the SQLAlchemy implementation lives in
``services.lot_ledger_service``.
"""

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Protocol

from corporate_actions.types import (
    ActionTerms,
    ActionType,
    AdjustmentPlan,
    CalculationContext,
    LotSnapshot,
)


class Calculator(Protocol):
    """Pure function of lots + action terms -> adjustment plan."""

    @property
    def action_type(self) -> ActionType:
        """The action type this calculator handles."""
        ...

    def validate(self, terms: ActionTerms) -> None:
        """Check type-specific parameters.

        Raises:
            CorporateActionError: If a parameter is missing or out of range.
        """
        ...

    def calculate(
        self,
        lots: list[LotSnapshot],
        terms: ActionTerms,
        context: CalculationContext,
    ) -> AdjustmentPlan:
        """Compute the adjustments for ``lots`` (already FIFO ordered).

        Must not mutate its inputs or perform I/O.
        """
        ...


class LotStore(Protocol):
    """Lot ledger operations used by the applier."""

    def lots_open_before(self, symbol_id: str, as_of: date) -> list[LotSnapshot]:
        """Open lots for a security acquired before ``as_of``, oldest first."""
        ...

    def mutate_lot(self, lot_id: str, new_quantity: Decimal, new_unit_basis: Decimal) -> None:
        ...

    def create_lot(
        self,
        account_id: str,
        symbol_id: str,
        quantity: Decimal,
        unit_basis: Decimal,
        purchase_date: date,
        corporate_action_id: str | None = None,
    ) -> str:
        """Create a lot and return its id."""
        ...

    def close_lot(self, lot_id: str) -> None:
        ...

    def delete_lot(self, lot_id: str) -> None:
        ...

    def transaction(self) -> AbstractContextManager:
        """Atomic unit: commits on success, rolls back on exception."""
        ...

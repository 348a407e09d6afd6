"""Lot ledger backed by the ``holding_lots`` table.

Implements the ``LotStore`` protocol the corporate action applier needs:
FIFO queries, in-place lot mutation, lot creation/closure/deletion and a
savepoint-based ``transaction()``. Also provides the plain CRUD used by the
lots API.
"""

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from corporate_actions.exceptions import LotNotFoundError, UnknownSymbolError
from corporate_actions.types import LotSnapshot
from models import HoldingLot, Security
from schemas.lot import HoldingLotCreate

logger = logging.getLogger(__name__)


class LotLedgerService:
    """Lot ledger operations bound to one database session."""

    def __init__(self, db: Session):
        self.db = db

    # --- Transaction ---

    @contextmanager
    def transaction(self):
        """Run the enclosed block in a savepoint.

        The savepoint is released on success and rolled back on any
        exception; the outer transaction is committed by the caller.
        """
        with self.db.begin_nested():
            yield

    # --- Queries ---

    def lots_open_before(self, symbol_id: str, as_of: date) -> list[LotSnapshot]:
        """Open lots for a security acquired strictly before ``as_of``.

        Ordered FIFO: acquisition date ascending, then creation time.
        """
        lots = (
            self.db.query(HoldingLot)
            .filter(
                HoldingLot.security_id == symbol_id,
                HoldingLot.is_closed.is_(False),
                HoldingLot.current_quantity > 0,
                HoldingLot.acquisition_date < as_of,
            )
            .order_by(
                HoldingLot.acquisition_date.asc(),
                HoldingLot.created_at.asc(),
                HoldingLot.id.asc(),
            )
            .all()
        )
        return [self._snapshot(lot) for lot in lots]

    def get_lots_for_security(
        self, security_id: str, include_closed: bool = False
    ) -> list[HoldingLot]:
        """Get lots for a security across accounts, ordered by acquisition date."""
        query = self.db.query(HoldingLot).filter_by(security_id=security_id)
        if not include_closed:
            query = query.filter_by(is_closed=False)
        return query.order_by(HoldingLot.acquisition_date.asc(), HoldingLot.created_at.asc()).all()

    # --- Mutation ---

    def mutate_lot(self, lot_id: str, new_quantity: Decimal, new_unit_basis: Decimal) -> None:
        """Overwrite a lot's quantity and unit basis.

        A zero quantity closes the lot; a positive one reopens it.
        """
        lot = self._get(lot_id)
        lot.current_quantity = new_quantity
        lot.cost_basis_per_unit = new_unit_basis
        lot.is_closed = new_quantity == 0
        self.db.flush()
        logger.debug(
            "Mutated lot %s: %s @ %s", lot_id, new_quantity, new_unit_basis
        )

    def close_lot(self, lot_id: str) -> None:
        """Zero a lot's quantity and mark it closed; basis per unit is kept."""
        lot = self._get(lot_id)
        lot.current_quantity = Decimal("0")
        lot.is_closed = True
        self.db.flush()
        logger.debug("Closed lot %s", lot_id)

    def create_lot(
        self,
        account_id: str,
        symbol_id: str,
        quantity: Decimal,
        unit_basis: Decimal,
        purchase_date: date,
        corporate_action_id: str | None = None,
    ) -> str:
        """Create an open lot and return its id.

        Lots created by a corporate action are tagged with its id and
        ``source="corporate_action"``.
        """
        security = self.db.query(Security).filter_by(id=symbol_id).first()
        if not security:
            raise UnknownSymbolError(f"Unknown security: {symbol_id}")

        lot = HoldingLot(
            account_id=account_id,
            security_id=symbol_id,
            ticker=security.ticker,
            acquisition_date=purchase_date,
            cost_basis_per_unit=unit_basis,
            original_quantity=quantity,
            current_quantity=quantity,
            is_closed=False,
            source="corporate_action" if corporate_action_id else "manual",
            corporate_action_id=corporate_action_id,
        )
        self.db.add(lot)
        self.db.flush()
        logger.debug(
            "Created lot %s: %s shares of %s in account %s",
            lot.id,
            quantity,
            security.ticker,
            account_id,
        )
        return lot.id

    def delete_lot(self, lot_id: str) -> None:
        lot = self._get(lot_id)
        self.db.delete(lot)
        self.db.flush()
        logger.debug("Deleted lot %s", lot_id)

    def add_manual_lot(self, account_id: str, lot_data: HoldingLotCreate) -> HoldingLot:
        """Create a manual holding lot from API input.

        Resolves ticker to a Security record. Raises UnknownSymbolError if the
        security doesn't exist (lots should only reference known securities).
        """
        ticker = lot_data.ticker.strip().upper()
        security = self.db.query(Security).filter_by(ticker=ticker).first()
        if not security:
            raise UnknownSymbolError(f"Unknown security ticker: {ticker}")

        lot_id = self.create_lot(
            account_id=account_id,
            symbol_id=security.id,
            quantity=lot_data.quantity,
            unit_basis=lot_data.cost_basis_per_unit,
            purchase_date=lot_data.acquisition_date,
        )
        logger.info(
            "Created lot: %s shares of %s in account %s",
            lot_data.quantity,
            ticker,
            account_id,
        )
        return self._get(lot_id)

    # --- Helpers ---

    def _get(self, lot_id: str) -> HoldingLot:
        lot = self.db.query(HoldingLot).filter_by(id=lot_id).first()
        if not lot:
            raise LotNotFoundError(f"Lot not found: {lot_id}")
        return lot

    @staticmethod
    def _snapshot(lot: HoldingLot) -> LotSnapshot:
        return LotSnapshot(
            lot_id=lot.id,
            account_id=lot.account_id,
            symbol_id=lot.security_id,
            quantity=Decimal(lot.current_quantity),
            unit_basis=Decimal(lot.cost_basis_per_unit),
            purchase_date=lot.acquisition_date,
        )

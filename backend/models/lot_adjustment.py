"""LotAdjustment model - audit record of one lot touched by a corporate action."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class LotAdjustment(Base):
    """Before/after snapshot of a lot for one applied corporate action.

    Rows are written only when an action is applied and deleted only when
    that action is reversed; reversal restores each lot from its
    ``*_before`` columns. For spinoffs the row points at the lot the action
    created (``created_lot=True``).
    """

    __tablename__ = "lot_adjustments"
    __table_args__ = (
        UniqueConstraint(
            "corporate_action_id", "lot_id", name="uix_lot_adjustment_action_lot"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    corporate_action_id = Column(
        String(36), ForeignKey("corporate_actions.id"), nullable=False, index=True
    )
    lot_id = Column(String(36), ForeignKey("holding_lots.id"), nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    security_id = Column(String(36), ForeignKey("securities.id"), nullable=False)
    adjustment_type = Column(String, nullable=False)
    fifo_order = Column(Integer, nullable=False)

    # Snapshots
    quantity_before = Column(Numeric(18, 8), nullable=False)
    quantity_after = Column(Numeric(18, 8), nullable=False)
    unit_basis_before = Column(Numeric(18, 6), nullable=False)
    unit_basis_after = Column(Numeric(18, 6), nullable=False)
    total_basis_before = Column(Numeric(18, 6), nullable=False)
    total_basis_after = Column(Numeric(18, 6), nullable=False)

    # Tax effects
    cash_received = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    realized_gain = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    deferred_gain = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    income_amount = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    tax_treatment = Column(String, nullable=True)
    cash_in_lieu_quantity = Column(Numeric(18, 8), nullable=False, default=Decimal("0"))
    cash_in_lieu_basis = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    basis_residual = Column(Numeric(24, 14), nullable=False, default=Decimal("0"))

    created_lot = Column(Boolean, nullable=False, default=False)
    lot_mutated = Column(Boolean, nullable=False, default=True)
    reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    corporate_action = relationship("CorporateAction", back_populates="adjustments")
    holding_lot = relationship("HoldingLot")


@event.listens_for(LotAdjustment, "before_update")
def _reject_update(mapper, connection, target):
    raise ValueError(f"Lot adjustment {target.id} is immutable")

"""HoldingLot model - persistent ledger record for each acquisition event."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class HoldingLot(Base):
    """A tax lot: shares of one security bought on one date at one basis.

    Corporate actions adjust ``current_quantity`` and
    ``cost_basis_per_unit`` in place; spinoffs create new lots with
    ``source="corporate_action"``.
    """

    __tablename__ = "holding_lots"
    __table_args__ = (
        CheckConstraint("cost_basis_per_unit >= 0", name="ck_holding_lot_cost_basis_non_negative"),
        CheckConstraint("original_quantity > 0", name="ck_holding_lot_original_quantity_positive"),
        CheckConstraint("current_quantity >= 0", name="ck_holding_lot_current_quantity_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    security_id = Column(String(36), ForeignKey("securities.id"), nullable=False, index=True)
    ticker = Column(String, nullable=False)
    acquisition_date = Column(Date, nullable=False, index=True)
    cost_basis_per_unit = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    original_quantity = Column(Numeric(18, 8), nullable=False)
    current_quantity = Column(Numeric(18, 8), nullable=False)
    is_closed = Column(Boolean, default=False, index=True)
    source = Column(String, nullable=False)  # "manual" / "corporate_action"
    corporate_action_id = Column(
        String(36), ForeignKey("corporate_actions.id"), nullable=True, index=True
    )
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    account = relationship("Account", back_populates="holding_lots")
    security = relationship("Security", back_populates="holding_lots")
    corporate_action = relationship("CorporateAction", foreign_keys=[corporate_action_id])

    @property
    def total_cost_basis(self) -> Decimal:
        return self.cost_basis_per_unit * self.current_quantity

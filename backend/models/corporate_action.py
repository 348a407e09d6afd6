"""CorporateAction model - a declared corporate event for one security."""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class CorporateAction(Base):
    """A split, dividend, merger, spinoff or return of capital.

    Records are created ``pending`` and move to ``applied`` (then possibly
    ``reversed``) or ``cancelled``. Only the status and audit columns change
    after creation; the parameters are fixed once recorded.
    """

    __tablename__ = "corporate_actions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'applied', 'reversed', 'cancelled')",
            name="ck_corporate_action_status",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    action_type = Column(String, nullable=False, index=True)
    symbol_id = Column(String(36), ForeignKey("securities.id"), nullable=False, index=True)
    new_symbol_id = Column(String(36), ForeignKey("securities.id"), nullable=True)

    # Dates
    ex_date = Column(Date, nullable=False, index=True)
    record_date = Column(Date, nullable=True)
    pay_date = Column(Date, nullable=True)

    description = Column(String(500), nullable=False)
    source = Column(String(100), nullable=False, default="manual")  # "manual" / "broker" / ...

    # Split
    ratio_from = Column(Numeric(18, 8), nullable=True)
    ratio_to = Column(Numeric(18, 8), nullable=True)

    # Dividend / return of capital
    amount_per_share = Column(Numeric(18, 6), nullable=True)
    currency = Column(String(3), nullable=True, default="USD")
    qualified = Column(Boolean, nullable=False, default=False)

    # Merger / spinoff
    merger_type = Column(String, nullable=True)  # "stock_for_stock" / "cash" / "mixed"
    exchange_ratio = Column(Numeric(18, 8), nullable=True)
    cash_per_share = Column(Numeric(18, 6), nullable=True)
    acquirer_share_price = Column(Numeric(18, 6), nullable=True)
    basis_allocation_percent = Column(Numeric(9, 6), nullable=True)  # 0-100

    # Status and audit
    status = Column(String, nullable=False, default="pending", index=True)
    applied_at = Column(DateTime, nullable=True)
    applied_by = Column(String(100), nullable=True)
    reversed_at = Column(DateTime, nullable=True)
    reversal_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    symbol = relationship("Security", foreign_keys=[symbol_id])
    new_symbol = relationship("Security", foreign_keys=[new_symbol_id])
    adjustments = relationship(
        "LotAdjustment",
        back_populates="corporate_action",
        cascade="all, delete-orphan",
        order_by="LotAdjustment.fifo_order",
    )

"""Account model - owner of holding lots."""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Account(Base):
    """A brokerage account whose lots are adjusted by corporate actions."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    institution_name = Column(String, nullable=True)  # e.g. "Vanguard"
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    holding_lots = relationship("HoldingLot", back_populates="account")

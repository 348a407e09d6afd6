"""Security model - master ticker list (the symbol registry)."""

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Security(Base):
    """A security/ticker in the master list."""

    __tablename__ = "securities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    ticker = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)  # Company/fund name
    # Minimum tradable quantity; NULL falls back to settings.DEFAULT_QUANTITY_INCREMENT
    quantity_increment = Column(Numeric(18, 8), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    holding_lots = relationship("HoldingLot", back_populates="security")

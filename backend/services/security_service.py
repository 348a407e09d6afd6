"""Service for managing Security records (the symbol registry)."""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from config import settings
from corporate_actions.exceptions import UnknownSymbolError
from models import Security

logger = logging.getLogger(__name__)


class SecurityService:
    """Centralized operations on the Security master list."""

    @staticmethod
    def exists(db: Session, security_id: str) -> bool:
        """Return True if a Security with this id is registered."""
        return db.query(Security.id).filter(Security.id == security_id).first() is not None

    @staticmethod
    def get(db: Session, security_id: str) -> Security:
        """Fetch a Security by id.

        Raises:
            UnknownSymbolError: If no such security is registered.
        """
        security = db.query(Security).filter(Security.id == security_id).first()
        if not security:
            raise UnknownSymbolError(f"Unknown security: {security_id}")
        return security

    @staticmethod
    def ensure_exists(
        db: Session,
        ticker: str,
        name: Optional[str] = None,
    ) -> Security:
        """Ensure a Security record exists for the given ticker.

        Creates the record if it doesn't exist. An existing record only has
        its name filled in when it has none.

        Returns:
            The Security record (flushed but not committed)
        """
        security = db.query(Security).filter_by(ticker=ticker).first()

        if not security:
            security = Security(ticker=ticker, name=name or ticker)
            db.add(security)
            db.flush()
            logger.info("Created security: %s", ticker)
        elif name and not security.name:
            security.name = name
            db.flush()
            logger.info("Filled missing security name: %s -> %s", ticker, name)

        return security

    @staticmethod
    def quantity_increment(db: Session, security_id: str) -> Decimal:
        """Minimum tradable quantity for a security.

        Falls back to ``settings.DEFAULT_QUANTITY_INCREMENT`` when the
        security has no increment of its own.
        """
        security = SecurityService.get(db, security_id)
        if security.quantity_increment:
            return Decimal(security.quantity_increment)
        return settings.DEFAULT_QUANTITY_INCREMENT

"""SQLAlchemy ORM models."""

from .account import Account
from .corporate_action import CorporateAction
from .holding_lot import HoldingLot
from .lot_adjustment import LotAdjustment
from .security import Security
from .utils import generate_uuid

__all__ = ["Account", "CorporateAction", "HoldingLot", "LotAdjustment", "Security", "generate_uuid"]

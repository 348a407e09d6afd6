"""Corporate action engine: calculators and their value types."""

from .exceptions import CorporateActionError, ErrorCode
from .registry import CalculatorRegistry
from .types import (
    ActionStatus,
    ActionTerms,
    ActionType,
    AdjustmentPlan,
    AdjustmentType,
    CalculationContext,
    LotSnapshot,
    MergerType,
    PlannedAdjustment,
    TaxTreatment,
)

__all__ = [
    "ActionStatus",
    "ActionTerms",
    "ActionType",
    "AdjustmentPlan",
    "AdjustmentType",
    "CalculationContext",
    "CalculatorRegistry",
    "CorporateActionError",
    "ErrorCode",
    "LotSnapshot",
    "MergerType",
    "PlannedAdjustment",
    "TaxTreatment",
]

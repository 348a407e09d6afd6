"""Pydantic schemas for holding lots."""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class HoldingLotCreate(BaseModel):
    """Schema for creating a manual holding lot."""

    ticker: str
    acquisition_date: date
    cost_basis_per_unit: Decimal = Field(ge=0)
    quantity: Decimal = Field(gt=0)


class HoldingLotResponse(BaseModel):
    """Schema for HoldingLot API response."""

    id: str
    account_id: str
    security_id: str
    ticker: str
    acquisition_date: date
    cost_basis_per_unit: Decimal
    original_quantity: Decimal
    current_quantity: Decimal
    is_closed: bool
    source: str
    corporate_action_id: str | None = None
    created_at: datetime
    updated_at: datetime

    # Computed on the model, not stored
    total_cost_basis: Decimal

    model_config = ConfigDict(from_attributes=True)

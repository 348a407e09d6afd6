"""Pydantic schemas for corporate actions and their adjustments."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from corporate_actions.types import (
    ActionStatus,
    ActionType,
    AdjustmentType,
    MergerType,
    TaxTreatment,
)


class CorporateActionCreate(BaseModel):
    """Schema for recording a corporate action.

    Only the shape is checked here; type-specific parameter rules
    (positive ratios, required amounts) are enforced by the calculators
    so API and batch callers get the same error codes.
    """

    action_type: ActionType
    symbol_id: str
    ex_date: date
    description: str = Field(min_length=1, max_length=500)
    record_date: date | None = None
    pay_date: date | None = None
    source: str = Field(default="manual", max_length=100)

    # Spinoff target: an existing security id, or a ticker to register
    new_symbol_id: str | None = None
    new_ticker: str | None = None
    new_security_name: str | None = None

    ratio_from: Decimal | None = None
    ratio_to: Decimal | None = None
    amount_per_share: Decimal | None = None
    currency: str | None = Field(default="USD", max_length=3)
    qualified: bool = False
    merger_type: MergerType | None = None
    exchange_ratio: Decimal | None = None
    cash_per_share: Decimal | None = None
    acquirer_share_price: Decimal | None = None
    basis_allocation_percent: Decimal | None = None

    @model_validator(mode="after")
    def validate_new_security(self) -> "CorporateActionCreate":
        """A spinoff target is given either by id or by ticker."""
        has_id = bool(self.new_symbol_id)
        has_ticker = self.new_ticker is not None and self.new_ticker.strip() != ""
        if has_id and has_ticker:
            raise ValueError("Provide either new_symbol_id or new_ticker, not both")
        if self.action_type != ActionType.SPINOFF and (has_id or has_ticker):
            raise ValueError("new_symbol_id/new_ticker only apply to spinoffs")
        return self


class LotAdjustmentResponse(BaseModel):
    """Schema for LotAdjustment API response."""

    id: str
    corporate_action_id: str
    lot_id: str
    account_id: str
    security_id: str
    adjustment_type: AdjustmentType
    fifo_order: int
    quantity_before: Decimal
    quantity_after: Decimal
    unit_basis_before: Decimal
    unit_basis_after: Decimal
    total_basis_before: Decimal
    total_basis_after: Decimal
    cash_received: Decimal
    realized_gain: Decimal
    deferred_gain: Decimal
    income_amount: Decimal
    tax_treatment: TaxTreatment | None = None
    cash_in_lieu_quantity: Decimal
    cash_in_lieu_basis: Decimal
    basis_residual: Decimal
    created_lot: bool
    lot_mutated: bool
    reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CorporateActionResponse(BaseModel):
    """Schema for CorporateAction API response."""

    id: str
    action_type: ActionType
    symbol_id: str
    new_symbol_id: str | None = None
    ex_date: date
    record_date: date | None = None
    pay_date: date | None = None
    description: str
    source: str
    ratio_from: Decimal | None = None
    ratio_to: Decimal | None = None
    amount_per_share: Decimal | None = None
    currency: str | None = None
    qualified: bool
    merger_type: MergerType | None = None
    exchange_ratio: Decimal | None = None
    cash_per_share: Decimal | None = None
    acquirer_share_price: Decimal | None = None
    basis_allocation_percent: Decimal | None = None
    status: ActionStatus
    applied_at: datetime | None = None
    applied_by: str | None = None
    reversed_at: datetime | None = None
    reversal_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CorporateActionDetailResponse(CorporateActionResponse):
    """CorporateAction with its adjustment records."""

    adjustments: list[LotAdjustmentResponse] = []


class ProjectedAdjustment(BaseModel):
    """One adjustment a preview would create."""

    lot_id: str | None = None
    account_id: str
    symbol_id: str
    adjustment_type: AdjustmentType
    fifo_order: int
    quantity_before: Decimal
    quantity_after: Decimal
    unit_basis_before: Decimal
    unit_basis_after: Decimal
    total_basis_before: Decimal
    total_basis_after: Decimal
    cash_received: Decimal
    realized_gain: Decimal
    deferred_gain: Decimal
    income_amount: Decimal
    tax_treatment: TaxTreatment | None = None
    cash_in_lieu_quantity: Decimal
    cash_in_lieu_basis: Decimal
    basis_residual: Decimal
    created_lot: bool

    model_config = ConfigDict(from_attributes=True)


class ActionPreviewResponse(BaseModel):
    """Projection of applying a pending action."""

    corporate_action_id: str
    action_type: ActionType
    ex_date: date
    affected_lots: int
    estimated_adjustments: int
    lots_created: int
    total_basis_before: Decimal
    total_basis_after: Decimal
    total_basis_residual: Decimal
    total_cash_received: Decimal
    total_realized_gain: Decimal
    gross_income: Decimal
    withholding: Decimal
    net_income: Decimal
    adjustments: list[ProjectedAdjustment] = []

    model_config = ConfigDict(from_attributes=True)


class ApplyResponse(BaseModel):
    """Result of applying one action."""

    corporate_action_id: str
    status: ActionStatus
    adjustments_created: int
    lots_created: int
    total_realized_gain: Decimal
    gross_income: Decimal
    withholding: Decimal
    net_income: Decimal

    model_config = ConfigDict(from_attributes=True)


class ActionOutcomeResponse(BaseModel):
    """Per-action line of a batch run."""

    corporate_action_id: str
    ex_date: date
    action_type: ActionType
    ok: bool
    adjustments_created: int = 0
    error_code: str | None = None
    error_message: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BatchApplyResponse(BaseModel):
    """Result of applying every pending action for a security."""

    symbol_id: str
    actions_processed: int
    succeeded: int
    failed: int
    total_adjustments: int
    per_action_results: list[ActionOutcomeResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ReverseRequest(BaseModel):
    """Body of a reversal request."""

    reason: str | None = Field(default=None, max_length=500)

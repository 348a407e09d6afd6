"""Typed exception hierarchy for corporate action processing.

Every error carries an ``ErrorCode`` so callers (API routes, batch jobs)
can react to the failure category without parsing messages.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Category of a corporate action failure."""

    INVALID_RATIO = "invalid_ratio"
    INVALID_AMOUNT = "invalid_amount"
    MISSING_PARAMETER = "missing_parameter"
    NO_AFFECTED_LOTS = "no_affected_lots"
    NOT_PENDING = "not_pending"
    ALREADY_APPLIED = "already_applied"
    NOT_APPLIED = "not_applied"
    CANNOT_REVERSE_OUT_OF_ORDER = "cannot_reverse_out_of_order"
    CANNOT_APPLY_OUT_OF_ORDER = "cannot_apply_out_of_order"
    UNKNOWN_ACTION_TYPE = "unknown_action_type"
    CALCULATION_PRECISION_ERROR = "calculation_precision_error"
    LOT_STORE_UNAVAILABLE = "lot_store_unavailable"
    FUTURE_EX_DATE = "future_ex_date"
    ACTION_NOT_FOUND = "action_not_found"
    LOT_NOT_FOUND = "lot_not_found"
    UNKNOWN_SYMBOL = "unknown_symbol"


class CorporateActionError(Exception):
    """Base exception for all corporate action errors."""

    code: ErrorCode = ErrorCode.INVALID_AMOUNT

    def __init__(self, message: str, code: ErrorCode | None = None):
        if code is not None:
            self.code = code
        super().__init__(message)


class InvalidRatioError(CorporateActionError):
    """A split, exchange or spinoff ratio is missing or not positive."""

    code = ErrorCode.INVALID_RATIO


class InvalidAmountError(CorporateActionError):
    """A per-share amount, price or allocation is missing or out of range."""

    code = ErrorCode.INVALID_AMOUNT


class MissingParameterError(CorporateActionError):
    """A required non-numeric parameter (e.g. the spinoff security) is absent."""

    code = ErrorCode.MISSING_PARAMETER


class NoAffectedLotsError(CorporateActionError):
    code = ErrorCode.NO_AFFECTED_LOTS


class NotPendingError(CorporateActionError):
    """The action is not in ``pending`` status."""

    code = ErrorCode.NOT_PENDING


class AlreadyAppliedError(NotPendingError):
    code = ErrorCode.ALREADY_APPLIED


class NotAppliedError(CorporateActionError):
    """Reversal requested for an action that is not ``applied``."""

    code = ErrorCode.NOT_APPLIED


class ReversalOrderError(CorporateActionError):
    """A later action on the same security has already been applied."""

    code = ErrorCode.CANNOT_REVERSE_OUT_OF_ORDER


class ApplyOrderError(CorporateActionError):
    """An action with a later ex-date on the same security is already applied."""

    code = ErrorCode.CANNOT_APPLY_OUT_OF_ORDER


class UnknownActionTypeError(CorporateActionError):
    code = ErrorCode.UNKNOWN_ACTION_TYPE


class CalculationPrecisionError(CorporateActionError):
    """Rounding residual exceeds what ledger precision plus the tolerance allow."""

    code = ErrorCode.CALCULATION_PRECISION_ERROR


class LotStoreUnavailableError(CorporateActionError):
    """The lot ledger could not be read or written.

    Retriable by the caller; the engine never retries internally.
    """

    code = ErrorCode.LOT_STORE_UNAVAILABLE


class FutureExDateError(CorporateActionError):
    code = ErrorCode.FUTURE_EX_DATE


class ActionNotFoundError(CorporateActionError):
    code = ErrorCode.ACTION_NOT_FOUND


class LotNotFoundError(CorporateActionError):
    code = ErrorCode.LOT_NOT_FOUND


class UnknownSymbolError(CorporateActionError):
    code = ErrorCode.UNKNOWN_SYMBOL

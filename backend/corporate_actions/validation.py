"""Parameter checks shared by the calculators."""

from decimal import Decimal

from corporate_actions.exceptions import InvalidAmountError, InvalidRatioError


def require_positive_ratio(value: Decimal | None, name: str) -> Decimal:
    if value is None:
        raise InvalidRatioError(f"{name} is required")
    if value <= 0:
        raise InvalidRatioError(f"{name} must be positive, got {value}")
    return value


def require_positive_amount(value: Decimal | None, name: str) -> Decimal:
    if value is None:
        raise InvalidAmountError(f"{name} is required")
    if value <= 0:
        raise InvalidAmountError(f"{name} must be positive, got {value}")
    return value


"""Dispatch table from action type to calculator.

Each tuple is (action_type, calculator class). Adding a new action type
only requires a calculator implementing ``Calculator`` and one entry here.
"""

from corporate_actions.dividend import DividendCalculator
from corporate_actions.exceptions import UnknownActionTypeError
from corporate_actions.merger import MergerCalculator
from corporate_actions.protocol import Calculator
from corporate_actions.return_of_capital import ReturnOfCapitalCalculator
from corporate_actions.spinoff import SpinoffCalculator
from corporate_actions.split import SplitCalculator
from corporate_actions.types import ActionType

CALCULATOR_DEFINITIONS: list[tuple[ActionType, type]] = [
    (ActionType.SPLIT, SplitCalculator),
    (ActionType.CASH_DIVIDEND, DividendCalculator),
    (ActionType.MERGER, MergerCalculator),
    (ActionType.SPINOFF, SpinoffCalculator),
    (ActionType.RETURN_OF_CAPITAL, ReturnOfCapitalCalculator),
]


class CalculatorRegistry:
    """Lookup of calculators by action type.

    Example:
        registry = CalculatorRegistry.default()
        plan = registry.get(ActionType.SPLIT).calculate(lots, terms, context)
    """

    def __init__(self):
        self._calculators: dict[ActionType, Calculator] = {}

    @classmethod
    def default(cls) -> "CalculatorRegistry":
        """Registry with one calculator per supported action type."""
        registry = cls()
        for _, calculator_cls in CALCULATOR_DEFINITIONS:
            registry.register(calculator_cls())
        return registry

    def register(self, calculator: Calculator) -> None:
        self._calculators[ActionType(calculator.action_type)] = calculator

    def get(self, action_type: ActionType | str) -> Calculator:
        """Return the calculator for ``action_type``.

        Raises:
            UnknownActionTypeError: If the type is unknown or unregistered.
        """
        try:
            key = ActionType(action_type)
        except ValueError:
            raise UnknownActionTypeError(f"Unknown action type: {action_type}") from None
        if key not in self._calculators:
            raise UnknownActionTypeError(f"No calculator registered for {key.value}")
        return self._calculators[key]

    def supported_types(self) -> list[ActionType]:
        return list(self._calculators.keys())

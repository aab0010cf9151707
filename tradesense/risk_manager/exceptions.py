"""
Risk Manager Exceptions
"""

from typing import Iterable


class ConfigValidationError(ValueError):
    """
    Raised when a configuration violates one or more bounds.

    `violations` lists every failed constraint so the caller can fix all
    of them at once.
    """

    def __init__(self, violations: Iterable[str]):
        self.violations = list(violations)
        super().__init__(
            f"Configuration validation failed: {'; '.join(self.violations)}"
        )


class EvaluationInProgressError(RuntimeError):
    """Raised when a symbol is evaluated while its previous evaluation is running"""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Evaluation already in progress for {symbol}")

"""Parameter specifications for op data validation.

This module defines the ParamSpec dataclass that records the legal range
and identity value of a single operation parameter.
"""

from __future__ import annotations

from dataclasses import dataclass

from colorops.exceptions import OpDataError


@dataclass(frozen=True)
class ParamSpec:
    """Specification for an operation parameter.

    Attributes:
        name: Parameter name (e.g., "gamma", "offset")
        min_value: Smallest legal value (inclusive)
        max_value: Largest legal value (inclusive)
        identity: Value that causes no change
        description: Human-readable description
    """

    name: str
    min_value: float
    max_value: float
    identity: float
    description: str = ""

    def check(self, value: float) -> float:
        """Raise if value lies outside [min_value, max_value].

        :param value: Value to check
        :returns: The value, unchanged
        :raises OpDataError: If value is below or above the bounds
        """
        if value < self.min_value:
            raise OpDataError(
                f"Parameter {value:g} is less than lower bound {self.min_value:g}"
            )
        if value > self.max_value:
            raise OpDataError(
                f"Parameter {value:g} is greater than upper bound {self.max_value:g}"
            )
        return value

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value

    def is_identity(self, value: float) -> bool:
        """Exact comparison with the identity value."""
        return value == self.identity

    def combine(self, a: float, b: float) -> float:
        """Combine two values of consecutive ops (parameters compose by product)."""
        return a * b

    def __repr__(self) -> str:
        return (
            f"ParamSpec({self.name}, "
            f"range=[{self.min_value}, {self.max_value}], "
            f"identity={self.identity})"
        )

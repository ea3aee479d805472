"""
risk/normalizer.py

Deterministic bounding and rounding utilities for risk scoring.
"""

import math


class RiskNormalizer:
    """Provides stateless bounding methods for penalty and score values.

    All methods are deterministic and produce bounded outputs.
    No external dependencies, state, or side effects.
    """

    def cap(self, value: float, maximum: float) -> float:
        """Bound a penalty to [0, maximum].

        Args:
            value: The raw penalty amount.
            maximum: The largest amount this penalty may contribute.

        Returns:
            A float in the range [0, maximum].
        """
        return self.clamp(value, 0.0, maximum)

    def clamp(self, value: float, min_value: float, max_value: float) -> float:
        """Clamp a value to the specified [min_value, max_value] range.

        Args:
            value: The float to clamp.
            min_value: The lower bound of the output range.
            max_value: The upper bound of the output range.

        Returns:
            value if within bounds, otherwise min_value or max_value.
        """
        return max(min_value, min(value, max_value))

    def round_half_up(self, value: float) -> int:
        """Round to the nearest integer, with .5 rounding towards +infinity.

        Python's round() rounds halves to even, which would make 88.5
        and 89.5 land on the same integer.

        Args:
            value: The float to round.

        Returns:
            The nearest integer.
        """
        return int(math.floor(value + 0.5))

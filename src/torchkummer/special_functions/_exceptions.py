"""Exception and warning classes for hypergeometric evaluation."""

__all__ = [
    "HypergeometricError",
    "RecurrenceBreakdownError",
    "RecurrenceStabilityWarning",
]


class HypergeometricError(Exception):
    """Base exception for hypergeometric function errors."""

    pass


class RecurrenceBreakdownError(HypergeometricError):
    """Raised when a recurrence step divides by a zero coefficient.

    Attributes
    ----------
    step : int
        Step index at which the zero divisor was met.
    direction : str
        ``"forward"`` or ``"backward"``.
    """

    def __init__(self, step: int, direction: str):
        self.step = step
        self.direction = direction
        super().__init__(
            f"Zero divisor in {direction} recurrence at step {step}; "
            f"the extrapolated value is not finite."
        )


class RecurrenceStabilityWarning(UserWarning):
    """Warning for recurrences that produced non-finite values."""

    pass

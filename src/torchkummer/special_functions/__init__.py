from ._exceptions import (
    HypergeometricError,
    RecurrenceBreakdownError,
    RecurrenceStabilityWarning,
)
from ._float_distance import float_distance, fractional_parts_close
from ._hypergeometric_1_f_1 import hypergeometric_1_f_1
from ._hypergeometric_1_f_1_recurrence import (
    MAX_RECURRENCE_STEPS,
    SMALL_A_THRESHOLD,
    HypergeometricRecurrenceAAndBCoefficients,
    HypergeometricRecurrenceACoefficients,
    HypergeometricRecurrenceBCoefficients,
    hypergeometric_1_f_1_backward_recurrence_for_negative_a,
    hypergeometric_1_f_1_backward_recurrence_for_negative_a_and_b,
    hypergeometric_1_f_1_backward_recurrence_for_negative_b,
    hypergeometric_1_f_1_forward_recurrence_for_positive_a,
    hypergeometric_1_f_1_is_a_small_enough,
    hypergeometric_1_f_1_recurrence_backward,
    hypergeometric_1_f_1_recurrence_forward,
)
from ._tolerances import default_tolerances

__all__ = [
    "HypergeometricError",
    "HypergeometricRecurrenceAAndBCoefficients",
    "HypergeometricRecurrenceACoefficients",
    "HypergeometricRecurrenceBCoefficients",
    "RecurrenceBreakdownError",
    "RecurrenceStabilityWarning",
    "MAX_RECURRENCE_STEPS",
    "SMALL_A_THRESHOLD",
    "default_tolerances",
    "float_distance",
    "fractional_parts_close",
    "hypergeometric_1_f_1",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_a",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_a_and_b",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_b",
    "hypergeometric_1_f_1_forward_recurrence_for_positive_a",
    "hypergeometric_1_f_1_is_a_small_enough",
    "hypergeometric_1_f_1_recurrence_backward",
    "hypergeometric_1_f_1_recurrence_forward",
]

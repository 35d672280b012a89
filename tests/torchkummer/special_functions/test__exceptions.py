import warnings

import pytest

from torchkummer.special_functions import (
    HypergeometricError,
    RecurrenceBreakdownError,
    RecurrenceStabilityWarning,
)


class TestExceptions:
    """Tests for hypergeometric exceptions and warnings."""

    def test_hypergeometric_error_is_exception(self):
        """HypergeometricError is a base Exception."""
        assert issubclass(HypergeometricError, Exception)

    def test_breakdown_error_inherits_from_hypergeometric_error(self):
        """RecurrenceBreakdownError inherits from HypergeometricError."""
        assert issubclass(RecurrenceBreakdownError, HypergeometricError)

    def test_breakdown_error_carries_location(self):
        """The step and direction are kept on the exception."""
        with pytest.raises(RecurrenceBreakdownError, match="backward recurrence at step -3") as excinfo:
            raise RecurrenceBreakdownError(-3, "backward")
        assert excinfo.value.step == -3
        assert excinfo.value.direction == "backward"

    def test_stability_warning_is_user_warning(self):
        """RecurrenceStabilityWarning can be filtered as a UserWarning."""
        assert issubclass(RecurrenceStabilityWarning, UserWarning)
        with pytest.warns(UserWarning):
            warnings.warn("unstable", RecurrenceStabilityWarning)

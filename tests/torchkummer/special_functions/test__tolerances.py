import pytest
import torch

from torchkummer.special_functions import default_tolerances


class TestDefaultTolerances:
    """Tests for dtype-aware series tolerances."""

    @pytest.mark.parametrize(
        "dtype,expected",
        [
            (torch.float16, 1e-4),
            (torch.bfloat16, 1e-4),
            (torch.float32, 1e-8),
            (torch.float64, 1e-16),
        ],
    )
    def test_values(self, dtype, expected):
        """Each dtype maps to its truncation tolerance."""
        assert default_tolerances(dtype)["tol"] == expected

    def test_tighter_for_wider_dtypes(self):
        """Wider dtypes get stricter tolerances."""
        tols = [default_tolerances(d)["tol"] for d in (torch.float16, torch.float32, torch.float64)]
        assert tols == sorted(tols, reverse=True)

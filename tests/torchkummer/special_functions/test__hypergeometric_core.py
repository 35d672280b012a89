import math

import mpmath
import pytest
import torch

from torchkummer.special_functions._hypergeometric_core import (
    _hypergeometric_1_f_1_series,
)


class TestHypergeometric1F1Series:
    """Tests for the power series evaluator of M(a, b, z)."""

    def test_terminating_series(self):
        """M(-2, b, z) is a quadratic polynomial."""
        dtype = torch.float64
        z = torch.linspace(-2.0, 2.0, steps=11, dtype=dtype)
        a = torch.tensor(-2.0, dtype=dtype)
        b = torch.tensor(3.5, dtype=dtype)

        # M(-2,b,z) = 1 + (-2/b) z + [(-2)(-1)/(b(b+1))] z^2 / 2!
        expected = 1.0 + (-2.0 / b) * z + ((2.0) / (b * (b + 1.0))) * (z * z) / 2.0

        val = _hypergeometric_1_f_1_series(a, b, z, tol=1e-16, max_terms=50)

        torch.testing.assert_close(val, expected, rtol=1e-14, atol=1e-14)

    def test_equal_parameters_is_exponential(self):
        """M(a, a, z) = exp(z)."""
        dtype = torch.float64
        z = torch.tensor([-1.0, 0.5, 1.0, 3.0], dtype=dtype)
        a = torch.tensor(2.75, dtype=dtype)
        val = _hypergeometric_1_f_1_series(a, a, z)
        torch.testing.assert_close(val, torch.exp(z), rtol=1e-14, atol=0.0)

    @pytest.mark.parametrize(
        "a,b,z",
        [
            (-0.3, 4.7, 2.0),
            (-1.3, 4.7, 2.0),
            (0.75, 2.25, -1.5),
            (1.5, -0.3, 2.0),
            (-0.2, -0.7, 1.5),
        ],
    )
    def test_against_mpmath(self, a, b, z):
        """Small parameters agree with mpmath.hyp1f1."""
        dtype = torch.float64
        val = _hypergeometric_1_f_1_series(
            torch.tensor(a, dtype=dtype),
            torch.tensor(b, dtype=dtype),
            torch.tensor(z, dtype=dtype),
        )
        expected = float(mpmath.hyp1f1(a, b, z))
        torch.testing.assert_close(
            val, torch.tensor(expected, dtype=dtype), rtol=1e-13, atol=1e-15
        )

    def test_terminated_before_pole(self):
        """A series that terminates before (b)_k vanishes stays finite."""
        dtype = torch.float64
        a = torch.tensor(-1.0, dtype=dtype)
        b = torch.tensor(-3.0, dtype=dtype)
        z = torch.tensor(2.0, dtype=dtype)
        val = _hypergeometric_1_f_1_series(a, b, z)
        torch.testing.assert_close(val, torch.tensor(1.0 + 2.0 / 3.0, dtype=dtype))

    def test_pole_is_not_finite(self):
        """Non-positive integer b without termination gives a non-finite value."""
        dtype = torch.float64
        a = torch.tensor(0.5, dtype=dtype)
        b = torch.tensor(-2.0, dtype=dtype)
        z = torch.tensor(1.0, dtype=dtype)
        val = _hypergeometric_1_f_1_series(a, b, z)
        assert not torch.isfinite(val)

    def test_debug_outputs(self):
        """_debug returns terms used and the convergence mask."""
        dtype = torch.float64
        z = torch.tensor([0.1, 1.0], dtype=dtype)
        a = torch.tensor(1.0, dtype=dtype)
        b = torch.tensor(2.0, dtype=dtype)
        S, terms_used, converged = _hypergeometric_1_f_1_series(a, b, z, _debug=True)
        assert converged.all()
        assert (terms_used >= 8).all()
        # M(1, 2, z) = (e^z - 1) / z
        torch.testing.assert_close(S, torch.expm1(z) / z, rtol=1e-14, atol=0.0)

    def test_half_promoted_to_float32(self):
        """Half precision inputs are evaluated in float32."""
        a = torch.tensor(0.5, dtype=torch.float16)
        b = torch.tensor(1.5, dtype=torch.float16)
        z = torch.tensor(0.25, dtype=torch.float16)
        val = _hypergeometric_1_f_1_series(a, b, z, tol=1e-8)
        assert val.dtype == torch.float32
        assert math.isclose(val.item(), float(mpmath.hyp1f1(0.5, 1.5, 0.25)), rel_tol=1e-6)

    def test_complex_raises(self):
        """Complex arguments are rejected."""
        with pytest.raises(TypeError, match="complex"):
            _hypergeometric_1_f_1_series(
                torch.tensor(1.0), torch.tensor(2.0), torch.tensor(1.0 + 1.0j)
            )

    def test_non_tensor_raises(self):
        """Non-tensor arguments are rejected."""
        with pytest.raises(TypeError):
            _hypergeometric_1_f_1_series(1.0, torch.tensor(2.0), torch.tensor(1.0))

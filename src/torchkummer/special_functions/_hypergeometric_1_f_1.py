from functools import partial
from typing import Optional

import torch
from torch import Tensor

from ._hypergeometric_1_f_1_recurrence import (
    _ZERO_DIVISOR_POLICIES,
    hypergeometric_1_f_1_backward_recurrence_for_negative_a,
    hypergeometric_1_f_1_is_a_small_enough,
)
from ._hypergeometric_core import _hypergeometric_1_f_1_series, _promote_dtype
from ._tolerances import default_tolerances


def hypergeometric_1_f_1(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    *,
    tol: Optional[float] = None,
    max_terms: int = 2048,
    recurrence: bool = True,
    on_zero_divisor: str = "warn",
) -> Tensor:
    r"""
    Confluent hypergeometric function 1F1(a; b; z) (Kummer M).

    Series definition
    -----------------
    .. math::

       {}_1F_1(a; b; z) = \sum_{k=0}^{\infty} \frac{(a)_k}{(b)_k} \frac{z^k}{k!}

    Where ``a`` is large and negative the series cancels catastrophically.
    For ``a < -10`` and ``b > 0`` the value is instead extrapolated by
    backward recurrence in ``a`` from two series evaluations at the fractional
    part of ``a``.
    Non-finite ``a`` is summed directly and gives NaN.

    Parameters
    ----------
    a : Tensor
        Numerator parameter. Broadcasting with ``b`` and ``z`` is supported.
    b : Tensor
        Denominator parameter (pole when ``b`` is a non-positive integer).
    z : Tensor
        Argument tensor. Real only.
    tol : float, optional
        Relative tolerance for adaptive truncation of the series.
        Default: dtype-aware, see :func:`default_tolerances`.
    max_terms : int, optional
        Maximum number of series terms.
    recurrence : bool, optional
        If False, always sum the series directly.
    on_zero_divisor : {"warn", "raise", "ignore"}, optional
        Handling of a zero recurrence coefficient, see
        :func:`hypergeometric_1_f_1_recurrence_backward`.

    Returns
    -------
    Tensor
        The value of ``1F1(a; b; z)`` with the broadcast shape of the inputs.

    Raises
    ------
    TypeError
        If an argument is not a tensor or is complex.
    ValueError
        If ``on_zero_divisor`` is not a known policy.
    """
    if not (isinstance(a, Tensor) and isinstance(b, Tensor) and isinstance(z, Tensor)):
        raise TypeError("a, b, z must be torch.Tensors")
    if on_zero_divisor not in _ZERO_DIVISOR_POLICIES:
        raise ValueError(
            f"on_zero_divisor must be one of {_ZERO_DIVISOR_POLICIES}, "
            f"got {on_zero_divisor!r}"
        )
    dtype = _promote_dtype(a, b, z)
    device = z.device
    if tol is None:
        tol = default_tolerances(dtype)["tol"]

    batch_shape = torch.broadcast_shapes(a.shape, b.shape, z.shape)
    a_b = a.to(dtype=dtype, device=device).expand(batch_shape)
    b_b = b.to(dtype=dtype, device=device).expand(batch_shape)
    z_b = z.to(dtype=dtype, device=device).expand(batch_shape)

    evaluate = partial(_hypergeometric_1_f_1_series, tol=tol, max_terms=max_terms)

    if not recurrence:
        return evaluate(a_b, b_b, z_b)

    extrapolate = (
        hypergeometric_1_f_1_is_a_small_enough(a_b) & torch.isfinite(a_b) & (b_b > 0)
    )
    direct = ~extrapolate

    out = torch.empty(batch_shape, dtype=dtype, device=device)
    if bool(direct.any()):
        out[direct] = evaluate(a_b[direct], b_b[direct], z_b[direct])
    if bool(extrapolate.any()):
        out[extrapolate] = hypergeometric_1_f_1_backward_recurrence_for_negative_a(
            a_b[extrapolate],
            b_b[extrapolate],
            z_b[extrapolate],
            evaluate,
            on_zero_divisor=on_zero_divisor,
        )
    return out


__all__ = ["hypergeometric_1_f_1"]

r"""
Recurrence extrapolation for Kummer's function M(a, b, z).

Direct summation of :math:`{}_1F_1(a; b; z)` suffers catastrophic cancellation
when ``a`` or ``b`` is large and negative. The routines here evaluate M at two
well-conditioned parameter values that share the fractional part of the
troublesome parameter and walk a three-term contiguous relation in unit steps
to the requested value. The walk runs in the direction in which M is not
swamped by the companion solution of the recurrence:

- increasing ``a``: forward recurrence in ``a``;
- decreasing ``a``: backward recurrence in ``a``;
- decreasing ``b``: backward recurrence in ``b``;
- decreasing ``a`` and ``b`` together: backward joint recurrence.

The drivers take the evaluator of M near the seed points as an argument, so
this module does not depend on any particular series or asymptotic code.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Callable, Tuple

import torch
from torch import Tensor

from ._exceptions import RecurrenceBreakdownError, RecurrenceStabilityWarning
from ._float_distance import fractional_parts_close

Evaluator = Callable[[Tensor, Tensor, Tensor], Tensor]

# TODO: make dependent on the working precision of the dtype.
SMALL_A_THRESHOLD = -10.0

_ZERO_DIVISOR_POLICIES = ("warn", "raise", "ignore")

# Longest walk attempted; elements beyond it are returned as NaN.
MAX_RECURRENCE_STEPS = 1_000_000


@dataclass(frozen=True)
class HypergeometricRecurrenceACoefficients:
    r"""Coefficients of the recurrence in ``a`` for fixed ``b`` and ``z``.

    Step ``i`` relates :math:`M(a_i - 1)`, :math:`M(a_i)` and
    :math:`M(a_i + 1)` with :math:`a_i = a + i` through

    .. math::

       (b - a_i) M(a_i - 1) + (2 a_i - b + z) M(a_i) - a_i M(a_i + 1) = 0.
    """

    a: Tensor
    b: Tensor
    z: Tensor

    def __call__(self, i: int) -> Tuple[Tensor, Tensor, Tensor]:
        ai = self.a + i

        leading = -ai
        middle = (self.b - (2 * ai)) - self.z
        trailing = self.b - ai

        return leading, middle, trailing


@dataclass(frozen=True)
class HypergeometricRecurrenceBCoefficients:
    r"""Coefficients of the recurrence in ``b`` for fixed ``a`` and ``z``.

    .. math::

       b_i (b_i - 1) M(b_i - 1) - b_i (b_i + z - 1) M(b_i)
       + z (b_i - a) M(b_i + 1) = 0.
    """

    a: Tensor
    b: Tensor
    z: Tensor

    def __call__(self, i: int) -> Tuple[Tensor, Tensor, Tensor]:
        bi = self.b + i

        leading = self.z * (bi - self.a)
        middle = bi * ((self.z + bi) - 1)
        trailing = bi * (bi - 1)

        return leading, middle, trailing


@dataclass(frozen=True)
class HypergeometricRecurrenceAAndBCoefficients:
    r"""Coefficients of the recurrence shifting ``a`` and ``b`` together.

    .. math::

       a_i z M(a_i + 1, b_i + 1) - b_i (1 - b_i + z) M(a_i, b_i)
       + b_i (1 - b_i) M(a_i - 1, b_i - 1) = 0.

    A single step index is shared by both parameters, which is only meaningful
    when ``a`` and ``b`` have the same integer part. That is not checked here.
    """

    a: Tensor
    b: Tensor
    z: Tensor

    def __call__(self, i: int) -> Tuple[Tensor, Tensor, Tensor]:
        ai = self.a + i
        bi = self.b + i

        leading = ai * self.z
        middle = bi * ((1 - bi) + self.z)
        trailing = bi * (1 - bi)

        return leading, middle, trailing


CoefficientFamily = Callable[[int], Tuple[Tensor, Tensor, Tensor]]


def _check_zero_divisor(
    divisor: Tensor,
    active: Tensor,
    on_zero_divisor: str,
    step: int,
    direction: str,
    warned: list,
) -> None:
    if on_zero_divisor == "ignore" or warned[0]:
        return
    if not bool((active & (divisor == 0)).any()):
        return
    if on_zero_divisor == "raise":
        raise RecurrenceBreakdownError(step, direction)
    warnings.warn(
        f"Zero divisor in {direction} recurrence at step {step}; "
        f"affected values are not finite.",
        RecurrenceStabilityWarning,
        stacklevel=3,
    )
    warned[0] = True


def _step_count(integer_part: Tensor, max_steps: int = MAX_RECURRENCE_STEPS) -> Tensor:
    # Non-finite or out of range values map just past the limit instead of
    # overflowing the int64 cast.
    limit = float(max_steps + 1)
    integer_part = torch.nan_to_num(integer_part, nan=limit, posinf=limit, neginf=-limit)
    return integer_part.clamp(-limit, limit).to(torch.int64)


def _prepare(
    last_index: Tensor | int,
    first: Tensor,
    second: Tensor,
    on_zero_divisor: str,
    max_steps: int,
) -> Tuple[Tensor, Tensor, Tensor, Tensor]:
    if on_zero_divisor not in _ZERO_DIVISOR_POLICIES:
        raise ValueError(
            f"on_zero_divisor must be one of {_ZERO_DIVISOR_POLICIES}, "
            f"got {on_zero_divisor!r}"
        )
    last_index = torch.as_tensor(last_index, device=first.device)
    if last_index.is_floating_point():
        last_index = _step_count(last_index, max_steps)
    last_index = last_index.to(torch.int64)
    first, second, last_index = torch.broadcast_tensors(first, second, last_index)

    valid = (
        torch.isfinite(first)
        & torch.isfinite(second)
        & (last_index >= -max_steps)
        & (last_index <= max_steps)
    )
    last_index = torch.where(valid, last_index, torch.zeros_like(last_index))
    return last_index, first, second, valid


def _finish(
    first: Tensor, second: Tensor, valid: Tensor, return_window: bool
) -> Tensor | Tuple[Tensor, Tensor]:
    nan = torch.full_like(first, math.nan)
    first = torch.where(valid, first, nan)
    if return_window:
        return first, torch.where(valid, second, nan)
    return first


def hypergeometric_1_f_1_recurrence_forward(
    coefficients: CoefficientFamily,
    last_index: Tensor | int,
    first: Tensor,
    second: Tensor,
    *,
    on_zero_divisor: str = "warn",
    return_window: bool = False,
    max_steps: int = MAX_RECURRENCE_STEPS,
) -> Tensor | Tuple[Tensor, Tensor]:
    r"""
    Walk a three-term recurrence towards increasing offsets.

    Starting from the values at offsets 0 (``first``) and 1 (``second``),
    each step ``k = 0, 1, ..., last_index - 1`` computes

    .. math::

       y_{k+2} = \frac{m_k\, y_{k+1} - t_k\, y_k}{\ell_k}

    with ``(l_k, m_k, t_k) = coefficients(k)`` and slides the window by one.
    The coefficient family must therefore be anchored at the parameter value
    of ``second``.

    Parameters
    ----------
    coefficients : Callable[[int], tuple[Tensor, Tensor, Tensor]]
        Coefficient family returning ``(leading, middle, trailing)``.
    last_index : Tensor or int
        Number of steps, per element. Elements with fewer steps than the
        largest one in the batch keep their window once they are done.
    first, second : Tensor
        Seed values at offsets 0 and 1.
    on_zero_divisor : {"warn", "raise", "ignore"}
        What to do when ``leading`` is exactly zero for an element that is
        still walking. The value itself follows IEEE division in all cases.
    return_window : bool
        If True, return the final ``(first, second)`` pair instead of
        ``first`` alone.
    max_steps : int
        Longest walk attempted. Elements whose step count exceeds it, or
        whose seeds are not finite, are returned as NaN without walking.

    Returns
    -------
    Tensor or tuple[Tensor, Tensor]
        The value at offset ``last_index``, or the final window.

    Raises
    ------
    RecurrenceBreakdownError
        If ``on_zero_divisor="raise"`` and a zero divisor is met.
    """
    last_index, first, second, valid = _prepare(
        last_index, first, second, on_zero_divisor, max_steps
    )

    steps = int(last_index.max().item()) if last_index.numel() > 0 else 0
    warned = [False]

    for k in range(0, steps):
        leading, middle, trailing = coefficients(k)
        active = k < last_index

        _check_zero_divisor(leading, active, on_zero_divisor, k, "forward", warned)

        third = ((middle * second) - (trailing * first)) / leading

        first, second = (
            torch.where(active, second, first),
            torch.where(active, third, second),
        )

    return _finish(first, second, valid, return_window)


def hypergeometric_1_f_1_recurrence_backward(
    coefficients: CoefficientFamily,
    last_index: Tensor | int,
    first: Tensor,
    second: Tensor,
    *,
    on_zero_divisor: str = "warn",
    return_window: bool = False,
    max_steps: int = MAX_RECURRENCE_STEPS,
) -> Tensor | Tuple[Tensor, Tensor]:
    r"""
    Walk a three-term recurrence towards decreasing offsets.

    Starting from the values at offsets 0 (``first``) and -1 (``second``),
    each step ``k = 0, -1, ..., last_index + 1`` computes

    .. math::

       y_{k-2} = \frac{m_k\, y_{k-1} - \ell_k\, y_k}{t_k}

    with ``(l_k, m_k, t_k) = coefficients(k)``. The coefficient family must be
    anchored at the parameter value of ``second``.

    Parameters
    ----------
    coefficients : Callable[[int], tuple[Tensor, Tensor, Tensor]]
        Coefficient family returning ``(leading, middle, trailing)``.
    last_index : Tensor or int
        Non-positive target offset, per element.
    first, second : Tensor
        Seed values at offsets 0 and -1.
    on_zero_divisor : {"warn", "raise", "ignore"}
        Handling of an exactly zero ``trailing`` coefficient.
    return_window : bool
        If True, return the final ``(first, second)`` pair.
    max_steps : int
        Longest walk attempted; see
        :func:`hypergeometric_1_f_1_recurrence_forward`.

    Returns
    -------
    Tensor or tuple[Tensor, Tensor]
        The value at offset ``last_index``, or the final window.
    """
    last_index, first, second, valid = _prepare(
        last_index, first, second, on_zero_divisor, max_steps
    )

    steps = int(last_index.min().item()) if last_index.numel() > 0 else 0
    warned = [False]

    for k in range(0, steps, -1):
        leading, middle, trailing = coefficients(k)
        active = k > last_index

        _check_zero_divisor(trailing, active, on_zero_divisor, k, "backward", warned)

        third = ((middle * second) - (leading * first)) / trailing

        first, second = (
            torch.where(active, second, first),
            torch.where(active, third, second),
        )

    return _finish(first, second, valid, return_window)


def _modf(x: Tensor) -> Tuple[Tensor, Tensor]:
    # Split toward zero: -12.3 -> (-0.3, -12.0)
    integer_part = torch.trunc(x)
    return x - integer_part, integer_part


def _negative_a_anchor(a: Tensor, b: Tensor) -> Tuple[Tensor, Tensor]:
    """Seed parameter and signed step target for the negative ``a`` walk."""
    bk, _ = _modf(b)
    ak, integer_part = _modf(a)

    # When a and b share their fractional part the seeds M(frac(a), b) sit in
    # a cancellation regime; start from a = b - 1 instead.
    reanchor = (a < b) & (b < 0) & fractional_parts_close(ak, bk, a, b)

    ak = torch.where(reanchor, b - 1, ak)
    integer_part = torch.where(
        reanchor, integer_part - (torch.ceil(b) - 1), integer_part
    )
    return ak, _step_count(integer_part)


def hypergeometric_1_f_1_backward_recurrence_for_negative_a(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    evaluate: Evaluator,
    *,
    on_zero_divisor: str = "warn",
) -> Tensor:
    r"""
    M(a, b, z) for large negative ``a`` by backward recurrence in ``a``.

    ``a`` is split into its integer part ``n`` and fractional part ``ak``.
    The walk starts from ``evaluate(ak, b, z)`` and ``evaluate(ak - 1, b, z)``
    and takes ``|n|`` steps downwards. If ``a < b < 0`` and the fractional
    parts of ``a`` and ``b`` are indistinguishable, the walk starts at
    ``b - 1`` instead.
    Non-finite ``a`` and walks longer than :data:`MAX_RECURRENCE_STEPS`
    give NaN.

    Parameters
    ----------
    a, b, z : Tensor
        Parameters and argument, broadcast against each other.
    evaluate : Callable[[Tensor, Tensor, Tensor], Tensor]
        Evaluator of M used for the two seed values.
    on_zero_divisor : {"warn", "raise", "ignore"}
        Passed to :func:`hypergeometric_1_f_1_recurrence_backward`.

    Returns
    -------
    Tensor
        The extrapolated M(a, b, z).
    """
    a, b, z = torch.broadcast_tensors(a, b, z)

    ak, integer_part = _negative_a_anchor(a, b)

    first = evaluate(ak, b, z)
    ak = ak - 1
    second = evaluate(ak, b, z)

    coefficients = HypergeometricRecurrenceACoefficients(ak, b, z)

    return hypergeometric_1_f_1_recurrence_backward(
        coefficients, integer_part, first, second, on_zero_divisor=on_zero_divisor
    )


def hypergeometric_1_f_1_forward_recurrence_for_positive_a(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    evaluate: Evaluator,
    *,
    on_zero_divisor: str = "warn",
) -> Tensor:
    """M(a, b, z) for large positive ``a`` by forward recurrence in ``a``.

    Seeds are ``evaluate(ak, b, z)`` and ``evaluate(ak + 1, b, z)`` with
    ``ak`` the fractional part of ``a``.
    """
    a, b, z = torch.broadcast_tensors(a, b, z)

    ak, integer_part = _modf(a)

    first = evaluate(ak, b, z)
    ak = ak + 1
    second = evaluate(ak, b, z)

    coefficients = HypergeometricRecurrenceACoefficients(ak, b, z)

    return hypergeometric_1_f_1_recurrence_forward(
        coefficients,
        _step_count(integer_part),
        first,
        second,
        on_zero_divisor=on_zero_divisor,
    )


def hypergeometric_1_f_1_backward_recurrence_for_negative_b(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    evaluate: Evaluator,
    *,
    on_zero_divisor: str = "warn",
) -> Tensor:
    """M(a, b, z) for large negative ``b`` by backward recurrence in ``b``.

    Seeds are ``evaluate(a, bk, z)`` and ``evaluate(a, bk - 1, z)`` with
    ``bk`` the fractional part of ``b``. Integer ``b`` hits the pole of M at
    the seeds and yields a non-finite result.
    """
    a, b, z = torch.broadcast_tensors(a, b, z)

    bk, integer_part = _modf(b)

    first = evaluate(a, bk, z)
    bk = bk - 1
    second = evaluate(a, bk, z)

    coefficients = HypergeometricRecurrenceBCoefficients(a, bk, z)

    return hypergeometric_1_f_1_recurrence_backward(
        coefficients,
        _step_count(integer_part),
        first,
        second,
        on_zero_divisor=on_zero_divisor,
    )


def hypergeometric_1_f_1_backward_recurrence_for_negative_a_and_b(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    evaluate: Evaluator,
    *,
    on_zero_divisor: str = "warn",
) -> Tensor:
    """M(a, b, z) for jointly large negative ``a`` and ``b``.

    Walks ``a`` and ``b`` down together from ``evaluate(ak, bk, z)`` and
    ``evaluate(ak - 1, bk - 1, z)``. The integer parts of ``a`` and ``b``
    must be equal; the step count is taken from ``b`` and the condition is
    not checked.
    """
    a, b, z = torch.broadcast_tensors(a, b, z)

    ak, _ = _modf(a)
    bk, integer_part = _modf(b)

    first = evaluate(ak, bk, z)
    ak = ak - 1
    bk = bk - 1
    second = evaluate(ak, bk, z)

    coefficients = HypergeometricRecurrenceAAndBCoefficients(ak, bk, z)

    return hypergeometric_1_f_1_recurrence_backward(
        coefficients,
        _step_count(integer_part),
        first,
        second,
        on_zero_divisor=on_zero_divisor,
    )


def hypergeometric_1_f_1_is_a_small_enough(
    a: Tensor, *, threshold: float = SMALL_A_THRESHOLD
) -> Tensor:
    """True where ``a < threshold``, i.e. where recurrence in ``a`` is preferred."""
    if not isinstance(a, Tensor):
        raise TypeError("a must be a torch.Tensor")
    return a < threshold


__all__ = [
    "HypergeometricRecurrenceAAndBCoefficients",
    "HypergeometricRecurrenceACoefficients",
    "HypergeometricRecurrenceBCoefficients",
    "MAX_RECURRENCE_STEPS",
    "SMALL_A_THRESHOLD",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_a",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_a_and_b",
    "hypergeometric_1_f_1_backward_recurrence_for_negative_b",
    "hypergeometric_1_f_1_forward_recurrence_for_positive_a",
    "hypergeometric_1_f_1_is_a_small_enough",
    "hypergeometric_1_f_1_recurrence_backward",
    "hypergeometric_1_f_1_recurrence_forward",
]

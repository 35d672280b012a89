import torch
from torch import Tensor

_ORDERED_INTEGER_DTYPES = {
    torch.float64: torch.int64,
    torch.float32: torch.int32,
    torch.float16: torch.int16,
    torch.bfloat16: torch.int16,
}


def _ordered_bits(x: Tensor) -> Tensor:
    # Maps IEEE sign-magnitude bit patterns onto int64 so that consecutive
    # representable values differ by exactly 1 and -0.0 and +0.0 coincide.
    integer_dtype = _ORDERED_INTEGER_DTYPES[x.dtype]
    bits = x.contiguous().view(integer_dtype).to(torch.int64)
    sign_bit = -(2 ** (torch.iinfo(integer_dtype).bits - 1))
    return torch.where(bits < 0, sign_bit - bits, bits)


def float_distance(x: Tensor, y: Tensor) -> Tensor:
    r"""
    Signed number of representable values between ``x`` and ``y``.

    The distance is positive when ``y > x`` and is computed exactly from the
    IEEE bit patterns, so ``float_distance(x, torch.nextafter(x, inf))`` is
    one for every finite ``x``.

    Parameters
    ----------
    x, y : Tensor
        Floating point tensors of the same dtype; broadcast against each other.

    Returns
    -------
    Tensor
        Distances in units in the last place, with the dtype of ``x``.

    Notes
    -----
    The count is exact while it fits in an ``int64``, which holds for any pair
    of finite ``float32``/``float16`` values and for ``float64`` pairs that do
    not straddle zero at the extremes of the exponent range.
    """
    if not (isinstance(x, Tensor) and isinstance(y, Tensor)):
        raise TypeError("x and y must be torch.Tensors")
    if x.dtype != y.dtype:
        raise TypeError(
            f"x and y must share a dtype, got {x.dtype} and {y.dtype}"
        )
    if x.dtype not in _ORDERED_INTEGER_DTYPES:
        raise TypeError(f"float_distance requires a real floating dtype, got {x.dtype}")
    x, y = torch.broadcast_tensors(x, y)
    return (_ordered_bits(y) - _ordered_bits(x)).to(x.dtype)


def fractional_parts_close(ak: Tensor, bk: Tensor, a: Tensor, b: Tensor) -> Tensor:
    """Elementwise test that the fractional parts ``ak`` and ``bk`` coincide.

    ``ak`` and ``bk`` are treated as indistinguishable when their distance in
    ULPs does not exceed ``2 ** max(exponent(a), exponent(b))``, the exponents
    being those returned by :func:`torch.frexp`.
    """
    _, exponent_a = torch.frexp(a)
    _, exponent_b = torch.frexp(b)
    scale = torch.exp2(torch.maximum(exponent_a, exponent_b).to(ak.dtype))
    return torch.abs(float_distance(ak, bk)) <= scale


__all__ = ["float_distance", "fractional_parts_close"]

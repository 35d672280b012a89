from __future__ import annotations

from typing import Tuple

import torch
from torch import Tensor


def _promote_dtype(*tensors: Tensor) -> torch.dtype:
    dtype = tensors[0].dtype
    for t in tensors[1:]:
        dtype = torch.promote_types(dtype, t.dtype)
    if dtype.is_complex:
        raise TypeError("complex arguments are not supported")
    # Integers follow the default dtype; low precision is promoted to float32
    if not dtype.is_floating_point:
        return torch.get_default_dtype()
    if dtype in (torch.float16, torch.bfloat16):
        return torch.float32
    return dtype


def _hypergeometric_1_f_1_series(
    a: Tensor,
    b: Tensor,
    z: Tensor,
    *,
    tol: float = 1e-16,
    max_terms: int = 2048,
    min_terms: int = 8,
    _debug: bool = False,
) -> Tensor | Tuple[Tensor, Tensor, Tensor]:
    """
    Evaluate Kummer's function M(a, b, z) via its power series.

    Parameters
    ----------
    a : Tensor
        Numerator parameter. Broadcasts with ``b`` and ``z``.
    b : Tensor
        Denominator parameter.
    z : Tensor
        Argument tensor.
    tol : float
        Relative tolerance for adaptive truncation.
    max_terms : int
        Maximum number of series terms.
    min_terms : int
        Minimum number of terms before allowing early stopping.
    _debug : bool
        If True, also return (terms_used, converged_mask).

    Notes
    -----
    Each term is obtained from the previous one through the ratio
    ``(a + k - 1) z / ((b + k - 1) k)``. A ratio with a zero denominator
    (``b`` a non-positive integer) is ``inf`` and leaves the sum non-finite,
    unless the series has already terminated because ``a`` is a
    non-positive integer of smaller magnitude.
    """
    if not (isinstance(a, Tensor) and isinstance(b, Tensor) and isinstance(z, Tensor)):
        raise TypeError("a, b, z must be torch.Tensors")

    batch_shape = torch.broadcast_shapes(a.shape, b.shape, z.shape)
    dtype = _promote_dtype(a, b, z)
    device = z.device

    a_b = a.to(dtype).expand(batch_shape)
    b_b = b.to(dtype).expand(batch_shape)
    z_b = z.to(dtype).expand(batch_shape)

    S = torch.ones(batch_shape, dtype=dtype, device=device)
    t = S.clone()
    converged = torch.zeros(batch_shape, dtype=torch.bool, device=device)
    terms_used = torch.zeros(batch_shape, dtype=torch.int32, device=device)

    for k in range(1, max_terms + 1):
        num = a_b + (k - 1)
        den = (b_b + (k - 1)) * k

        # Guard division by zero: where den==0, set ratio to +inf (propagate to S)
        safe_den = torch.where(den == 0, torch.ones_like(den), den)
        ratio = (num / safe_den) * z_b
        ratio = torch.where(den == 0, torch.full_like(ratio, float("inf")), ratio)

        # A terminated series stays terminated past a pole
        t = torch.where(t == 0, t, t * ratio)
        S = S + t

        just_converged = (~converged) & (t.abs() <= (S.abs() * tol)) & (k >= min_terms)
        terms_used = torch.where(just_converged, torch.as_tensor(k, dtype=torch.int32, device=device), terms_used)
        converged = converged | just_converged

        if bool(converged.all()):
            break

    if _debug:
        return S, terms_used, converged
    return S


__all__ = ["_hypergeometric_1_f_1_series"]

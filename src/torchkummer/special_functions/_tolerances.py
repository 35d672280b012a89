"""Dtype-aware defaults for series truncation."""

import torch


def default_tolerances(dtype: torch.dtype) -> dict[str, float]:
    """Return dtype-appropriate default tolerances.

    Parameters
    ----------
    dtype : torch.dtype
        The tensor dtype.

    Returns
    -------
    dict[str, float]
        Dictionary with key ``'tol'``, the relative size of the last series
        term below which summation stops.
    """
    if dtype in (torch.float16, torch.bfloat16):
        return {"tol": 1e-4}
    elif dtype == torch.float32:
        return {"tol": 1e-8}
    else:  # float64 and others
        return {"tol": 1e-16}

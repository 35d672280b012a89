"""torchkummer: PyTorch evaluation of Kummer's confluent hypergeometric function."""

from . import special_functions

__all__ = [
    "special_functions",
]

__version__ = "0.1.0"

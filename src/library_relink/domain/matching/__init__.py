"""Track-to-file similarity scoring."""

from .scoring import score, strip_extension
from .tokenize import tokenize

__all__ = ["score", "strip_extension", "tokenize"]

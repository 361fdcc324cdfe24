"""Heuristic token estimation for fragment sets."""

from .estimator import estimate_tokens, flatten

__all__ = ["estimate_tokens", "flatten"]

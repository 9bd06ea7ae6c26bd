"""Frontier scoring: evaluator priority discounted by crawl depth."""
from __future__ import annotations

from typing import Final

__all__ = ["DEFAULT_DECAY_FACTOR", "score", "validate_decay_factor"]

DEFAULT_DECAY_FACTOR: Final[float] = 0.94


def validate_decay_factor(decay_factor: float) -> float:
    if not 0.0 < decay_factor < 1.0:
        raise ValueError(f"decay_factor must be in (0, 1), got {decay_factor}")
    return decay_factor


def score(priority: int, depth: int, decay_factor: float = DEFAULT_DECAY_FACTOR) -> float:
    """Return ``priority * decay_factor ** depth``.

    Strictly decreasing in *depth*, strictly increasing in *priority* and never
    zero for a finite depth. Depth limits are the caller's business.
    """
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")
    validate_decay_factor(decay_factor)
    return int(priority) * decay_factor**depth

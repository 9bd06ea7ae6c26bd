"""Exception types raised at the collaborator boundaries of the crawler."""
from __future__ import annotations

__all__ = ["ScouterError", "FetchError", "EvaluationError"]


class ScouterError(Exception):
    """Base class for all Scouter errors."""


class FetchError(ScouterError):
    """A page could not be fetched or is not usable HTML."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class EvaluationError(ScouterError):
    """The evaluator failed or returned something that cannot be parsed."""

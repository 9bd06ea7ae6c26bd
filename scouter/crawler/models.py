# scouter/crawler/models.py
"""
Data models for the Scouter crawler.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, FrozenSet, List

from scouter.scoring import DEFAULT_DECAY_FACTOR, score

__all__ = (
    "Priority",
    "Link",
    "FetchedPage",
    "LinkEvaluation",
    "Page",
    "TargetLink",
    "TerminationReason",
    "CrawlResult",
)


class Priority(IntEnum):
    """Relevance rating assigned by the evaluator to a link or a page."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    VERY_HIGH = 4
    CRITICAL = 5

    @classmethod
    def parse(cls, value: Any) -> Priority:
        """Build a Priority from evaluator output.

        Integers are clamped to 1..5, names are matched case-insensitively
        (``"veryhigh"``, ``"very_high"`` and ``"Very High"`` are all accepted).
        """
        if isinstance(value, Priority):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid priority: {value!r}")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"invalid priority: {value!r}")
        if isinstance(value, (int, float)):
            return cls(min(max(int(value), cls.LOW), cls.CRITICAL))
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls.parse(int(text))
            key = text.replace(" ", "").replace("_", "").replace("-", "").lower()
            for member in cls:
                if member.name.replace("_", "").lower() == key:
                    return member
        raise ValueError(f"invalid priority: {value!r}")


@dataclass(frozen=True, slots=True)
class Link:
    """An outbound link as found on a page: absolute URL and anchor text."""

    url: str
    text: str


@dataclass(frozen=True, slots=True)
class FetchedPage:
    """What a Fetcher returns for one URL."""

    url: str
    text: str
    links: List[Link] = field(default_factory=list)
    title: str = ""


@dataclass(frozen=True, slots=True)
class LinkEvaluation:
    """Priority the evaluator assigned to one submitted link."""

    url: str
    priority: Priority


@dataclass(frozen=True, slots=True)
class Page:
    """A fetched and evaluated page. Created once per canonical URL."""

    url: str
    text: str
    priority: Priority
    title: str = ""
    crawled_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self, *, text_chars: int | None = None) -> dict[str, Any]:
        text = self.text if text_chars is None else self.text[:text_chars]
        return {
            "url": self.url,
            "title": self.title,
            "priority": self.priority.name.lower(),
            "crawled_at": self.crawled_at.isoformat(),
            "text": text,
        }


@dataclass(frozen=True, slots=True)
class TargetLink:
    """A frontier candidate. Identity is the canonical URL."""

    url: str
    texts: FrozenSet[str]
    priority: Priority
    depth: int
    decay_factor: float = DEFAULT_DECAY_FACTOR

    @property
    def score(self) -> float:
        return score(self.priority, self.depth, self.decay_factor)

    def describe(self) -> str:
        label = " | ".join(sorted(self.texts))[:60]
        return f"[{self.score:.3f}] {self.priority.name} d={self.depth} {label} {self.url}"


class TerminationReason(str, Enum):
    MAX_PAGES_REACHED = "max_pages_reached"
    LOW_PRIORITY_STREAK_EXCEEDED = "low_priority_streak_exceeded"
    COMPLETED = "completed"


@dataclass(slots=True)
class CrawlResult:
    """Outcome of one :meth:`Crawler.run`."""

    pages: List[Page]
    termination_reason: TerminationReason
    crawled_urls: int = 0

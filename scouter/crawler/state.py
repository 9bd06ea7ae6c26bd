# scouter/crawler/state.py
"""
Single owner of all mutable state of one crawl run.

Every read and write of the crawled-URL set, the frontier, the stored pages
and the counters goes through the coroutines below, each of which holds one
:class:`asyncio.Lock` for its whole body. Check-then-insert sequences such as
:meth:`CrawlerState.mark_url_as_crawled` and :meth:`CrawlerState.add_target`
are therefore atomic with respect to every other crawl task.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from scouter.crawler.models import Page, TargetLink, TerminationReason

if TYPE_CHECKING:
    from scouter.config import CrawlOptions

__all__ = ("CrawlerState", "Progress")


@dataclass(frozen=True, slots=True)
class Progress:
    crawled: int
    active: int
    remaining: int
    stored: int
    max_pages: int

    def __str__(self) -> str:
        return (
            f"Crawled: {self.crawled}, Active: {self.active}, "
            f"Remaining: {self.remaining}, Stored: {self.stored}/{self.max_pages}"
        )


class CrawlerState:
    """Visited set, frontier, stored pages, counters and the termination reason."""

    def __init__(self, options: CrawlOptions) -> None:
        self.max_pages: int = options.max_pages
        self.max_crawled_pages: int = min(options.max_crawled_pages or options.max_pages, options.max_pages)
        self.max_concurrent_crawls: int = options.max_concurrent_crawls
        self.max_low_priority_streak: int = options.max_low_priority_streak
        self.minimum_link_score: float = options.minimum_link_score
        self.min_pages_before_streak: int = options.min_pages_before_streak

        self._lock = asyncio.Lock()
        self._crawled_urls: Set[str] = set()
        self._pages: Dict[str, Page] = {}
        self._targets: Dict[str, TargetLink] = {}
        # max-heap via negated score; stale entries are skipped on pop
        self._heap: List[Tuple[float, int, str]] = []
        self._seq = itertools.count()
        self._active_crawls = 0
        self._low_priority_streak = 0
        self._termination_reason: Optional[TerminationReason] = None

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #

    async def mark_url_as_crawled(self, url: str) -> bool:
        """Insert *url* into the crawled set; True only for the first caller."""
        async with self._lock:
            if url in self._crawled_urls:
                return False
            self._crawled_urls.add(url)
            # a queued duplicate can never be crawled now
            self._targets.pop(url, None)
            return True

    async def add_page(self, page: Page) -> bool:
        """Store *page* unless the cap is reached. Late pages are dropped."""
        async with self._lock:
            if len(self._pages) >= self.max_pages or page.url in self._pages:
                return False
            self._pages[page.url] = page
            return True

    async def add_target(self, target: TargetLink) -> bool:
        async with self._lock:
            if target.url in self._crawled_urls or target.url in self._targets:
                return False
            self._targets[target.url] = target
            heapq.heappush(self._heap, (-target.score, next(self._seq), target.url))
            return True

    async def next_target(self) -> Optional[TargetLink]:
        """Pop the best-scoring target and reserve a crawl slot for it.

        Returns None when all slots are taken or the frontier is empty.
        """
        async with self._lock:
            if self._active_crawls >= self.max_concurrent_crawls:
                return None
            target = self._pop_best()
            if target is None:
                return None
            self._active_crawls += 1
            if target.score > self.minimum_link_score:
                self._low_priority_streak = 0
            elif len(self._pages) >= self.min_pages_before_streak:
                self._low_priority_streak += 1
            return target

    async def complete_crawl(self) -> None:
        async with self._lock:
            if self._active_crawls > 0:
                self._active_crawls -= 1

    async def should_terminate(self) -> Optional[TerminationReason]:
        """Return the terminal condition, if any. The first one found sticks."""
        async with self._lock:
            if self._termination_reason is not None:
                return self._termination_reason
            if len(self._pages) >= self.max_crawled_pages:
                self._termination_reason = TerminationReason.MAX_PAGES_REACHED
            elif self._low_priority_streak >= self.max_low_priority_streak:
                self._termination_reason = TerminationReason.LOW_PRIORITY_STREAK_EXCEEDED
            return self._termination_reason

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    async def count_high_score_targets(self, threshold: float) -> int:
        async with self._lock:
            return sum(1 for t in self._targets.values() if t.score >= threshold)

    async def pages(self) -> List[Page]:
        async with self._lock:
            return list(self._pages.values())

    async def is_crawled(self, url: str) -> bool:
        async with self._lock:
            return url in self._crawled_urls

    async def progress(self) -> Progress:
        async with self._lock:
            return Progress(
                crawled=len(self._crawled_urls),
                active=self._active_crawls,
                remaining=len(self._targets),
                stored=len(self._pages),
                max_pages=self.max_pages,
            )

    @property
    def termination_reason(self) -> TerminationReason:
        return self._termination_reason or TerminationReason.COMPLETED

    @property
    def active_crawls(self) -> int:
        return self._active_crawls

    @property
    def low_priority_streak(self) -> int:
        return self._low_priority_streak

    @property
    def frontier_size(self) -> int:
        return len(self._targets)

    # ------------------------------------------------------------------ #

    def _pop_best(self) -> Optional[TargetLink]:
        while self._heap:
            _, _, url = heapq.heappop(self._heap)
            target = self._targets.pop(url, None)
            if target is not None:
                return target
        return None

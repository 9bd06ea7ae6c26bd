# scouter/crawler/protocols.py
"""
Collaborator interfaces consumed by the crawler.

Any object with these coroutines can be plugged into :class:`Crawler`; the
production implementations are :class:`scouter.crawler.fetcher.HttpFetcher`
and :class:`scouter.evaluator.OpenAIEvaluator`.
"""
from __future__ import annotations

from typing import Dict, List, Protocol, runtime_checkable

from scouter.crawler.models import FetchedPage, LinkEvaluation, Priority

__all__ = ["Fetcher", "Evaluator"]


@runtime_checkable
class Fetcher(Protocol):
    async def fetch(self, url: str) -> FetchedPage:
        """Return text and outbound links of *url*; raise FetchError on failure."""
        ...


@runtime_checkable
class Evaluator(Protocol):
    async def evaluate_targets(
        self, targets: Dict[str, List[str]], query: str
    ) -> List[LinkEvaluation]:
        """Rate each URL (with its anchor texts) against *query*."""
        ...

    async def evaluate_content(self, content: str, query: str) -> Priority:
        """Rate a page's text against *query*."""
        ...

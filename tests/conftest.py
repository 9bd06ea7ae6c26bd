# File: tests/conftest.py
import asyncio
import logging
from collections import Counter
from typing import Callable, Dict, List, Optional

import pytest

from scouter.config import CrawlOptions
from scouter.crawler.models import FetchedPage, Link, LinkEvaluation, Priority
from scouter.domain_control import DomainControl
from scouter.errors import EvaluationError, FetchError
from scouter.logger import LOGGER_NAME


class FakeFetcher:
    """
    In-memory Fetcher over a dict ``url -> [(link_url, anchor_text), ...]``.

    URLs missing from the graph fail with FetchError unless *factory* builds
    their links, which allows effectively infinite graphs.
    """

    def __init__(
        self,
        graph: Optional[Dict[str, List[tuple]]] = None,
        factory: Optional[Callable[[str], List[tuple]]] = None,
        delay: float = 0.0,
        fail: Optional[set] = None,
    ) -> None:
        self.graph = graph or {}
        self.factory = factory
        self.delay = delay
        self.fail = fail or set()
        self.calls: Counter = Counter()
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> FetchedPage:
        self.calls[url] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url in self.fail:
                raise FetchError(url, "boom")
            if url in self.graph:
                edges = self.graph[url]
            elif self.factory is not None:
                edges = self.factory(url)
            else:
                raise FetchError(url, "HTTP 404")
            links = [Link(url=u, text=t) for u, t in edges]
            return FetchedPage(url=url, text=f"text of {url}", links=links, title=url)
        finally:
            self.in_flight -= 1


class FakeEvaluator:
    """Deterministic Evaluator: fixed or per-URL priorities, optional failures."""

    def __init__(
        self,
        link_priority: Priority | Callable[[str], Priority] = Priority.MEDIUM,
        content_priority: Priority = Priority.HIGH,
        fail_targets: bool = False,
        fail_content: bool = False,
        extra_urls: Optional[List[str]] = None,
    ) -> None:
        self.link_priority = link_priority
        self.content_priority = content_priority
        self.fail_targets = fail_targets
        self.fail_content = fail_content
        self.extra_urls = extra_urls or []
        self.target_calls: List[Dict[str, List[str]]] = []
        self.content_calls = 0

    async def evaluate_targets(self, targets, query) -> List[LinkEvaluation]:
        self.target_calls.append(dict(targets))
        await asyncio.sleep(0)
        if self.fail_targets:
            raise EvaluationError("link evaluator down")
        result = []
        for url in list(targets) + self.extra_urls:
            prio = self.link_priority(url) if callable(self.link_priority) else self.link_priority
            result.append(LinkEvaluation(url=url, priority=prio))
        return result

    async def evaluate_content(self, content, query) -> Priority:
        self.content_calls += 1
        await asyncio.sleep(0)
        if self.fail_content:
            raise EvaluationError("content evaluator down")
        return self.content_priority


def chain_factory(fanout: int = 3) -> Callable[[str], List[tuple]]:
    """Infinite tree: every page links to *fanout* fresh children."""

    def build(url: str) -> List[tuple]:
        return [(f"{url.rstrip('/')}/{i}", f"child {i}") for i in range(fanout)]

    return build


@pytest.fixture()
def no_domain_control() -> DomainControl:
    return DomainControl(exclude_from_crawling=[], exclude_from_evaluation=[], exclude_from_relevant=[])


@pytest.fixture()
def crawl_options(no_domain_control) -> CrawlOptions:
    """Permissive options: nothing stops the crawl except the page cap."""
    return CrawlOptions(
        max_pages=20,
        max_concurrent_crawls=3,
        max_low_priority_streak=1000,
        minimum_link_score=0.0,
        min_high_score_links=1000,
        domain_control=no_domain_control,
    )


@pytest.fixture(autouse=True)
def reset_scouter_logger():
    """The CLI rebinds handlers to CliRunner streams; drop them after each test."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
    lg.propagate = True
    lg.setLevel(logging.NOTSET)

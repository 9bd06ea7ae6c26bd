# File: scouter/engine.py
"""scouter.engine: фасад поиска: стартовые URL из поисковой выдачи, обход и отбор релевантных страниц."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote_plus

from scouter.config import ScouterConfig
from scouter.crawler.crawler import Crawler
from scouter.crawler.fetcher import HttpFetcher
from scouter.crawler.models import Page, TerminationReason
from scouter.crawler.protocols import Evaluator, Fetcher
from scouter.evaluator import OpenAIEvaluator
from scouter.logger import logger

__all__ = ["ScoutResult", "Engine", "build_seed_urls", "start_search"]


@dataclass(slots=True)
class ScoutResult:
    """Результат одного поиска."""

    query: str
    seed_urls: List[str]
    pages: List[Page]
    relevant_pages: List[Page]
    termination_reason: TerminationReason
    duration: float
    crawled_urls: int = 0
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, *, text_chars: Optional[int] = 500) -> dict[str, Any]:
        return {
            "query": self.query,
            "seed_urls": self.seed_urls,
            "termination_reason": self.termination_reason.value,
            "duration": round(self.duration, 3),
            "crawled_urls": self.crawled_urls,
            "pages": [p.to_dict(text_chars=text_chars) for p in self.pages],
            "relevant_pages": [p.url for p in self.relevant_pages],
        }


def build_seed_urls(config: ScouterConfig, query: str) -> List[str]:
    """Строит URL поисковой выдачи для запроса и добавляет seed_urls из конфига."""
    seeds = [config.search_url.format(query=quote_plus(query))]
    seeds.extend(u for u in config.seed_urls if u not in seeds)
    return seeds


class Engine:
    """Связывает Fetcher, Evaluator и Crawler для одного запроса."""

    def __init__(self, config: ScouterConfig, fetcher: Fetcher, evaluator: Evaluator) -> None:
        self.config = config
        self.fetcher = fetcher
        self.evaluator = evaluator

    async def search(self, query: str) -> ScoutResult:
        query = query.strip()
        if not query:
            raise ValueError("query must not be empty")
        seeds = build_seed_urls(self.config, query)
        crawler = Crawler(query, self.fetcher, self.evaluator, self.config.crawl)

        start = time.monotonic()
        result = await crawler.run(seeds)
        duration = time.monotonic() - start

        pages = sorted(result.pages, key=lambda p: (p.priority, p.crawled_at), reverse=True)
        relevant = self.select_relevant(pages)
        logger.info(
            "Search finished: %d pages, %d relevant, reason=%s",
            len(pages),
            len(relevant),
            result.termination_reason.value,
        )
        return ScoutResult(
            query=query,
            seed_urls=seeds,
            pages=pages,
            relevant_pages=relevant,
            termination_reason=result.termination_reason,
            duration=duration,
            crawled_urls=result.crawled_urls,
        )

    def select_relevant(self, pages: List[Page]) -> List[Page]:
        """Страницы с приоритетом не ниже relevant_priority вне exclude_from_relevant."""
        dc = self.config.crawl.domain_control
        return [
            p
            for p in pages
            if p.priority >= self.config.relevant_priority and not dc.is_excluded_from_relevant(p.url)
        ]


async def start_search(config: ScouterConfig, query: str) -> ScoutResult:
    """
    Запускает поиск с HttpFetcher и OpenAIEvaluator и возвращает ScoutResult.

    Parameters
    ----------
    config : ScouterConfig
        Конфигурация поиска.
    query : str
        Запрос на естественном языке.
    """
    evaluator = OpenAIEvaluator(config.evaluator)
    async with HttpFetcher(config.fetcher) as fetcher:
        return await Engine(config, fetcher, evaluator).search(query)

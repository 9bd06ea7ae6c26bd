# === FILE: scouter/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional, Set

from scouter.config import CrawlOptions
from scouter.crawler.link_extractor import (
    group_links,
    has_skipped_extension,
    is_image_filename,
    normalize_url,
)
from scouter.crawler.models import CrawlResult, Page, TargetLink
from scouter.crawler.protocols import Evaluator, Fetcher
from scouter.crawler.state import CrawlerState
from scouter.logger import LOGGER_NAME

__all__ = ("Crawler",)


class Crawler:
    """Greedy best-first crawler for one query.

    Each :meth:`crawl` call fetches one page, scores its links into the shared
    frontier, rates the page itself and then fans out over the frontier with
    one child task per target it manages to pop. All shared state lives in
    :class:`CrawlerState`; this class only orchestrates.
    """

    def __init__(
        self,
        query: str,
        fetcher: Fetcher,
        evaluator: Evaluator,
        options: Optional[CrawlOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.query = query
        self.fetcher = fetcher
        self.evaluator = evaluator
        self.options = options or CrawlOptions()
        self.domain_control = self.options.domain_control
        self.state = CrawlerState(self.options)
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    async def run(self, seed_urls: Iterable[str]) -> CrawlResult:
        """Crawl *seed_urls* one after another until done or a stop condition holds."""
        self.logger.info("Crawl started: %r", self.query)
        start = time.monotonic()
        for seed in seed_urls:
            reason = await self.state.should_terminate()
            if reason is not None:
                self.logger.info("Crawling terminated before seed %s: %s", seed, reason.value)
                break
            try:
                await self.crawl(seed)
            except Exception:
                self.logger.exception("Seed %s failed", seed)
        pages = await self.state.pages()
        progress = await self.state.progress()
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d pages in %.2f s (%s)",
            len(pages),
            duration,
            self.state.termination_reason.value,
        )
        return CrawlResult(
            pages=pages,
            termination_reason=self.state.termination_reason,
            crawled_urls=progress.crawled,
        )

    async def crawl(self, url: str, depth: int = 0) -> None:
        normalized = normalize_url(url)
        if normalized is None:
            self.logger.debug("Invalid URL: %s", url)
            return

        if self.domain_control.is_excluded_from_crawling(normalized):
            self.logger.debug("Excluded from crawling: %s", normalized)
            return

        if not await self.state.mark_url_as_crawled(normalized):
            self.logger.debug("URL already crawled: %s", normalized)
            return

        reason = await self.state.should_terminate()
        if reason is not None:
            self.logger.debug("Crawling terminated (%s), skip %s", reason.value, normalized)
            return

        try:
            fetched = await self.fetcher.fetch(normalized)
        except Exception as exc:
            self.logger.warning("Failed to fetch %s: %s", normalized, exc)
            return

        targets = await self._filter_targets(group_links(fetched.links), depth + 1)
        await self._evaluate_and_add_targets(targets, depth + 1)
        await self._evaluate_and_add_page(normalized, fetched.title, fetched.text)

        self.logger.info("Crawling progress: %s", await self.state.progress())
        await self._fan_out()

    async def _filter_targets(self, grouped: Dict[str, List[str]], depth: int) -> Dict[str, List[str]]:
        if self.options.max_depth is not None and depth > self.options.max_depth:
            return {}
        dc = self.domain_control
        result: Dict[str, List[str]] = {}
        for url, texts in grouped.items():
            if dc.is_excluded_from_crawling(url) or dc.is_excluded_from_evaluation(url):
                continue
            if has_skipped_extension(url):
                continue
            if not texts or all(is_image_filename(t) for t in texts):
                continue
            if await self.state.is_crawled(url):
                continue
            result[url] = texts
        return result

    async def _evaluate_and_add_targets(self, targets: Dict[str, List[str]], depth: int) -> None:
        if not targets:
            return
        high = await self.state.count_high_score_targets(self.options.high_score_threshold)
        if high >= self.options.min_high_score_links:
            self.logger.info("Sufficient potential links found (%d), skipping link evaluation", high)
            return
        try:
            evaluations = await self.evaluator.evaluate_targets(targets, self.query)
        except Exception as exc:
            self.logger.error("Failed to evaluate %d links: %s", len(targets), exc)
            return

        for evaluation in evaluations:
            url = normalize_url(evaluation.url)
            if url is None or url not in targets:
                self.logger.debug("Evaluator returned unknown link: %s", evaluation.url)
                continue
            target = TargetLink(
                url=url,
                texts=frozenset(targets[url]),
                priority=evaluation.priority,
                depth=depth,
                decay_factor=self.options.decay_factor,
            )
            if target.score <= self.options.min_target_score:
                self.logger.debug("Low score, not queued: %s", target.describe())
                continue
            if await self.state.add_target(target):
                self.logger.debug("Queued %s", target.describe())

    async def _evaluate_and_add_page(self, url: str, title: str, text: str) -> None:
        try:
            priority = await self.evaluator.evaluate_content(text, self.query)
        except Exception as exc:
            self.logger.error("Failed to evaluate content for %s: %s", url, exc)
            return
        page = Page(url=url, text=text, priority=priority, title=title)
        if await self.state.add_page(page):
            self.logger.info("[Page][%s] %s", priority.name, url)

    async def _fan_out(self) -> None:
        pending: Set[asyncio.Task[None]] = set()
        try:
            while True:
                while await self.state.should_terminate() is None:
                    target = await self.state.next_target()
                    if target is None:
                        break
                    self.logger.debug("Next target %s", target.describe())
                    pending.add(asyncio.create_task(self._crawl_target(target)))
                if not pending:
                    return
                _, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # only reached with work left when this task itself is cancelled
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def _crawl_target(self, target: TargetLink) -> None:
        try:
            await self.crawl(target.url, target.depth)
        except Exception:
            self.logger.exception("Error crawling %s", target.url)
        finally:
            await self.state.complete_crawl()

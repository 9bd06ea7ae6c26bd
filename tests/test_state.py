# File: tests/test_state.py
"""Тесты CrawlerState: атомарность, лимиты, приоритетная очередь и условия остановки."""
from __future__ import annotations

import asyncio

import pytest

from scouter.config import CrawlOptions
from scouter.crawler.models import Page, Priority, TargetLink, TerminationReason
from scouter.crawler.state import CrawlerState


def make_target(url: str, priority: Priority = Priority.MEDIUM, depth: int = 1) -> TargetLink:
    return TargetLink(url=url, texts=frozenset({url}), priority=priority, depth=depth)


def make_page(url: str, priority: Priority = Priority.HIGH) -> Page:
    return Page(url=url, text="text", priority=priority)


def make_state(**kwargs) -> CrawlerState:
    defaults = dict(max_pages=10, max_concurrent_crawls=2, max_low_priority_streak=3)
    defaults.update(kwargs)
    return CrawlerState(CrawlOptions(**defaults))


@pytest.mark.asyncio()
async def test_mark_url_first_writer_wins_under_concurrency():
    state = make_state()
    results = await asyncio.gather(*(state.mark_url_as_crawled("https://a.test/") for _ in range(50)))
    assert results.count(True) == 1
    assert await state.is_crawled("https://a.test/")


@pytest.mark.asyncio()
async def test_page_cap_holds_under_concurrent_inserts():
    state = make_state(max_pages=3)
    inserted = await asyncio.gather(*(state.add_page(make_page(f"https://a.test/{i}")) for i in range(20)))
    assert inserted.count(True) == 3
    assert len(await state.pages()) == 3


@pytest.mark.asyncio()
async def test_add_target_rejects_crawled_url():
    state = make_state()
    await state.mark_url_as_crawled("https://a.test/")
    assert await state.add_target(make_target("https://a.test/")) is False
    assert state.frontier_size == 0


@pytest.mark.asyncio()
async def test_add_target_rejects_queued_url():
    state = make_state()
    assert await state.add_target(make_target("https://a.test/x", Priority.LOW))
    assert await state.add_target(make_target("https://a.test/x", Priority.CRITICAL)) is False
    assert state.frontier_size == 1


@pytest.mark.asyncio()
async def test_marking_crawled_removes_queued_duplicate():
    state = make_state()
    await state.add_target(make_target("https://a.test/x"))
    await state.mark_url_as_crawled("https://a.test/x")
    assert state.frontier_size == 0
    assert await state.next_target() is None


@pytest.mark.asyncio()
async def test_next_target_returns_highest_score_first():
    state = make_state(max_concurrent_crawls=10)
    await state.add_target(make_target("https://a.test/low", Priority.LOW, depth=1))
    await state.add_target(make_target("https://a.test/crit-deep", Priority.CRITICAL, depth=8))
    await state.add_target(make_target("https://a.test/high", Priority.HIGH, depth=1))

    order = []
    while (target := await state.next_target()) is not None:
        order.append(target.url)
    assert order == ["https://a.test/crit-deep", "https://a.test/high", "https://a.test/low"]


@pytest.mark.asyncio()
async def test_next_target_respects_concurrency_limit():
    state = make_state(max_concurrent_crawls=2)
    for i in range(5):
        await state.add_target(make_target(f"https://a.test/{i}"))

    assert await state.next_target() is not None
    assert await state.next_target() is not None
    assert state.active_crawls == 2
    assert await state.next_target() is None
    assert state.frontier_size == 3

    await state.complete_crawl()
    assert await state.next_target() is not None
    assert state.active_crawls == 2


@pytest.mark.asyncio()
async def test_complete_crawl_floors_at_zero():
    state = make_state()
    await state.complete_crawl()
    await state.complete_crawl()
    assert state.active_crawls == 0


@pytest.mark.asyncio()
async def test_low_priority_streak_counts_and_resets():
    state = make_state(max_concurrent_crawls=10, minimum_link_score=2.0, min_pages_before_streak=1)
    await state.add_page(make_page("https://a.test/seed"))
    await state.add_target(make_target("https://a.test/l1", Priority.LOW))
    await state.add_target(make_target("https://a.test/l2", Priority.LOW))
    await state.add_target(make_target("https://a.test/h", Priority.HIGH))

    await state.next_target()  # HIGH, 3 * 0.94 > 2.0
    assert state.low_priority_streak == 0
    await state.next_target()
    await state.next_target()
    assert state.low_priority_streak == 2

    await state.add_target(make_target("https://a.test/v", Priority.VERY_HIGH))
    await state.next_target()
    assert state.low_priority_streak == 0


@pytest.mark.asyncio()
async def test_low_priority_streak_waits_for_minimum_pages():
    state = make_state(max_concurrent_crawls=10, minimum_link_score=2.0, min_pages_before_streak=2)
    await state.add_page(make_page("https://a.test/seed"))
    await state.add_target(make_target("https://a.test/l1", Priority.LOW))
    await state.next_target()
    assert state.low_priority_streak == 0


@pytest.mark.asyncio()
async def test_should_terminate_max_pages_and_sticky():
    state = make_state(max_pages=5, max_crawled_pages=2)
    assert await state.should_terminate() is None
    await state.add_page(make_page("https://a.test/1"))
    await state.add_page(make_page("https://a.test/2"))
    assert await state.should_terminate() is TerminationReason.MAX_PAGES_REACHED
    assert state.termination_reason is TerminationReason.MAX_PAGES_REACHED

    # even if the streak would now also trigger, the first reason sticks
    for i in range(5):
        await state.add_target(make_target(f"https://a.test/t{i}", Priority.LOW))
    for _ in range(3):
        await state.next_target()
        await state.complete_crawl()
    assert state.low_priority_streak >= state.max_low_priority_streak
    assert await state.should_terminate() is TerminationReason.MAX_PAGES_REACHED


@pytest.mark.asyncio()
async def test_should_terminate_low_priority_streak():
    state = make_state(max_concurrent_crawls=10, max_low_priority_streak=2, minimum_link_score=2.0)
    await state.add_page(make_page("https://a.test/seed"))
    for i in range(3):
        await state.add_target(make_target(f"https://a.test/{i}", Priority.LOW))
    await state.next_target()
    assert await state.should_terminate() is None
    await state.next_target()
    assert await state.should_terminate() is TerminationReason.LOW_PRIORITY_STREAK_EXCEEDED
    await state.add_target(make_target("https://a.test/crit", Priority.CRITICAL))
    await state.next_target()
    assert await state.should_terminate() is TerminationReason.LOW_PRIORITY_STREAK_EXCEEDED


@pytest.mark.asyncio()
async def test_termination_reason_defaults_to_completed():
    state = make_state()
    assert state.termination_reason is TerminationReason.COMPLETED


@pytest.mark.asyncio()
async def test_count_high_score_targets_and_progress():
    state = make_state()
    await state.add_target(make_target("https://a.test/c", Priority.CRITICAL, depth=1))
    await state.add_target(make_target("https://a.test/m", Priority.MEDIUM, depth=1))
    assert await state.count_high_score_targets(3.5) == 1
    progress = await state.progress()
    assert (progress.remaining, progress.active, progress.stored) == (2, 0, 0)
    assert "Remaining: 2" in str(progress)

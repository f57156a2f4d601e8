"""
Unit tests for the per-listing navigate-and-extract pipeline.
"""

import asyncio
import random

import pytest

from src.core.errors import InvalidListingUrl, NavigationError
from src.crawler.pipeline import EXTRACTED, FAILED, INVALID_URL, QUEUED, VehicleExtractionPipeline
from src.sites.registry import get_site_config
from src.store.reprocess_queue import QueuedListing, ReprocessQueue
from tests.fakes import BASE, FakeSession, no_sleep, paged_site

URL = f"{BASE}/vehicle/a1?from=results"
CLEAN_URL = f"{BASE}/vehicle/a1"


def _pipeline(ctx, site_data, sleep=no_sleep, rng=None):
    session = FakeSession(site_data)
    queue = ReprocessQueue(ctx.paths.reprocess_queue)
    pipeline = VehicleExtractionPipeline(
        session, ctx, get_site_config("X5"), queue, sleep=sleep, rng=rng or random.Random(0)
    )
    return pipeline, session, queue


class TestProcess:
    """Tests for VehicleExtractionPipeline.process."""

    def test_happy_path(self, run_context):
        """A healthy listing is extracted on the first attempt."""
        site_data = paged_site([["a1"]])
        pipeline, session, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1", "REGA1"))

        assert outcome.status == EXTRACTED
        assert outcome.ok
        assert outcome.record.id == "a1"
        assert outcome.record.registration == "REGA1"
        assert outcome.record.title == "BMW X5 xDrive50e M Sport"
        assert outcome.record.mileage == 12000
        assert site_data.navigations == [CLEAN_URL]
        assert pipeline.contexts_recreated == 0
        assert queue.read() == []

    def test_hydration_stall_recovers_with_new_context(self, run_context):
        """A hydration timeout triggers a fresh context and a second attempt."""
        site_data = paged_site([["a1"]])
        site_data.hydration_stalls[CLEAN_URL] = 1
        pipeline, session, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.status == EXTRACTED
        assert pipeline.contexts_recreated == 1
        assert session.contexts_created == 2
        assert site_data.navigations == [CLEAN_URL, CLEAN_URL]
        assert queue.read() == []

    def test_two_failures_queue_listing(self, run_context):
        """A listing failing both attempts lands in the reprocess queue."""
        site_data = paged_site([["a1"]])
        site_data.hydration_stalls[CLEAN_URL] = 2
        pipeline, _, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.status == QUEUED
        assert outcome.record is None
        assert queue.read() == [QueuedListing("a1", URL)]

    def test_failure_without_requeue(self, run_context):
        """Replay-mode failures are reported, not queued again."""
        site_data = paged_site([["a1"]])
        site_data.hydration_stalls[CLEAN_URL] = 2
        pipeline, _, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1", requeue=False))

        assert outcome.status == FAILED
        assert outcome.error is not None
        assert queue.read() == []

    def test_invalid_url_not_navigated(self, run_context):
        """A blank URL is skipped without any navigation or queueing."""
        site_data = paged_site([["a1"]])
        pipeline, _, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process("", "unknown-1"))

        assert outcome.status == INVALID_URL
        assert site_data.navigations == []
        assert queue.read() == []
        assert "unknown-1" in (run_context.paths.audit_dir / "invalid_urls.txt").read_text("utf-8")

    def test_navigation_retried(self, run_context):
        """Transient navigation errors are retried within one attempt."""
        site_data = paged_site([["a1"]])
        site_data.nav_failures[CLEAN_URL] = 2
        pipeline, _, _ = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.ok
        assert site_data.navigations == [CLEAN_URL] * 3
        assert pipeline.tabs_opened == 1

    def test_navigation_exhausted_then_recovered(self, run_context):
        """Exhausted navigation retries fall through to a fresh tab."""
        site_data = paged_site([["a1"]])
        site_data.nav_failures[CLEAN_URL] = 3
        pipeline, _, _ = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.ok
        assert pipeline.tabs_opened == 2
        assert pipeline.contexts_recreated == 0

    def test_blank_tab_fails_navigation(self, run_context):
        """A tab stuck on about:blank never counts as loaded."""
        site_data = paged_site([["a1"]])
        site_data.blank_urls.add(CLEAN_URL)
        pipeline, _, queue = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.status == QUEUED
        assert isinstance(outcome.error, NavigationError)
        assert len(queue) == 1

    def test_short_content_is_empty_payload(self, run_context):
        """A detail page with too little markup fails navigation."""
        site_data = paged_site([["a1"]])
        run_context.config.min_content_length = 100_000
        pipeline, _, _ = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.status == QUEUED
        assert "content too short" in str(outcome.error.__cause__)

    def test_incomplete_payload_fails(self, run_context):
        """A payload without mileage is rejected and queued."""
        site_data = paged_site([["a1"]])
        del site_data.vehicles[CLEAN_URL]["condition_and_state"]
        pipeline, _, _ = _pipeline(run_context, site_data)
        outcome = asyncio.run(pipeline.process(URL, "a1"))
        assert outcome.status == QUEUED

    def test_tab_recycled(self, run_context):
        """The detail tab is replaced every tab_recycle_every extractions."""
        run_context.config.tab_recycle_every = 2
        site_data = paged_site([["a1", "a2", "a3"]])
        pipeline, session, _ = _pipeline(run_context, site_data)

        async def _run():
            for vid in ("a1", "a2", "a3"):
                await pipeline.process(f"{BASE}/vehicle/{vid}", vid)

        asyncio.run(_run())
        assert pipeline.extracted == 3
        assert pipeline.tabs_opened == 2
        assert session.tabs[0].is_closed()
        assert not session.tabs[1].is_closed()

    def test_closed_context_recreated_before_use(self, run_context):
        site_data = paged_site([["a1"]])
        pipeline, session, _ = _pipeline(run_context, site_data)
        session.closed_context = True
        outcome = asyncio.run(pipeline.process(URL, "a1"))

        assert outcome.ok
        assert pipeline.contexts_recreated == 1

    def test_throttle_delay_after_each_vehicle(self, run_context):
        """Each vehicle is followed by a delay drawn from the configured range."""
        run_context.config.vehicle_delay_min = 3
        run_context.config.vehicle_delay_max = 5
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        site_data = paged_site([["a1"]])
        pipeline, _, _ = _pipeline(run_context, site_data, sleep=record_sleep)
        asyncio.run(pipeline.process(URL, "a1"))
        asyncio.run(pipeline.process("", "unknown-2"))

        assert len(sleeps) == 2
        assert all(3 <= s <= 5 for s in sleeps)


class TestNavigate:
    """Tests for the navigation step on its own."""

    def test_invalid_url_raises_without_attempt(self, run_context):
        site_data = paged_site([["a1"]])
        pipeline, session, _ = _pipeline(run_context, site_data)

        async def _run():
            tab = await session.new_page()
            await pipeline.navigate(tab, "about:blank", "x")

        with pytest.raises(InvalidListingUrl):
            asyncio.run(_run())
        assert site_data.navigations == []

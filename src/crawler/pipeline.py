"""
Resilient navigate-and-extract for single listings.

One operation serves both the main crawl loop and the reprocess-queue
replay pass:

    navigate (bounded retries) -> extract (hard timeout)
      on failure: fresh tab, fresh context if the session looks wedged or
      extraction timed out, then one more attempt
      on second failure: the caller queues the listing for replay

Every vehicle is followed by a randomized throttle delay, and the detail tab
is replaced every `tab_recycle_every` successful extractions.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from src.browser.capability import BrowserSession, BrowserTab
from src.core.context import RunContext
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.errors import (
    CrawlError,
    EmptyPayload,
    ExtractionTimeout,
    InvalidListingUrl,
    NavigationError,
)
from src.core.logging import get_logger
from src.crawler.extraction import read_vehicle
from src.crawler.navigation import dismiss_cookie_overlay
from src.models.vehicle import VehicleRecord
from src.sites.config import SiteConfig
from src.sites.scripts import DISABLE_ANIMATIONS_JS
from src.store.reprocess_queue import ReprocessQueue
from src.utils.retry import RetryConfig, retry_async
from src.utils.url_utils import BLANK_PAGE_URL, is_navigable, strip_query

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

EXTRACTED = "extracted"
QUEUED = "queued"
FAILED = "failed"
INVALID_URL = "invalid_url"


@dataclass
class ExtractionOutcome:
    vehicle_id: str
    url: str
    status: str
    record: Optional[VehicleRecord] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == EXTRACTED


class VehicleExtractionPipeline:
    """
    Sequential per-listing extraction over one browser session.

    Args:
        session: Browser session owning the detail tab
        ctx: Run context (config, audit, error logger)
        site: Site configuration for the cookie selector
        queue: Durable reprocess queue for listings that fail twice
        sleep: Awaitable sleep, injectable for tests
        rng: Random source for the throttle delay
    """

    def __init__(
        self,
        session: BrowserSession,
        ctx: RunContext,
        site: SiteConfig,
        queue: ReprocessQueue,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.session = session
        self.ctx = ctx
        self.config = ctx.config
        self.site = site
        self.queue = queue
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._tab: Optional[BrowserTab] = None
        self.extracted = 0
        self.tabs_opened = 0
        self.contexts_recreated = 0

    # --- tab management -------------------------------------------------

    async def _new_tab(self) -> BrowserTab:
        tab = await self.session.new_page()
        self.tabs_opened += 1
        return tab

    async def _ensure_tab(self) -> BrowserTab:
        if self.session.context_closed():
            logger.warning("[extract] Context closed, recreating")
            await self._recreate_context()
        if self._tab is None or self._tab.is_closed():
            self._tab = await self._new_tab()
        return self._tab

    async def _close_tab(self) -> None:
        if self._tab is not None and not self._tab.is_closed():
            try:
                await self._tab.close()
            except Exception as e:
                logger.debug(f"[extract] Closing tab failed: {e}")
        self._tab = None

    async def _recreate_context(self) -> None:
        self._tab = None
        await self.session.new_context()
        self.contexts_recreated += 1

    async def recycle_tab(self) -> None:
        await self._close_tab()
        self._tab = await self._new_tab()
        logger.info(f"[extract] Detail tab recycled after {self.extracted} vehicles")

    async def close(self) -> None:
        await self._close_tab()

    # --- steps ----------------------------------------------------------

    async def navigate(self, tab: BrowserTab, url: str, vehicle_id: str, max_attempts: Optional[int] = None) -> None:
        """
        Load a detail page with bounded retries.

        Raises:
            InvalidListingUrl: Blank or unusable URL, no attempt consumed
            NavigationError: Every attempt failed
        """
        clean_url = strip_query(url) if url else url
        if not is_navigable(clean_url):
            await self.ctx.audit.snapshot(tab, f"invalid_url_{vehicle_id}")
            raise InvalidListingUrl(f"Blank or invalid listing URL: {url!r}", url=url, vehicle_id=vehicle_id)

        cfg = self.config
        attempts = max_attempts or cfg.nav_max_attempts

        async def _attempt() -> None:
            status = await tab.navigate(clean_url, cfg.nav_timeout_ms)
            if tab.url == BLANK_PAGE_URL:
                raise NavigationError("Tab remained blank after navigation", url=url, vehicle_id=vehicle_id)
            await tab.pause(cfg.settle_delay_ms)
            await dismiss_cookie_overlay(tab, self.site.selectors.cookie_reject, cfg.cookie_timeout_ms)
            await tab.evaluate(DISABLE_ANIMATIONS_JS)
            content = await tab.content()
            if not content or len(content) < cfg.min_content_length:
                await self.ctx.audit.snapshot(tab, f"blank_vehicle_{vehicle_id}")
                raise EmptyPayload(
                    f"Page content too short ({len(content or '')} chars)", url=url, vehicle_id=vehicle_id
                )
            logger.debug(f"[nav] [{vehicle_id}] Loaded {clean_url} (status {status})")

        def _on_retry(attempt: int, exc: Exception) -> None:
            logger.warning(f"[nav] [{vehicle_id}] Retry {attempt}/{attempts - 1} for {clean_url}: {exc}")

        try:
            await retry_async(
                _attempt,
                RetryConfig.for_attempts(attempts, cfg.nav_retry_delay),
                on_retry=_on_retry,
                sleep=self._sleep,
            )
        except Exception as e:
            raise NavigationError(
                f"Failed to load after {attempts} attempts: {e}", url=url, vehicle_id=vehicle_id
            ) from e

    async def extract(
        self,
        tab: BrowserTab,
        url: str,
        vehicle_id: str,
        registration: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> VehicleRecord:
        """Read the vehicle, racing the whole extraction against a hard timeout."""
        timeout_ms = timeout_ms or self.config.extraction_timeout_ms
        try:
            return await asyncio.wait_for(
                read_vehicle(
                    tab,
                    vehicle_id,
                    url,
                    self.config.hydration_timeout_ms,
                    self.config.hydration_poll_ms,
                    registration=registration,
                    sleep=self._sleep,
                ),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionTimeout(
                f"Extraction hard timeout after {timeout_ms}ms", url=url, vehicle_id=vehicle_id
            ) from e
        except CrawlError:
            raise
        except Exception as e:
            raise EmptyPayload(f"Extraction failed: {e}", url=url, vehicle_id=vehicle_id) from e

    async def _recover(self, failure: CrawlError, recreate_context: bool) -> BrowserTab:
        """Fresh tab, plus a fresh context when the session looks wedged."""
        await self._close_tab()
        wedged = self.session.context_closed()
        if recreate_context and (wedged or isinstance(failure, ExtractionTimeout)):
            await self._recreate_context()
            logger.info(f"[extract] Context recreated after {type(failure).__name__}")
        tab = await self._new_tab()
        if tab.is_closed():
            logger.warning("[extract] New tab reports closed, recreating context")
            await self._recreate_context()
            tab = await self._new_tab()
        self._tab = tab
        return tab

    async def navigate_and_extract(
        self,
        url: str,
        vehicle_id: str,
        registration: Optional[str] = None,
        max_attempts: int = 2,
        recreate_context_on_failure: bool = True,
    ) -> VehicleRecord:
        """
        Navigate to a listing and extract it, recovering between attempts.

        Args:
            url: Absolute listing URL
            vehicle_id: Id derived from the URL
            registration: Registration seen at discovery, if any
            max_attempts: Whole navigate+extract attempts (first plus recoveries)
            recreate_context_on_failure: Allow discarding the browser context
                during recovery

        Returns:
            Extracted VehicleRecord

        Raises:
            InvalidListingUrl: Never retried
            CrawlError: Last failure once attempts are exhausted
        """
        tab = await self._ensure_tab()
        last_error: Optional[CrawlError] = None
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                logger.warning(f"[extract] [{vehicle_id}] Recovery attempt {attempt}/{max_attempts}")
                tab = await self._recover(last_error, recreate_context_on_failure)
            timeout_ms = self.config.extraction_timeout_ms if attempt == 1 else self.config.retry_extraction_timeout_ms
            try:
                await self.navigate(tab, url, vehicle_id)
                return await self.extract(tab, url, vehicle_id, registration, timeout_ms)
            except InvalidListingUrl:
                raise
            except CrawlError as e:
                last_error = e
                logger.warning(f"[extract] [{vehicle_id}] {type(e).__name__}: {e}")
                self.ctx.audit.log("extraction_failures.txt", f"Vehicle ID: {vehicle_id}, Error: {e}")
                await self.ctx.audit.snapshot(tab, f"timeout_dom_{vehicle_id}_{attempt}")
        raise last_error

    async def process(self, url: str, vehicle_id: str, registration: Optional[str] = None, requeue: bool = True) -> ExtractionOutcome:
        """
        Run one listing through the pipeline; never raises for listing failures.

        A listing that fails both attempts is appended to the reprocess queue
        when `requeue` is set, otherwise reported as failed to the caller.
        """
        outcome = ExtractionOutcome(vehicle_id=vehicle_id, url=url, status=FAILED)
        try:
            record = await self.navigate_and_extract(url, vehicle_id, registration)
            outcome.status = EXTRACTED
            outcome.record = record
            self.extracted += 1
            if self.extracted % self.config.tab_recycle_every == 0:
                await self.recycle_tab()
        except InvalidListingUrl as e:
            logger.warning(f"[extract] [{vehicle_id}] Skipping: {e}")
            self.ctx.audit.log("invalid_urls.txt", f"Vehicle ID: {vehicle_id}, URL: {url!r}")
            outcome.status = INVALID_URL
            outcome.error = e
        except CrawlError as e:
            outcome.error = e
            self._report(e, vehicle_id, url, requeue)
            if requeue:
                self.queue.enqueue(vehicle_id, url)
                outcome.status = QUEUED
                logger.warning(f"[extract] [{vehicle_id}] Queued for replay: {url}")
        finally:
            await self._throttle()
        return outcome

    def _report(self, exc: CrawlError, vehicle_id: str, url: str, requeue: bool) -> None:
        if self.ctx.error_logger is None:
            return
        self.ctx.error_logger.log_exception(
            exc,
            component=ErrorComponent.EXTRACTOR,
            stage=ErrorStage.EXTRACT_LISTING if requeue else ErrorStage.REPLAY_QUEUE,
            model=self.ctx.model,
            url=url,
            vehicle_id=vehicle_id,
            severity=ErrorSeverity.WARNING if requeue else ErrorSeverity.ERROR,
        )

    async def _throttle(self) -> None:
        low, high = self.config.vehicle_delay_range
        await self._sleep(self._rng.uniform(low, high))

"""
Page traversal state machine.

    FETCHING -> DISCOVERING -> EXTRACTING -> PAGINATING -> FETCHING | DONE | ABORTED

FETCHING hashes the rendered results page and aborts if that markup was
already seen this run. PAGINATING ends the loop when the next-page control
is missing or disabled, when the page cap is reached, or when the URL does
not change after two activations. DONE and ABORTED are both normal exits;
the reason is recorded for the audit log only.
"""

from enum import Enum
from typing import List, Tuple

from src.browser.capability import BrowserTab
from src.core.context import RunContext
from src.core.errors import CrawlStop, DuplicatePageDetected, PageCapExceeded, PaginationStall
from src.core.logging import get_logger
from src.crawler.navigation import advance_pagination, read_pagination_state
from src.crawler.pipeline import QUEUED, VehicleExtractionPipeline
from src.crawler.state import RunState, Sighting
from src.models.vehicle import ListingRef
from src.scoring.spec_scorer import SpecScorer
from src.sites.config import SiteConfig
from src.sites.scripts import DISCOVER_LISTINGS_JS
from src.utils.url_utils import absolute_url, content_hash, vehicle_id_from_url

logger = get_logger(__name__)


class CrawlState(str, Enum):
    FETCHING = "fetching"
    DISCOVERING = "discovering"
    EXTRACTING = "extracting"
    PAGINATING = "paginating"
    DONE = "done"
    ABORTED = "aborted"


class ExitReason:
    NO_NEXT_PAGE = "no_next_page"
    NEXT_DISABLED = "next_disabled"
    PAGINATION_STALL = PaginationStall.reason
    DUPLICATE_PAGE = DuplicatePageDetected.reason
    PAGE_CAP = PageCapExceeded.reason


Candidate = Tuple[ListingRef, str, str, bool]


class PageCrawlLoop:
    """
    Walk the results pages of one campaign, extracting unseen listings.

    Args:
        tab: Tab positioned on the first results page
        ctx: Run context
        site: Site configuration (selectors, page size)
        state: Run state carrying the dedup store and expected count
        pipeline: Per-listing extraction pipeline
        scorer: Spec scorer for the campaign model
    """

    def __init__(
        self,
        tab: BrowserTab,
        ctx: RunContext,
        site: SiteConfig,
        state: RunState,
        pipeline: VehicleExtractionPipeline,
        scorer: SpecScorer,
    ):
        self.tab = tab
        self.ctx = ctx
        self.site = site
        self.state = state
        self.pipeline = pipeline
        self.scorer = scorer
        self.crawl_state = CrawlState.FETCHING
        self._candidates: List[Candidate] = []

    async def run(self) -> RunState:
        logger.info(
            f"[paginate] Starting crawl for {self.ctx.model}: expected={self.state.expected_count} "
            f"pages={self.state.expected_pages} cap={self.state.page_cap}"
        )
        while self.crawl_state not in (CrawlState.DONE, CrawlState.ABORTED):
            try:
                if self.crawl_state is CrawlState.FETCHING:
                    await self._fetch()
                    self.crawl_state = CrawlState.DISCOVERING
                elif self.crawl_state is CrawlState.DISCOVERING:
                    self._candidates = await self._discover()
                    self.crawl_state = CrawlState.EXTRACTING
                elif self.crawl_state is CrawlState.EXTRACTING:
                    await self._extract_all()
                    self.crawl_state = CrawlState.PAGINATING
                elif self.crawl_state is CrawlState.PAGINATING:
                    self.crawl_state = await self._paginate()
            except PaginationStall as stop:
                self.state.exit_reason = stop.reason
                self.crawl_state = CrawlState.DONE
            except CrawlStop as stop:
                logger.warning(f"[paginate] Aborting crawl on page {self.state.page_number}: {stop}")
                self.state.exit_reason = stop.reason
                self.crawl_state = CrawlState.ABORTED

        message = (
            f"{self.ctx.model}: {self.crawl_state.value} ({self.state.exit_reason}) after page "
            f"{self.state.page_number}, {len(self.state.results)} extracted"
        )
        logger.info(f"[paginate] Loop exit: {message}")
        self.ctx.audit.log("loop_exit_log.txt", message)
        return self.state

    async def _fetch(self) -> None:
        await self.tab.wait_for_network_idle(self.ctx.config.network_idle_timeout_ms)
        digest = content_hash(await self.tab.content())
        if digest in self.state.page_hashes:
            raise DuplicatePageDetected(f"Page {self.state.page_number} repeats earlier content ({digest})")
        self.state.page_hashes.add(digest)
        await self.ctx.audit.snapshot(self.tab, f"page_{self.state.page_number}_dom")

    async def _discover(self) -> List[Candidate]:
        page = self.state.page_number
        raw = await self.tab.evaluate(DISCOVER_LISTINGS_JS, self.site.selectors.discovery_arg()) or []
        dedup = self.state.dedup
        candidates: List[Candidate] = []
        for index, item in enumerate(raw):
            ref = ListingRef(registration=item.get("registration") or None, href=item.get("href") or "", discovery_index=index)
            url = absolute_url(self.site.base_url, ref.href) if ref.href else ""
            vehicle_id, synthetic = vehicle_id_from_url(url)
            if synthetic:
                logger.warning(f"[discover] Malformed listing link on page {page} #{index}: {ref.href!r}")
                self.ctx.audit.log("malformed_listings.txt", f"Page {page}, Index {index}, href {ref.href!r}")
            else:
                self.state.sightings.setdefault(vehicle_id, Sighting(page, index, url))

            if ref.registration and dedup.contains_registration(ref.registration):
                self.state.skipped_ids.append(vehicle_id)
                continue
            if vehicle_id in self.state.attempted_ids:
                self.state.skipped_ids.append(vehicle_id)
                continue
            self.state.attempted_ids.add(vehicle_id)
            candidates.append((ref, url, vehicle_id, synthetic))

        logger.info(f"[discover] Page {page}: {len(raw)} listings, {len(candidates)} new")
        return candidates

    async def _extract_all(self) -> None:
        dedup = self.state.dedup
        for ref, url, vehicle_id, synthetic in self._candidates:
            outcome = await self.pipeline.process(url, vehicle_id, ref.registration)
            if outcome.ok:
                vehicle = self.scorer.score(outcome.record)
                self.state.results.append(vehicle)
                if not synthetic:
                    dedup.add_id(vehicle_id)
                if ref.registration:
                    dedup.add_registration(ref.registration)
                logger.info(f"[extract] [{vehicle_id}] {vehicle.title} scored {vehicle.score_percent}%")
            elif outcome.status == QUEUED:
                self.state.queued_ids.append(vehicle_id)
        self._candidates = []

    async def _paginate(self) -> CrawlState:
        page = self.state.page_number
        selector = self.site.selectors.next_page
        present, disabled = await read_pagination_state(self.tab, selector)
        self.ctx.audit.write_json(
            f"page_{page}_pagination.json",
            {"page_number": page, "url": self.tab.url, "next_present": present, "next_disabled": disabled},
        )
        self.ctx.audit.log("pagination_log.txt", f"Page {page} — URL: {self.tab.url}", stamp=False)

        if not present:
            self.state.exit_reason = ExitReason.NO_NEXT_PAGE
            return CrawlState.DONE
        if disabled:
            self.state.exit_reason = ExitReason.NEXT_DISABLED
            return CrawlState.DONE

        cap = self.state.page_cap
        if cap is not None and page >= cap:
            raise PageCapExceeded(f"Page cap {cap} reached while next page is still enabled")

        advanced = await advance_pagination(
            self.tab,
            selector,
            page,
            settle_ms=self.ctx.config.pagination_settle_ms,
            idle_timeout_ms=self.ctx.config.network_idle_timeout_ms,
            audit=self.ctx.audit,
        )
        if not advanced:
            raise PaginationStall(f"Pagination did not advance past page {page}")

        self.state.page_number += 1
        logger.info(f"[paginate] Advanced to page {self.state.page_number}")
        return CrawlState.FETCHING

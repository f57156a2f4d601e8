"""
One campaign: crawl, replay, reconcile and notify for a single target model.

Steps:
    1. Resolve site configuration (ConfigError is fatal)
    2. Open a browser session and run the navigation script
    3. Parse the expected result count and crawl the results pages
    4. Replay the reprocess queue
    5. Reconcile the ledger, persist dedup sets, ledger and archive
    6. Build the digest, send it unless dry run, write audit summaries
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import AsyncContextManager, Callable, List, Optional, Tuple

from src.browser.capability import BrowserSession
from src.core.context import RunContext
from src.core.logging import get_logger
from src.crawler.navigation import parse_expected_count, run_navigation_script
from src.crawler.page_loop import PageCrawlLoop
from src.crawler.pipeline import VehicleExtractionPipeline
from src.crawler.state import RunState
from src.notify.digest import build_digest
from src.notify.email_sender import Notifier
from src.scoring.spec_scorer import SpecScorer
from src.sites.config import SiteConfig
from src.sites.registry import get_site_config
from src.store.dedup import DedupStore
from src.store.file_manager import append_line, write_lines
from src.store.ledger import LedgerStore, ReconcileResult, reconcile
from src.store.reprocess_queue import ReprocessQueue
from src.utils.date_utils import get_current_timestamp

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncContextManager[BrowserSession]]


@dataclass
class CampaignSummary:
    model: str
    expected_count: Optional[int] = None
    pages: int = 0
    exit_reason: Optional[str] = None
    extracted: int = 0
    skipped: int = 0
    queued: int = 0
    replayed: int = 0
    permanent_failures: List[str] = field(default_factory=list)
    ledger_size: int = 0
    archived: int = 0
    notified: bool = False

    def describe(self) -> str:
        return (
            f"{self.model}: expected={self.expected_count} pages={self.pages} exit={self.exit_reason} "
            f"extracted={self.extracted} skipped={self.skipped} queued={self.queued} "
            f"replayed={self.replayed} failed={len(self.permanent_failures)} "
            f"ledger={self.ledger_size} archived={self.archived} notified={self.notified}"
        )


async def replay_queue(
    pipeline: VehicleExtractionPipeline,
    queue: ReprocessQueue,
    scorer: SpecScorer,
    state: RunState,
    ctx: RunContext,
) -> Tuple[int, List[str]]:
    """
    Retry every queued listing once through the pipeline.

    Successes join this run's results; failures are written to the permanent
    failures file. The queue is cleared once every entry has been handled.

    Returns:
        (number replayed successfully, ids that failed again)
    """
    queued = queue.read()
    if not queued:
        return 0, []

    logger.info(f"[replay] Retrying {len(queued)} failed extractions")
    replayed = 0
    failed: List[str] = []
    done = state.result_ids
    for item in queued:
        if item.vehicle_id in done or state.dedup.contains_id(item.vehicle_id):
            logger.info(f"[replay] [{item.vehicle_id}] Already extracted, dropping from queue")
            continue
        outcome = await pipeline.process(item.url, item.vehicle_id, requeue=False)
        if outcome.ok:
            vehicle = scorer.score(outcome.record)
            state.results.append(vehicle)
            state.dedup.add_id(item.vehicle_id)
            done.add(item.vehicle_id)
            replayed += 1
            logger.info(f"[replay] [{item.vehicle_id}] Retry successful")
        else:
            failed.append(item.vehicle_id)
            append_line(ctx.paths.permanent_failures, f"{item.vehicle_id} — {item.url}")
            ctx.audit.log("extractor_errors.txt", f"URL: {item.url} Error: {outcome.error}")
            logger.warning(f"[replay] [{item.vehicle_id}] Retry failed: {outcome.error}")
    queue.clear()
    return replayed, failed


def write_audit_summaries(ctx: RunContext, state: RunState, result: ReconcileResult) -> None:
    audit = ctx.audit
    for v in state.results:
        matches = "\n".join(f"• {m.keyword} ({m.weight:g})" for m in v.matched_specs)
        audit.log("spec_matches.txt", f"ID: {v.id}, Score: {v.score_percent}%\n{matches}\n", stamp=False)
        if v.unmatched_specs:
            audit.log("unmatched_specs.txt", f"ID: {v.id}\nUnmatched:\n" + "\n".join(v.unmatched_specs) + "\n", stamp=False)

    seen = len(state.sightings)
    if state.expected_count and seen < state.expected_count:
        missing = state.expected_count - seen
        logger.warning(f"[audit] Expected {state.expected_count} vehicles, only saw {seen} ({missing} missing)")
        audit.log("missing_summary.txt", f"Expected: {state.expected_count}, Seen: {seen}, Missing: {missing}")

    for vid in state.missing_ids():
        s = state.sightings[vid]
        audit.log("missing_by_page.txt", f"Page {s.page}, Index {s.index}, ID: {vid}, URL: {s.url}", stamp=False)

    audit.log(
        "run_summary.txt",
        f"{ctx.model}: results={len(state.results)} skipped={len(state.skipped_ids)} "
        f"ledger={len(result.ledger)} archived={len(result.archived)} exit={state.exit_reason}",
    )


def finalize_run(ctx: RunContext, state: RunState, notifier: Optional[Notifier]) -> Tuple[ReconcileResult, bool]:
    """Reconcile and persist the ledger, persist dedup sets, then notify."""
    paths = ctx.paths
    ledger = LedgerStore.for_paths(paths)
    result = reconcile(ledger.load(), state.results)
    ledger.apply(result)
    state.dedup.persist()
    write_lines(paths.skipped_ids, state.skipped_ids)

    notified = False
    if state.results:
        digest = build_digest(ctx.model, state.results)
        append_line(paths.alerts, f"Run on {get_current_timestamp()}\n{digest.subject}\n{digest.body}\n")
        if ctx.dry_run:
            logger.info("[notify] Dry run, digest not sent")
        elif notifier is not None:
            notified = notifier.send(digest)
    else:
        logger.info(f"[notify] No new vehicles for {ctx.model}, no digest")

    write_audit_summaries(ctx, state, result)
    return result, notified


async def run_campaign(
    ctx: RunContext,
    open_session: SessionFactory,
    notifier: Optional[Notifier] = None,
    site: Optional[SiteConfig] = None,
    sleep: Callable = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> CampaignSummary:
    """
    Run one full campaign for ctx.model.

    Args:
        ctx: Run context for the model
        open_session: Factory returning an async context manager that yields
            a BrowserSession
        notifier: Digest delivery (None disables sending)
        site: Site configuration override (default: registry lookup)
        sleep: Awaitable sleep for throttling and retries
        rng: Random source for throttle delays

    Returns:
        CampaignSummary

    Raises:
        ConfigError: Missing configuration for the model
        SiteScriptError: Navigation script could not reach the listing page
    """
    site = site or get_site_config(ctx.model)
    scorer = SpecScorer(site.spec_weights)
    dedup = DedupStore.for_paths(ctx.paths).load()
    queue = ReprocessQueue(ctx.paths.reprocess_queue)
    summary = CampaignSummary(model=ctx.model)
    logger.info(f"[campaign] Starting {ctx.describe()}")

    async with open_session() as session:
        tab = await session.results_page()
        await run_navigation_script(tab, site.navigation, ctx.audit)
        expected = await parse_expected_count(tab, site)

        state = RunState(dedup=dedup, page_size=site.page_size, expected_count=expected, max_pages=ctx.max_pages)
        pipeline = VehicleExtractionPipeline(session, ctx, site, queue, sleep=sleep, rng=rng)
        await PageCrawlLoop(tab, ctx, site, state, pipeline, scorer).run()
        summary.extracted = len(state.results)
        summary.replayed, summary.permanent_failures = await replay_queue(pipeline, queue, scorer, state, ctx)
        await pipeline.close()

    result, summary.notified = finalize_run(ctx, state, notifier)

    summary.expected_count = expected
    summary.pages = state.page_number
    summary.exit_reason = state.exit_reason
    summary.skipped = len(state.skipped_ids)
    summary.queued = len(state.queued_ids)
    summary.ledger_size = len(result.ledger)
    summary.archived = len(result.archived)
    logger.info(f"[campaign] Done {summary.describe()}")
    return summary

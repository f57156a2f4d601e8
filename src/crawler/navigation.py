"""
Page navigation and interaction for the crawler.

This module runs a site's navigation script, reads the expected result
count, dismisses the consent overlay and advances pagination.
"""

import re
from typing import Optional, Sequence, Tuple

from src.browser.capability import BrowserTab
from src.core.errors import SiteScriptError
from src.core.logging import get_logger
from src.sites.config import NavigationStep, SiteConfig
from src.sites.scripts import ELEMENT_TEXT_JS, PAGINATION_STATE_JS
from src.store.audit import AuditRecorder

logger = get_logger(__name__)


async def _run_step(tab: BrowserTab, step: NavigationStep) -> None:
    if step.action == "goto":
        await tab.navigate(step.url, step.timeout_ms)
    elif step.action == "click":
        await tab.click(step.selector, step.timeout_ms)
    elif step.action == "wait_for":
        await tab.wait_for_selector(step.selector, step.timeout_ms)
    elif step.action == "pause":
        await tab.pause(step.ms)
    elif step.action == "evaluate":
        await tab.evaluate(step.script, step.arg)
    elif step.action == "assert":
        if not await tab.evaluate(step.script, step.arg):
            raise SiteScriptError(step.message or f"Assertion failed: {step.describe()}")


async def run_navigation_script(
    tab: BrowserTab,
    steps: Sequence[NavigationStep],
    audit: Optional[AuditRecorder] = None,
) -> None:
    """
    Execute navigation steps in order to reach the filtered listing page.

    A step with `retries` is attempted again after `retry_delay_ms`; an
    `optional` step may fail silently.

    Args:
        tab: Tab to drive
        steps: Ordered navigation steps
        audit: Recorder for failure logs and snapshots

    Raises:
        SiteScriptError: A required step failed after its retries

    Example:
        >>> await run_navigation_script(tab, get_site_config("X5").navigation)
    """
    for index, step in enumerate(steps, start=1):
        attempts = step.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await _run_step(tab, step)
                break
            except SiteScriptError as e:
                if attempt < attempts:
                    await tab.pause(step.retry_delay_ms)
                    continue
                await _script_failed(tab, audit, index, str(e))
                raise
            except Exception as e:
                if step.optional:
                    logger.info(f"[nav] Optional step {index} ({step.describe()}) skipped: {e}")
                    break
                if attempt < attempts:
                    logger.warning(f"[nav] Step {index} ({step.describe()}) failed, retrying: {e}")
                    await tab.pause(step.retry_delay_ms)
                    continue
                message = step.message or f"Step {index} ({step.describe()}) failed"
                await _script_failed(tab, audit, index, f"{message}: {e}")
                raise SiteScriptError(f"{message}: {e}") from e
    logger.info(f"[nav] Navigation script complete ({len(steps)} steps) at {tab.url}")


async def _script_failed(tab: BrowserTab, audit: Optional[AuditRecorder], index: int, message: str) -> None:
    logger.error(f"[nav] {message}")
    if audit is not None:
        audit.log("navigation_failures.txt", message)
        await audit.snapshot(tab, f"navigation_step_{index}")


def parse_count_text(text: Optional[str], pattern: str) -> Optional[int]:
    """
    Parse the site's "N available" indicator.

    Example:
        >>> parse_count_text("Show 46 available cars", r"(\\d{2,4})\\s*available")
        46
    """
    if not text:
        return None
    match = re.search(pattern, text, re.IGNORECASE)
    if not match:
        return None
    return int(match.group(1))


async def parse_expected_count(tab: BrowserTab, site: SiteConfig) -> Optional[int]:
    try:
        text = await tab.evaluate(ELEMENT_TEXT_JS, site.selectors.expected_count)
    except Exception as e:
        logger.warning(f"[nav] Could not read expected count: {e}")
        return None
    count = parse_count_text(text, site.expected_count_pattern)
    if count is None:
        logger.warning(f"[nav] Could not parse expected vehicle count from {text!r}")
    else:
        logger.info(f"[nav] Parsed expected vehicle count: {count}")
    return count


async def dismiss_cookie_overlay(tab: BrowserTab, selector: str, timeout_ms: int) -> bool:
    """Click the consent "Reject" button if it shows up; absence is fine."""
    try:
        await tab.click(selector, timeout_ms)
        return True
    except Exception:
        logger.debug(f"[nav] No cookie overlay on {tab.url}")
        return False


async def read_pagination_state(tab: BrowserTab, selector: str) -> Tuple[bool, bool]:
    """Returns (present, disabled) for the next-page control."""
    try:
        state = await tab.evaluate(PAGINATION_STATE_JS, selector) or {}
    except Exception as e:
        logger.warning(f"[paginate] Could not read next-page control: {e}")
        return False, True
    return bool(state.get("present")), bool(state.get("disabled", True))


async def advance_pagination(
    tab: BrowserTab,
    selector: str,
    page_number: int,
    settle_ms: int = 2_000,
    idle_timeout_ms: int = 15_000,
    audit: Optional[AuditRecorder] = None,
) -> bool:
    """
    Activate the next-page control and confirm the URL changed.

    The activation is retried exactly once when the URL stays the same.

    Returns:
        True if the page advanced, False when pagination is stuck (end of
        results)
    """
    current_url = tab.url
    for attempt in (1, 2):
        try:
            await tab.click(selector, idle_timeout_ms, force=True)
            await tab.wait_for_network_idle(idle_timeout_ms)
            await tab.pause(settle_ms)
        except Exception as e:
            logger.warning(f"[paginate] Click {attempt} on page {page_number} failed: {e}")
            continue

        if tab.url != current_url:
            return True

        if attempt == 1:
            logger.warning(f"[paginate] Page {page_number} did not advance, retrying")
            if audit is not None:
                await audit.snapshot(tab, f"pagination_failure_page_{page_number}")

    logger.warning(f"[paginate] Still stuck on page {page_number}, ending pagination")
    return False

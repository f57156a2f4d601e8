"""
Playwright implementation of the browser capability.

Launches chromium with the automation flag disabled, a random desktop user
agent and a fixed 1280x800 viewport, and blocks media/font downloads.
"""

import random
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from src.core.logging import get_logger

logger = get_logger(__name__)

BLOCK_RESOURCE_TYPES = {"media", "font"}
VIEWPORT = {"width": 1280, "height": 800}

UA_POOL = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125 Safari/537.36",
]


class PlaywrightTab:
    def __init__(self, page: Page):
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, timeout_ms: int) -> Optional[int]:
        response = await self._page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        return response.status if response else None

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if arg is None:
            return await self._page.evaluate(expression)
        return await self._page.evaluate(expression, arg)

    async def content(self) -> str:
        return await self._page.content()

    async def title(self) -> str:
        return await self._page.title()

    async def screenshot(self, path: Path) -> None:
        await self._page.screenshot(path=str(path))

    async def click(self, selector: str, timeout_ms: int, force: bool = False) -> None:
        await self._page.locator(selector).first.click(timeout=timeout_ms, force=force)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        await self._page.wait_for_selector(selector, timeout=timeout_ms)

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        try:
            await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            logger.debug(f"[nav] networkidle not reached within {timeout_ms}ms on {self._page.url}")

    async def pause(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    def is_closed(self) -> bool:
        return self._page.is_closed() or self._page.main_frame.is_detached()

    async def close(self) -> None:
        if not self._page.is_closed():
            await self._page.close()


class PlaywrightSession:
    """
    Browser with two contexts: one holding the results tab, and a detail
    context whose tabs come and go. Recovery replaces the detail context
    wholesale and leaves the results tab where it is.
    """

    def __init__(self, browser: Browser):
        self._browser = browser
        self._results_context: Optional[BrowserContext] = None
        self._context: Optional[BrowserContext] = None
        self._context_closed = True

    async def _make_context(self) -> BrowserContext:
        ctx_kwargs: Dict[str, Any] = {
            "user_agent": random.choice(UA_POOL),
            "viewport": VIEWPORT,
            "locale": "en-GB",
            "java_script_enabled": True,
        }
        context = await self._browser.new_context(**ctx_kwargs)
        await context.add_init_script("Object.defineProperty(navigator, 'webdriver', {get: () => undefined});")

        async def _route(route):
            if route.request.resource_type in BLOCK_RESOURCE_TYPES:
                return await route.abort()
            return await route.continue_()

        await context.route("**/*", _route)
        return context

    async def _open_context(self) -> None:
        context = await self._make_context()
        context.on("close", lambda _: self._mark_closed())
        self._context = context
        self._context_closed = False

    def _mark_closed(self) -> None:
        self._context_closed = True

    async def results_page(self) -> PlaywrightTab:
        if self._results_context is None:
            self._results_context = await self._make_context()
        page = await self._results_context.new_page()
        await page.set_viewport_size(VIEWPORT)
        return PlaywrightTab(page)

    async def new_page(self) -> PlaywrightTab:
        if self._context is None or self._context_closed:
            await self._open_context()
        page = await self._context.new_page()
        await page.set_viewport_size(VIEWPORT)
        return PlaywrightTab(page)

    async def new_context(self) -> None:
        if self._context is not None and not self._context_closed:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"[browser] Closing wedged context failed: {e}")
        await self._open_context()
        logger.info("[browser] Detail context recreated")

    def context_closed(self) -> bool:
        return self._context_closed or not self._browser.is_connected()

    async def close(self) -> None:
        if self._context is not None and not self._context_closed:
            await self._context.close()
        if self._results_context is not None:
            await self._results_context.close()
        await self._browser.close()


@asynccontextmanager
async def open_playwright_session(headless: bool = True) -> AsyncIterator[PlaywrightSession]:
    """
    Launch chromium and yield a session; everything is closed on exit.

    Example:
        >>> async with open_playwright_session(headless=True) as session:
        ...     tab = await session.results_page()
    """
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(
            headless=headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        session = PlaywrightSession(browser)
        try:
            yield session
        finally:
            try:
                await session.close()
            except Exception as e:
                logger.warning(f"[browser] Shutdown error: {e}")

"""
Browser automation capability surface.

The crawl engine depends only on these two protocols. The Playwright adapter
in playwright_session.py implements them for production; tests use an
in-memory fake.
"""

from pathlib import Path
from typing import Any, Optional, Protocol


class BrowserTab(Protocol):
    """One page/tab inside the active browser context."""

    @property
    def url(self) -> str: ...

    async def navigate(self, url: str, timeout_ms: int) -> Optional[int]:
        """Load url; returns the HTTP status when known."""

    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    async def content(self) -> str: ...

    async def title(self) -> str: ...

    async def screenshot(self, path: Path) -> None: ...

    async def click(self, selector: str, timeout_ms: int, force: bool = False) -> None:
        """Locate the first element matching selector and click it; raises if absent."""

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None: ...

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        """Best effort; returns silently on timeout."""

    async def pause(self, ms: int) -> None: ...

    def is_closed(self) -> bool: ...

    async def close(self) -> None: ...


class BrowserSession(Protocol):
    """Owner of the results tab and of the detail context with its tab pool."""

    async def results_page(self) -> BrowserTab:
        """Tab for the results pages; survives recreation of the detail context."""

    async def new_page(self) -> BrowserTab:
        """New tab in the detail context."""

    async def new_context(self) -> None:
        """Close the detail context with all its tabs and open a fresh one."""

    def context_closed(self) -> bool: ...

    async def close(self) -> None: ...

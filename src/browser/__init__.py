"""
Browser automation capability.

The protocols have no playwright dependency; the adapter is loaded lazily so
the crawl engine and its tests import without a browser installed.
"""

from src.browser.capability import BrowserTab, BrowserSession


def __getattr__(name):
    """Lazy loading for playwright-dependent objects."""
    if name in ("PlaywrightSession", "PlaywrightTab", "open_playwright_session"):
        from src.browser import playwright_session
        return getattr(playwright_session, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BrowserTab",
    "BrowserSession",
    "PlaywrightSession",
    "PlaywrightTab",
    "open_playwright_session",
]

"""
Exception taxonomy for the crawl engine.

Per-listing failures (NavigationError, ExtractionTimeout, EmptyPayload,
InvalidListingUrl) are absorbed inside the extraction pipeline. CrawlStop
subclasses are not failures: they end the page loop and become exit reasons.
ConfigError and anything unexpected escalate to the restart supervisor.
"""

from typing import Optional


class CarwatchError(Exception):
    """Base class for all carwatch errors."""


class ConfigError(CarwatchError):
    """Missing selector map, navigation script or spec table. Never retried."""


class CrawlError(CarwatchError):
    """A failure tied to a single listing or navigation."""

    def __init__(self, message: str, url: Optional[str] = None, vehicle_id: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.vehicle_id = vehicle_id


class NavigationError(CrawlError):
    """Page load failed or timed out after bounded retries."""


class InvalidListingUrl(CrawlError):
    """The listing URL was blank or unusable; not a navigation failure."""


class ExtractionTimeout(CrawlError):
    """Hydration or extraction exceeded its bound."""


class EmptyPayload(CrawlError):
    """Hydration payload missing or lacking required fields."""


class SiteScriptError(CarwatchError):
    """A navigation script step failed to reach the filtered listing page."""


class CrawlStop(CarwatchError):
    """Graceful end of the page loop."""

    reason = "stopped"


class PaginationStall(CrawlStop):
    reason = "pagination_stall"


class DuplicatePageDetected(CrawlStop):
    reason = "duplicate_page"


class PageCapExceeded(CrawlStop):
    reason = "page_cap"

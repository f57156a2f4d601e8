"""
In-memory browser capability for unit tests.

FakeSite holds results pages and vehicle payloads; FakeSession hands out
FakeTabs that answer the in-page scripts the crawler evaluates.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from src.sites.scripts import (
    DISCOVER_LISTINGS_JS,
    ELEMENT_TEXT_JS,
    HYDRATION_READY_JS,
    PAGINATION_STATE_JS,
    READ_HYDRATION_JS,
)
from src.utils.url_utils import BLANK_PAGE_URL

BASE = "https://usedcars.bmw.co.uk"
DETAIL_HTML = "<html><body>" + "vehicle " * 300 + "</body></html>"


def make_payload(advert_id: str, features: Optional[List[str]] = None, **extra) -> Dict[str, Any]:
    payload = {
        "advert_id": advert_id,
        "engine": {"fuel": "Petrol Plug-in Hybrid", "power": {"value": 489}, "size": {"litres": 3.0}},
        "condition_and_state": {"mileage": 12000, "manufactured_year": 2023},
        "dates": {"registration": "2023-09-01"},
        "fuel_category": "Hybrid",
        "features": {"standard": [{"description": f} for f in (features or [])]},
    }
    payload.update(extra)
    return payload


@dataclass
class FakePage:
    url: str
    html: str
    listings: List[Dict[str, Any]] = field(default_factory=list)
    next_present: bool = True
    next_disabled: bool = False
    next_url: Optional[str] = None


@dataclass
class FakeSite:
    pages: List[FakePage] = field(default_factory=list)
    vehicles: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    count_text: Optional[str] = None
    landing_url: str = BASE + "/"
    nav_failures: Dict[str, int] = field(default_factory=dict)
    hydration_stalls: Dict[str, int] = field(default_factory=dict)
    blank_urls: Set[str] = field(default_factory=set)
    navigations: List[str] = field(default_factory=list)
    clicks: List[str] = field(default_factory=list)

    def page_for(self, url: str) -> Optional[FakePage]:
        for page in self.pages:
            if page.url == url:
                return page
        return None


def listing(vehicle_id: str, registration: Optional[str] = None) -> Dict[str, Any]:
    return {"registration": registration, "href": f"/vehicle/{vehicle_id}?from=results"}


def paged_site(ids_per_page: List[List[str]], count_text: Optional[str] = None, last_disabled: bool = True) -> FakeSite:
    """Results pages linked by next-page URLs, with a payload for every listed id."""
    site = FakeSite(count_text=count_text)
    for n, ids in enumerate(ids_per_page, start=1):
        is_last = n == len(ids_per_page)
        site.pages.append(FakePage(
            url=f"{BASE}/results?page={n}",
            html=f"<html>results page {n}: {' '.join(ids)}</html>",
            listings=[listing(vid, f"REG{vid.upper()}") for vid in ids],
            next_disabled=is_last and last_disabled,
            next_url=None if is_last else f"{BASE}/results?page={n + 1}",
        ))
        for vid in ids:
            site.vehicles[f"{BASE}/vehicle/{vid}"] = make_payload(vid, ["Comfort Plus Pack"])
    return site


class FakeTab:
    def __init__(self, site: FakeSite, url: str = BLANK_PAGE_URL, closed: bool = False):
        self.site = site
        self._url = url
        self._closed = closed
        self._stalled = False

    @property
    def url(self) -> str:
        return self._url

    async def navigate(self, url: str, timeout_ms: int) -> Optional[int]:
        self.site.navigations.append(url)
        remaining = self.site.nav_failures.get(url, 0)
        if remaining:
            self.site.nav_failures[url] = remaining - 1
            raise RuntimeError(f"net::ERR_TIMED_OUT at {url}")
        if url in self.site.blank_urls:
            self._url = BLANK_PAGE_URL
            return None
        if url == self.site.landing_url and self.site.pages:
            url = self.site.pages[0].url
        self._url = url
        stalls = self.site.hydration_stalls.get(url, 0)
        self._stalled = stalls > 0
        if stalls:
            self.site.hydration_stalls[url] = stalls - 1
        return 200

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        page = self.site.page_for(self._url)
        if expression == DISCOVER_LISTINGS_JS:
            return list(page.listings) if page else []
        if expression == PAGINATION_STATE_JS:
            if page is None or not page.next_present:
                return {"present": False, "disabled": True}
            return {"present": True, "disabled": page.next_disabled}
        if expression == ELEMENT_TEXT_JS:
            return self.site.count_text
        if expression == HYDRATION_READY_JS:
            return not self._stalled and self._url in self.site.vehicles
        if expression == READ_HYDRATION_JS:
            return None if self._stalled else self.site.vehicles.get(self._url)
        return True

    async def content(self) -> str:
        page = self.site.page_for(self._url)
        if page is not None:
            return page.html
        if self._url in self.site.vehicles:
            return DETAIL_HTML
        return ""

    async def title(self) -> str:
        return "BMW X5 xDrive50e M Sport"

    async def screenshot(self, path) -> None:
        return None

    async def click(self, selector: str, timeout_ms: int, force: bool = False) -> None:
        self.site.clicks.append(selector)
        page = self.site.page_for(self._url)
        if page is not None and "pagination" in selector and page.next_url:
            self._url = page.next_url

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        return None

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        return None

    async def pause(self, ms: int) -> None:
        return None

    def is_closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        self._closed = True


class FakeSession:
    def __init__(self, site: FakeSite):
        self.site = site
        self.tabs: List[FakeTab] = []
        self.results_tab: Optional[FakeTab] = None
        self.contexts_created = 1
        self.closed_context = False
        self.closed = False

    async def results_page(self) -> FakeTab:
        self.results_tab = FakeTab(self.site)
        return self.results_tab

    async def new_page(self) -> FakeTab:
        tab = FakeTab(self.site)
        self.tabs.append(tab)
        return tab

    async def new_context(self) -> None:
        for tab in self.tabs:
            tab._closed = True
        self.contexts_created += 1
        self.closed_context = False

    def context_closed(self) -> bool:
        return self.closed_context

    async def close(self) -> None:
        self.closed = True


def session_factory(session: FakeSession):
    @asynccontextmanager
    async def _open():
        try:
            yield session
        finally:
            await session.close()

    return _open


async def no_sleep(_seconds: float) -> None:
    return None

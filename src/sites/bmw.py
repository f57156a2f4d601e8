"""
BMW Approved Used (usedcars.bmw.co.uk) campaign models.

Each model reaches its listing page through the same filter flow: pick the
series, optionally the body style, open the engine-derivative filter, pick
the variant and confirm the results show the expected model text.
"""

from typing import Dict, List, Optional

from src.sites.config import NavigationStep, SiteConfig, SiteSelectors
from src.sites.scripts import MODEL_TEXT_VISIBLE_JS, SCROLL_LISTBOX_JS, VARIANT_COMMITTED_JS

BASE_URL = "https://usedcars.bmw.co.uk/"
PAGE_SIZE = 23

RESULTS_BUTTON = "button.uvl-c-expected-results-btn"
LISTING_LINK = 'a.uvl-c-advert__media-link[href*="/vehicle/"]'

SELECTORS = SiteSelectors(
    listing_container=".uvl-c-vehicle-card",
    listing_link=LISTING_LINK,
    listing_registration="[data-registration], .uvl-c-advert__registration",
    expected_count=RESULTS_BUTTON,
    next_page='a.uvl-c-pagination__direction--next[aria-label="Next page"]',
    cookie_reject='button:has-text("Reject")',
)

X5_WEIGHTS: Dict[str, float] = {
    "Technology Plus Pack": 4,
    "Comfort Plus Pack": 4,
    "Sky Lounge": 4,
    "Soft close Doors": 3,
    "Sun Protection Glass": 1,
    "Bowers & Wilkins": 4,
    "Front Massage Seats": 3,
    "Acoustic glass": 1,
    "M Electric Front Sport Seats": 2,
    "Carbon Fibre Interior Trim": 2,
    "M Sport Pro Pack": 2,
    "Comfort Pack": 2,
    "M Sport Brakes with Red Calipers": 1,
    "Driving Assistant Professional": 3,
    "Parking Assistant Pro": 2,
    "Heat Comfort System": 1,
    "Front and Rear Heated Seats": 2,
    "Ventilated Front Seats": 2,
    "Integral Active Steering": 2,
}

SERIES_5_WEIGHTS: Dict[str, float] = {
    "Technology Plus Pack": 4,
    "Comfort Plus Pack": 4,
    "M Sport Pro Pack": 2,
    "Panoramic": 4,
    "M Adaptive Suspension": 4,
    "Adaptive M Suspension Professional": 4,
    "Driving Assistant Professional": 3,
    "Bowers & Wilkins": 4,
    "Black extended Merino leather": 3,
    "M Multifunctional Seats": 4,
    "M Carbon Exterior Package": 3,
    "Crafted Clarity": 1,
    "Travel and Comfort System": 2,
    "M Sport brake, red high-gloss": 3,
    "red calipers": 3,
    "Sun Protection Glass": 2,
}

I4_WEIGHTS: Dict[str, float] = {
    "Technology Plus Pack": 4,
    "Comfort Plus Pack": 4,
    "Harman/Kardon": 4,
    "Carbon Fibre Interior Trim": 3,
    "M Sport Pro Pack": 2,
    "Sunroof": 4,
    "M Adaptive Suspension": 3,
    "Driving Assistant Professional": 3,
    "M Sport Brakes with Red Calipers": 3,
    "Sun Protection Glass": 2,
}


def _select_option(dropdown: str, text: str, timeout_ms: int = 60_000) -> List[NavigationStep]:
    return [
        NavigationStep(action="click", selector=f"{dropdown} .uvl-c-react-select__control", timeout_ms=timeout_ms),
        NavigationStep(
            action="click",
            selector=f'.uvl-c-react-select__option:text-is("{text}")',
            timeout_ms=5_000,
            message=f'Option "{text}" not found in {dropdown} dropdown',
        ),
        NavigationStep(action="pause", ms=700),
    ]


def build_navigation(series: str, variant: str, model_text: str, body_style: Optional[str] = None) -> List[NavigationStep]:
    """
    Filter flow from the landing page to the model's first results page.

    Args:
        series: Series dropdown label ("X", "5 Series", "BMW i")
        variant: Engine derivative option text ("50e")
        model_text: Text expected in listing image alt attributes
        body_style: Body style label, or None when the series needs none

    Returns:
        Ordered navigation steps
    """
    steps = [
        NavigationStep(action="goto", url=BASE_URL, timeout_ms=60_000),
        NavigationStep(action="click", selector=SELECTORS.cookie_reject, optional=True),
        NavigationStep(action="pause", ms=1_000),
    ]
    steps += _select_option("#series", series)
    if body_style:
        steps += _select_option("#body_style", body_style)
    steps += [
        NavigationStep(action="click", selector=RESULTS_BUTTON),
        NavigationStep(action="click", selector='button[data-tracking-effect="Additional filters"]'),
        NavigationStep(action="click", selector='a.rc-collapse-header:has-text("Model variant")'),
        NavigationStep(action="pause", ms=1_200),
        NavigationStep(action="click", selector='span.uvl-c-select__placeholder:has-text("Engine derivatives")'),
        NavigationStep(action="pause", ms=1_200),
        NavigationStep(action="evaluate", script=SCROLL_LISTBOX_JS),
        NavigationStep(action="pause", ms=2_200),
        NavigationStep(
            action="click",
            selector=f'#variant .react-select-option:has-text("{variant}")',
            retries=1,
            retry_delay_ms=2_000,
            message=f'Variant "{variant}" failed twice',
        ),
        NavigationStep(action="pause", ms=1_000),
        NavigationStep(
            action="assert",
            script=VARIANT_COMMITTED_JS,
            message=f'Variant "{variant}" click registered but not committed',
        ),
        NavigationStep(action="pause", ms=1_500),
        NavigationStep(action="click", selector=RESULTS_BUTTON),
        NavigationStep(action="pause", ms=3_000),
        NavigationStep(action="wait_for", selector=LISTING_LINK, timeout_ms=15_000),
        NavigationStep(
            action="assert",
            script=MODEL_TEXT_VISIBLE_JS,
            arg=model_text,
            message=f'No listing image alt text contains "{model_text}"',
        ),
    ]
    return steps


def _site(model: str, weights: Dict[str, float], **nav) -> SiteConfig:
    return SiteConfig(
        model=model,
        base_url=BASE_URL,
        selectors=SELECTORS,
        page_size=PAGE_SIZE,
        navigation=build_navigation(**nav),
        spec_weights=weights,
    )


BMW_SITES: Dict[str, SiteConfig] = {
    "X5": _site("X5", X5_WEIGHTS, series="X", body_style="X5", variant="50e", model_text="xDrive50e"),
    "5 Series": _site("5 Series", SERIES_5_WEIGHTS, series="5 Series", variant="550e", model_text="550e xDrive"),
    "i4": _site("i4", I4_WEIGHTS, series="BMW i", body_style="i4", variant="50", model_text="i4 m50"),
}

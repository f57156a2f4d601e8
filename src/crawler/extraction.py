"""
Vehicle data extraction from a hydrated detail page.

The detail page fills `window.UVL.AD` asynchronously after load. Extraction
polls until the payload carries an id, mileage and registration date, then
reads it once and maps it through HydrationPayload.
"""

import asyncio
import math
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from src.browser.capability import BrowserTab
from src.core.errors import EmptyPayload, ExtractionTimeout
from src.core.logging import get_logger
from src.models.payload import HydrationPayload
from src.models.vehicle import VehicleRecord
from src.sites.scripts import HYDRATION_READY_JS, READ_HYDRATION_JS

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


async def wait_for_hydration(
    tab: BrowserTab,
    timeout_ms: int,
    poll_ms: int = 250,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """
    Poll until the hydration payload is usable.

    Polls a fixed number of times (timeout / poll interval) so the bound does
    not depend on wall-clock time.

    Returns:
        True once ready, False if the bound is reached
    """
    polls = max(1, math.ceil(timeout_ms / max(poll_ms, 1)))
    for _ in range(polls):
        try:
            if await tab.evaluate(HYDRATION_READY_JS):
                return True
        except Exception as e:
            logger.debug(f"[extract] Hydration probe failed: {e}")
        await sleep(poll_ms / 1000)
    return False


async def read_vehicle(
    tab: BrowserTab,
    vehicle_id: str,
    url: str,
    hydration_timeout_ms: int,
    poll_ms: int = 250,
    registration: Optional[str] = None,
    sleep: Sleep = asyncio.sleep,
) -> VehicleRecord:
    """
    Wait for hydration and map the payload into a VehicleRecord.

    Args:
        tab: Tab already on the detail page
        vehicle_id: Id derived from the listing URL
        url: Listing URL recorded on the vehicle
        hydration_timeout_ms: Bound for the hydration wait
        poll_ms: Poll interval
        registration: Registration seen on the results page, if any
        sleep: Awaitable sleep, injectable for tests

    Returns:
        VehicleRecord with absent optional fields set to None

    Raises:
        ExtractionTimeout: Payload never became ready
        EmptyPayload: Payload missing, unreadable or lacking required fields
    """
    if not await wait_for_hydration(tab, hydration_timeout_ms, poll_ms, sleep):
        raise ExtractionTimeout(
            f"Hydration not ready after {hydration_timeout_ms}ms", url=url, vehicle_id=vehicle_id
        )

    raw = await tab.evaluate(READ_HYDRATION_JS)
    if not raw:
        raise EmptyPayload("Missing hydration payload", url=url, vehicle_id=vehicle_id)

    try:
        payload = HydrationPayload.model_validate(raw)
    except ValidationError as e:
        raise EmptyPayload(f"Unreadable hydration payload: {e}", url=url, vehicle_id=vehicle_id) from e

    if not payload.is_complete():
        raise EmptyPayload("Hydration payload lacks id, mileage or registration date", url=url, vehicle_id=vehicle_id)

    title = None
    try:
        title = (await tab.title()).strip()
    except Exception as e:
        logger.debug(f"[extract] [{vehicle_id}] Could not read title: {e}")

    record = payload.to_record(vehicle_id=vehicle_id, url=url, title=title)
    if registration:
        record = record.model_copy(update={"registration": registration})
    logger.debug(f"[extract] [{vehicle_id}] {len(record.features)} features")
    return record

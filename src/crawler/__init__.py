"""
Crawler module for carwatch.

This module handles:
- Navigation scripts, expected counts and pagination
- Per-listing navigate-and-extract with recovery
- The page traversal state machine
- Whole campaigns: crawl, replay, reconcile, notify
"""

from src.crawler.campaign import CampaignSummary, run_campaign
from src.crawler.page_loop import CrawlState, ExitReason, PageCrawlLoop
from src.crawler.pipeline import ExtractionOutcome, VehicleExtractionPipeline
from src.crawler.state import RunState

__all__ = [
    "CampaignSummary",
    "run_campaign",
    "CrawlState",
    "ExitReason",
    "PageCrawlLoop",
    "ExtractionOutcome",
    "VehicleExtractionPipeline",
    "RunState",
]

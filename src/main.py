"""
carwatch command line entry point.

Runs the restart supervisor over the configured campaign models.

Usage:
    python -m src.main --dry --audit
    python -m src.main --models "X5,i4" --max-pages 2 --headed
    python -m src.main --single-campaign     # one campaign per process
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from src.browser.playwright_session import open_playwright_session
from src.core.config import load_config
from src.core.context import RunContext
from src.core.error_logger import ErrorLogger
from src.core.logging import get_logger, init_campaign_logging
from src.crawler.campaign import CampaignSummary, run_campaign
from src.notify.email_sender import EmailNotifier
from src.supervisor.restart import RestartSupervisor

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Crawl, score and reconcile used-car listings per target model.")
    ap.add_argument("--models", help="Comma-separated campaign models (default: CAMPAIGN_MODELS)")
    ap.add_argument("--dry", action="store_true", help="Do not send the digest email")
    ap.add_argument("--max-pages", type=int, default=None, help="Lower the page cap for each campaign")
    ap.add_argument("--audit", action="store_true", help="Capture DOM/screenshot/pagination artifacts")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--headless", dest="headless", action="store_true", default=None, help="Force headless")
    ap.add_argument("--headed", dest="headless", action="store_false", help="Force headed")
    ap.add_argument(
        "--single-campaign",
        action="store_true",
        help="Run one campaign, persist the checkpoint and exit (for an external scheduler)",
    )
    ap.add_argument("--env", type=Path, default=None, help="Path to .env file (default: configs/.env)")
    return ap


def parse_models(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [m.strip() for m in value.split(",") if m.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.env)
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    if args.headless is not None:
        config.headless = args.headless
    if args.max_pages is not None and args.max_pages < 1:
        print("[error] --max-pages must be at least 1", file=sys.stderr)
        return 1

    init_campaign_logging(verbose=args.verbose or config.log_level.upper() == "DEBUG", log_dir=config.log_dir)
    logger.info(f"Starting carwatch with {config!r}")

    error_logger = ErrorLogger.from_config(config)
    notifier = EmailNotifier.from_config(config)

    async def _campaign(ctx: RunContext) -> CampaignSummary:
        return await run_campaign(
            ctx,
            open_session=lambda: open_playwright_session(headless=config.headless),
            notifier=notifier,
        )

    supervisor = RestartSupervisor(
        config,
        _campaign,
        models=parse_models(args.models),
        error_logger=error_logger,
        dry_run=args.dry,
        max_pages=args.max_pages,
        audit=args.audit,
        single_campaign=args.single_campaign,
    )

    try:
        result = asyncio.run(supervisor.run())
    except KeyboardInterrupt:
        print("\n[abort] KeyboardInterrupt – stopping crawl.")
        return 1

    for summary in result.summaries:
        logger.info(f"[summary] {summary.describe()}")
    logger.info(f"[supervisor] Finished with status {result.status}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())

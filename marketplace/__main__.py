"""Main entry point for the marketplace core."""

import argparse
import asyncio
import json
import sys

from loguru import logger

from .orchestrator.coordinator import JobCoordinator
from .orchestrator.scheduler import JobScheduler
from .utils.config import get_config
from .utils.logger import setup_logging


def build_coordinator() -> JobCoordinator:
    config = get_config()
    setup_logging()
    return JobCoordinator(config.model_dump())


async def run_scheduler():
    """Run the job scheduler."""
    coordinator = build_coordinator()
    scheduler = JobScheduler(coordinator, coordinator.config)

    logger.info("=" * 80)
    logger.info("Marketplace scheduler - Starting")
    logger.info("=" * 80)

    scheduler.configure_jobs()
    scheduler.start()

    logger.info("Scheduler started. Press Ctrl+C to stop.")

    try:
        while True:
            await asyncio.sleep(1)
    finally:
        logger.info("Shutting down...")
        scheduler.stop()


async def run_scoring(product_id=None):
    """Score one product, or recalculate every published product."""
    coordinator = build_coordinator()

    if product_id is None:
        await coordinator.run_scoring()
        return

    score_set = coordinator.score_service.calculate_scores(product_id)
    print(json.dumps(score_set.as_dict(), indent=2))


async def run_competitors(product_id=None):
    """Identify competitors, printing the analysis when a product is given."""
    coordinator = build_coordinator()

    if product_id is None:
        await coordinator.run_competitor_identification()
        return

    coordinator.analyzer.identify_competitors(product_id)
    analysis = coordinator.analyzer.get_competitor_analysis(product_id)
    print(json.dumps(analysis.summary(), indent=2, default=str))


async def expire_quotes():
    """Expire stale quotes manually."""
    coordinator = build_coordinator()
    expired = await coordinator.expire_quotes()
    logger.info(f"Expired {expired} quotes")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Marketplace scoring, analysis and pricing jobs")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("scheduler", help="Run the job scheduler")

    score_parser = subparsers.add_parser("score", help="Run product scoring")
    score_parser.add_argument("--product-id", type=int, help="Score a single product")

    competitors_parser = subparsers.add_parser("competitors", help="Run competitor identification")
    competitors_parser.add_argument("--product-id", type=int, help="Analyze a single product")

    subparsers.add_parser("expire-quotes", help="Expire stale quotes")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "scheduler":
            asyncio.run(run_scheduler())
        elif args.command == "score":
            asyncio.run(run_scoring(args.product_id))
        elif args.command == "competitors":
            asyncio.run(run_competitors(args.product_id))
        elif args.command == "expire-quotes":
            asyncio.run(expire_quotes())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

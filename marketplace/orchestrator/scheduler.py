"""Job scheduling for the marketplace core."""

from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

if TYPE_CHECKING:
    from .coordinator import JobCoordinator


class JobScheduler:
    """Manages scheduled scoring and maintenance jobs.

    Default schedule:
    - Score recalculation: Every 2 hours
    - Competitor identification: Every 12 hours
    - Quote expiry: Every 30 minutes
    - Cache cleanup: Every 10 minutes

    Every job coalesces missed runs and never overlaps with itself.
    """

    def __init__(self, coordinator: "JobCoordinator", config: dict):
        """Initialize job scheduler.

        Args:
            coordinator: Job coordinator instance
            config: Configuration dictionary
        """
        self.coordinator = coordinator
        self.config = config
        self.schedule_config = config.get("schedule", {})
        self.max_instances = self.schedule_config.get("max_instances_per_job", 1)

        self.scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": self.max_instances,
                "misfire_grace_time": self.schedule_config.get("misfire_grace_time_seconds", 300),
            }
        )

    def configure_jobs(self):
        """Set up all scheduled jobs based on configuration."""
        scoring_hours = self.schedule_config.get("scoring_hours", 2)
        self.scheduler.add_job(
            self.coordinator.run_scoring,
            IntervalTrigger(hours=scoring_hours),
            id="scoring",
            name="Product Scoring",
            max_instances=self.max_instances,
            replace_existing=True,
        )
        logger.info(f"Scheduled product scoring every {scoring_hours} hours")

        competitor_hours = self.schedule_config.get("competitor_hours", 12)
        self.scheduler.add_job(
            self.coordinator.run_competitor_identification,
            IntervalTrigger(hours=competitor_hours),
            id="competitors",
            name="Competitor Identification",
            max_instances=self.max_instances,
            replace_existing=True,
        )
        logger.info(f"Scheduled competitor identification every {competitor_hours} hours")

        quote_minutes = self.schedule_config.get("quote_expiry_minutes", 30)
        self.scheduler.add_job(
            self.coordinator.expire_quotes,
            IntervalTrigger(minutes=quote_minutes),
            id="quote_expiry",
            name="Quote Expiry",
            max_instances=self.max_instances,
            replace_existing=True,
        )
        logger.info(f"Scheduled quote expiry every {quote_minutes} minutes")

        cache_minutes = self.schedule_config.get("cache_cleanup_minutes", 10)
        self.scheduler.add_job(
            self.coordinator.cleanup_cache,
            IntervalTrigger(minutes=cache_minutes),
            id="cache_cleanup",
            name="Cache Cleanup",
            max_instances=self.max_instances,
            replace_existing=True,
        )
        logger.info(f"Scheduled cache cleanup every {cache_minutes} minutes")

    def start(self):
        """Start the scheduler."""
        logger.info("Starting job scheduler")
        self.scheduler.start()

    def stop(self):
        """Stop the scheduler."""
        logger.info("Stopping job scheduler")
        self.scheduler.shutdown()

    def get_jobs(self):
        """Get list of scheduled jobs."""
        return self.scheduler.get_jobs()

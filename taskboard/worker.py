"""
Scheduled job for the recurring task service.

Runs instance generation for every board at a fixed interval.

    python -m taskboard.worker          # loop forever
    python -m taskboard.worker --once   # single run
"""

import argparse
import asyncio
from typing import Optional

from taskboard.config import Settings, get_settings
from taskboard.db.config import get_engine
from taskboard.db.init import init_db
from taskboard.services.recurring_task_service import GenerationReport, RecurringTaskService
from taskboard.utils.logger import get_logger

logger = get_logger("recurring-task-service")


async def run_once(service: RecurringTaskService) -> GenerationReport:
    """Run one generation pass for all boards off the event loop."""
    return await asyncio.to_thread(service.generate)


async def run_forever(service: RecurringTaskService, settings: Settings, iterations: Optional[int] = None):
    """Generate, sleep, repeat. ``iterations`` bounds the loop (None = forever)."""
    completed = 0
    while iterations is None or completed < iterations:
        try:
            await run_once(service)
        except Exception as e:
            logger.exception("Recurring generation run failed", error=str(e))
        completed += 1
        if iterations is None or completed < iterations:
            await asyncio.sleep(settings.job_interval_seconds)


def main(argv=None):
    """Main entry point for the recurring task job."""
    parser = argparse.ArgumentParser(description="Generate due instances of recurring tasks")
    parser.add_argument("--once", action="store_true", help="run a single generation pass and exit")
    args = parser.parse_args(argv)

    settings = get_settings()
    init_db()
    service = RecurringTaskService(get_engine(), settings=settings)

    logger.info("Starting recurring task job", interval_seconds=settings.job_interval_seconds, once=args.once)
    asyncio.run(run_forever(service, settings, iterations=1 if args.once else None))


if __name__ == "__main__":
    main()

"""Job scheduler using APScheduler."""

import asyncio
import logging
from typing import NoReturn

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from arena.config import Settings
from arena.container import open_container

logger = logging.getLogger(__name__)


async def _settle(settings: Settings) -> None:
    async with open_container(settings) as container:
        report = await container.settlement.run_weekly_settlement()
    logger.info(
        f"Weekly settlement: {report.matches_settled} settled, "
        f"{report.matches_deferred} deferred, {len(report.failed_match_ids)} failed"
    )


async def _open(settings: Settings) -> None:
    async with open_container(settings) as container:
        await container.matches.run_weekly_open()


async def _close(settings: Settings) -> None:
    async with open_container(settings) as container:
        await container.matches.close_expired_matches()


def settlement_job(settings: Settings) -> None:
    """Weekly settlement over the previous Monday-Sunday."""
    try:
        asyncio.run(_settle(settings))
    except Exception as e:
        logger.error(f"Weekly settlement failed: {e}", exc_info=True)


def open_matches_job(settings: Settings) -> None:
    asyncio.run(_open(settings))


def close_matches_job(settings: Settings) -> None:
    try:
        asyncio.run(_close(settings))
    except Exception as e:
        logger.error(f"Closing expired matches failed: {e}", exc_info=True)


def build_scheduler(settings: Settings) -> BlockingScheduler:
    """Register the ledger's recurring jobs on a new scheduler."""
    cfg = settings.settlement
    scheduler = BlockingScheduler(timezone="UTC")

    scheduler.add_job(
        settlement_job,
        CronTrigger(
            day_of_week=cfg.cron_day_of_week,
            hour=cfg.cron_hour,
            minute=cfg.cron_minute,
            timezone="UTC",
        ),
        args=[settings],
        id="weekly-settlement",
        name="Settlement: Weekly Run",
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Registered job: Weekly Settlement ({cfg.cron_day_of_week} "
        f"{cfg.cron_hour:02d}:{cfg.cron_minute:02d} UTC)"
    )

    scheduler.add_job(
        open_matches_job,
        CronTrigger(
            day_of_week=cfg.cron_day_of_week,
            hour=cfg.open_cron_hour,
            minute=cfg.open_cron_minute,
            timezone="UTC",
        ),
        args=[settings],
        id="weekly-open",
        name="Lifecycle: Open Week's Matches",
        max_instances=1,
    )
    logger.info(
        f"Registered job: Weekly Open ({cfg.cron_day_of_week} "
        f"{cfg.open_cron_hour:02d}:{cfg.open_cron_minute:02d} UTC)"
    )

    scheduler.add_job(
        close_matches_job,
        IntervalTrigger(minutes=cfg.close_interval_minutes),
        args=[settings],
        id="close-expired",
        name="Lifecycle: Close Expired Matches",
        max_instances=1,
    )
    logger.info(
        f"Registered job: Close Expired Matches (every {cfg.close_interval_minutes} min)"
    )

    return scheduler


def start_scheduler(settings: Settings) -> NoReturn:
    """Start the APScheduler with configured jobs."""
    scheduler = build_scheduler(settings)

    try:
        logger.info("✓ Scheduler starting...")
        logger.info(f"✓ {len(scheduler.get_jobs())} jobs registered")
        logger.info("Press Ctrl+C to stop\n")

        scheduler.start()

    except (KeyboardInterrupt, SystemExit):
        logger.info("\nReceived interrupt signal")
        scheduler.shutdown()
        logger.info("✓ Scheduler stopped cleanly")

"""Background job scheduler for housekeeping."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.accounts.reset_tokens import purge_expired_tokens
from app.core.config import settings
from app.core.database import engine

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def purge_tokens_job(bind=None):
    """Remove expired password reset tokens."""
    try:
        with Session(bind or engine) as session:
            removed = purge_expired_tokens(session)
            logger.info(f"Purged {removed} expired password reset tokens")
    except SQLAlchemyError as e:
        logger.error(f"Token purge failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        purge_tokens_job,
        trigger=IntervalTrigger(minutes=settings.reset_token_purge_interval_minutes),
        id="purge_reset_tokens",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, purging reset tokens every "
        f"{settings.reset_token_purge_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")

"""
Auth Background Jobs

- Purge password reset tokens that were used or have expired (hourly)

The job opens its own session and is safe to run repeatedly.
"""

import logging
from datetime import UTC, datetime

from apscheduler.triggers.interval import IntervalTrigger

from registrar.core.database import async_session_maker
from registrar.core.scheduler import register_job
from registrar.modules.auth import repository

logger = logging.getLogger(__name__)

JOB_ID_PURGE_RESET_TOKENS = "auth_purge_password_reset_tokens"


async def purge_password_reset_tokens() -> int:
    """Delete used or expired reset tokens. Returns how many were removed."""
    logger.info("Starting password reset token purge...")
    async with async_session_maker() as db:
        removed = await repository.delete_used_or_expired(db, datetime.now(UTC))
    logger.info(f"Password reset token purge completed. Removed: {removed}")
    return removed


def register_auth_jobs() -> None:
    """Register auth jobs with the scheduler. Call before start_scheduler()."""
    register_job(
        job_id=JOB_ID_PURGE_RESET_TOKENS,
        func=purge_password_reset_tokens,
        trigger=IntervalTrigger(hours=1),
    )
    logger.info(f"Registered job: {JOB_ID_PURGE_RESET_TOKENS} (interval: 1 hour)")

"""
Expiry Scheduler Service

Marks stored proofs older than PROOF_TTL_HOURS as expired.
Uses APScheduler for periodic sweeps.
"""

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.config import settings
from app.models import VerificationStatus

from .proof_store import ProofStore
from .service_factory import get_proof_store

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

JOB_ID = "expire_old_proofs"


async def expire_old_proofs(
    store: ProofStore | None = None,
    ttl_hours: int | None = None,
) -> dict:
    """
    Mark proofs created more than ``ttl_hours`` ago as expired.

    Already expired proofs are left untouched. Proof documents are kept;
    expiry only changes the stored verification status.

    Returns:
        dict: Summary of the sweep with counts
    """
    store = store or get_proof_store()
    ttl_hours = settings.PROOF_TTL_HOURS if ttl_hours is None else ttl_hours
    cutoff = datetime.now(timezone.utc) - timedelta(hours=ttl_hours)

    summary = {
        "proofs_scanned": 0,
        "proofs_expired": 0,
        "errors": 0,
    }

    for stored in store.list(created_before=cutoff):
        summary["proofs_scanned"] += 1
        if stored.status == VerificationStatus.EXPIRED:
            continue
        try:
            store.update_status(stored.id, VerificationStatus.EXPIRED)
            summary["proofs_expired"] += 1
        except OSError as e:
            summary["errors"] += 1
            logger.error(f"Failed to expire proof {stored.id}: {e}")

    logger.info(
        f"Expiry sweep completed: {summary['proofs_expired']} proofs expired, "
        f"{summary['errors']} errors"
    )
    return summary


def start_cleanup_scheduler():
    """
    Start the expiry scheduler.

    Safe to call multiple times - will not add duplicate jobs.
    """
    if scheduler.running:
        logger.debug("Scheduler already running")
        return

    if not scheduler.get_job(JOB_ID):
        scheduler.add_job(
            expire_old_proofs,
            "interval",
            hours=settings.CLEANUP_INTERVAL_HOURS,
            id=JOB_ID,
            name="Expire old proofs",
            replace_existing=True,
        )
        logger.info(
            f"Scheduled expiry job: every {settings.CLEANUP_INTERVAL_HOURS} hour(s), "
            f"TTL: {settings.PROOF_TTL_HOURS} hours"
        )

    scheduler.start()
    logger.info("Expiry scheduler started")


def stop_cleanup_scheduler():
    """Stop the expiry scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Expiry scheduler stopped")


def get_scheduler_status() -> dict:
    """
    Get current scheduler status for health checks.

    Returns:
        dict: Scheduler status including running state and job info
    """
    job = scheduler.get_job(JOB_ID)
    return {
        "running": scheduler.running,
        "job_scheduled": job is not None,
        "next_run": str(job.next_run_time) if job else None,
        "interval_hours": settings.CLEANUP_INTERVAL_HOURS,
        "ttl_hours": settings.PROOF_TTL_HOURS,
    }

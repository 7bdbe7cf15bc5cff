import logging
from typing import Dict
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from core.database import async_session_maker
from tracking.store import CheckpointStore
from tracking.order_lookup import HTTPOrderLookup
from tracking.notifications import HTTPNotificationSender
from tracking.orchestrator import TrackedOrderOrchestrator

logger = logging.getLogger(__name__)


async def reconcile_statuses(orchestrator: TrackedOrderOrchestrator) -> Dict[str, int]:
    """
    Re-apply the last checkpoint's status to every tracked order whose
    current_status has drifted from its checkpoint history.

    Returns:
        Counts of tracked orders checked, repaired and failed
    """
    summary = {"checked": 0, "repaired": 0, "failed": 0}

    for tracked_order in await orchestrator.get_all_tracked_orders():
        summary["checked"] += 1

        last_checkpoint = await orchestrator.get_last_checkpoint(tracked_order)
        if last_checkpoint is None or last_checkpoint.status == tracked_order.current_status:
            continue

        logger.info(
            f"Tracked order {tracked_order.tracked_order_id} is "
            f"{tracked_order.current_status.value}, last checkpoint says "
            f"{last_checkpoint.status.value}"
        )
        if await orchestrator.revert_to_last_checkpoint(tracked_order):
            summary["repaired"] += 1
        else:
            summary["failed"] += 1

    return summary


def build_orchestrator(session_factory=async_session_maker) -> TrackedOrderOrchestrator:
    """Wire the orchestrator with the production store and HTTP collaborators"""
    return TrackedOrderOrchestrator(
        store=CheckpointStore(session_factory),
        order_lookup=HTTPOrderLookup(),
        notification_sender=HTTPNotificationSender()
    )


class ReconciliationScheduler:
    def __init__(self, orchestrator: TrackedOrderOrchestrator = None):
        self.scheduler = AsyncIOScheduler()
        self.orchestrator = orchestrator or build_orchestrator()

    async def run_reconciliation_job(self):
        """Job to repair drifted current statuses"""
        logger.info("Scheduler: Starting status reconciliation")
        try:
            summary = await reconcile_statuses(self.orchestrator)
            logger.info(
                f"Scheduler: Reconciliation finished - checked={summary['checked']}, "
                f"repaired={summary['repaired']}, failed={summary['failed']}"
            )
        except Exception as e:
            logger.error(f"Scheduler: Reconciliation failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_reconciliation_job,
            trigger=IntervalTrigger(minutes=settings.RECONCILE_INTERVAL_MINUTES),
            id="status_reconciliation",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info("Reconciliation scheduler started")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Reconciliation scheduler stopped")

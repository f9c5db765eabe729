# app/tasks/subscription_tasks.py
import logging
from app.core.celery_app import celery_app, run_async
from app.core.database import db_manager
from app.modules.subscription.service import subscription_service

logger = logging.getLogger(__name__)


async def _process_expired_subscriptions() -> tuple[int, int]:
    async with db_manager.async_session_maker() as db:
        return await subscription_service.process_expired_subscriptions(db)


@celery_app.task(name="tasks.process_expired_subscriptions")
def process_expired_subscriptions():
    """
    A periodic task that renews overdue auto-renew subscriptions
    and marks the remaining overdue ones as expired.
    """
    logger.info("Running periodic task: processing expired subscriptions")
    try:
        renewed, expired = run_async(_process_expired_subscriptions())
    except Exception:
        logger.exception("Error during process_expired_subscriptions task")
        raise
    logger.info("Subscriptions processed: %s renewed, %s expired", renewed, expired)
    return {"renewed": renewed, "expired": expired}

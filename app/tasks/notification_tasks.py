import logging
from app.core.celery_app import celery_app, run_async
from app.core.database import db_manager
from app.modules.notifications.service import process_pending_notifications as process_pending

logger = logging.getLogger(__name__)


async def _process_pending_notifications() -> int:
    async with db_manager.async_session_maker() as db:
        return await process_pending(db)


@celery_app.task(name="tasks.process_pending_notifications")
def process_pending_notifications():
    """Sends every notification whose scheduled time has passed, across all clinics."""
    try:
        sent = run_async(_process_pending_notifications())
    except Exception:
        logger.exception("Error during process_pending_notifications task")
        raise
    return {"sent": sent}

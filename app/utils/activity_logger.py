import datetime
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.log_model import ActivityLog

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    user_id: Optional[int],
    activity_type_category: str,
    clinic_id: Optional[int],
    activity_description: str,
    timestamp: Optional[datetime.datetime] = None
):
    """
    Persists an audit entry for a staff action.

    Args:
        db: The database session.
        user_id: The ID of the staff member performing the activity.
        activity_type_category: The broad category of the activity (e.g., "Login/Access", "Data/CRUD").
        clinic_id: The clinic the activity happened in, if any.
        activity_description: A human-readable description of what happened.
        timestamp: The datetime of the activity. Defaults to now.
    """
    if timestamp is None:
        timestamp = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)

    log_entry = ActivityLog(
        timestamp=timestamp,
        user_id=user_id,
        activity_type_category=activity_type_category,
        clinic_id=clinic_id,
        activity_description=activity_description
    )

    db.add(log_entry)
    await db.commit()
    logger.info("Activity [%s] clinic=%s user=%s: %s", activity_type_category, clinic_id, user_id, activity_description)

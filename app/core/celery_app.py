import asyncio
from celery import Celery
from celery.schedules import crontab
from app.core.config import settings

# Initialize Celery
celery_app = Celery(
    "tasks",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "app.tasks.subscription_tasks",
        "app.tasks.notification_tasks",
    ]
)

celery_app.conf.update(
    task_track_started=True,
    timezone="UTC",
    beat_schedule={
        'process-expired-subscriptions-daily': {
            'task': 'tasks.process_expired_subscriptions',
            'schedule': crontab(hour=0, minute=5),  # Runs daily at 00:05
        },
        'process-pending-notifications': {
            'task': 'tasks.process_pending_notifications',
            'schedule': crontab(minute='*/5'),
        },
    },
)

_loop = None


def run_async(coro):
    """Runs ``coro`` on the worker's event loop, reused across tasks so pooled DB connections stay valid."""
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
    return _loop.run_until_complete(coro)

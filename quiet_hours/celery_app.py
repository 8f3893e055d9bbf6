"""
Celery configuration for Quiet Hours with beat scheduling
"""

from celery import Celery
from .config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, HOUSEKEEPING_INTERVAL_MINUTES

# Create Celery app
celery_app = Celery(
    "quiet_hours",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["quiet_hours.celery_tasks.housekeeping"]
)

# Basic configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)

# Beat schedule configuration
celery_app.conf.beat_schedule = {
    'run-housekeeping': {
        'task': 'quiet_hours.celery_tasks.housekeeping.run_housekeeping_tick',
        'schedule': HOUSEKEEPING_INTERVAL_MINUTES * 60.0,
    },
}

if __name__ == "__main__":
    celery_app.start()

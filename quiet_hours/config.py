"""
Runtime configuration read from the environment (and an optional .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quiet_hours.db")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)

# Minutes before a session starts that its reminder fires
REMINDER_MINUTES = int(os.getenv("REMINDER_MINUTES", "10"))
HOUSEKEEPING_INTERVAL_MINUTES = int(os.getenv("HOUSEKEEPING_INTERVAL_MINUTES", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Default delay when a reminder is snoozed
SNOOZE_MINUTES = int(os.getenv("SNOOZE_MINUTES", "5"))

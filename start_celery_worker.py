#!/usr/bin/env python3
"""
Start the Celery worker for Quiet Hours housekeeping
"""

import sys
from quiet_hours.celery_app import celery_app

if __name__ == "__main__":
    print("Starting Celery Worker for Quiet Hours...")
    print("This will run reminders and mark overdue sessions as missed")
    print("Press Ctrl+C to stop")

    try:
        celery_app.start(['worker', '--loglevel=info'])
    except KeyboardInterrupt:
        print("\nStopping Celery Worker...")
        sys.exit(0)

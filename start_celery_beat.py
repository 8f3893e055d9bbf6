#!/usr/bin/env python3
"""
Start Celery Beat, which triggers the Quiet Hours housekeeping tick
"""

import sys
from quiet_hours.celery_app import celery_app

if __name__ == "__main__":
    print("Starting Celery Beat for Quiet Hours...")
    print("Housekeeping runs every HOUSEKEEPING_INTERVAL_MINUTES minutes")
    print("Press Ctrl+C to stop")

    try:
        celery_app.start(['beat', '--loglevel=info'])
    except KeyboardInterrupt:
        print("\nStopping Celery Beat...")
        sys.exit(0)

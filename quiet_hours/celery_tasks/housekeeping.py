from datetime import datetime
import logging
from sqlalchemy.orm import Session
from ..celery_app import celery_app
from ..database import SessionLocal
from ..services.housekeeping import run_housekeeping

logger = logging.getLogger(__name__)


@celery_app.task(name="quiet_hours.celery_tasks.housekeeping.run_housekeeping_tick")
def run_housekeeping_tick():
    db: Session = SessionLocal()
    try:
        return run_housekeeping(db, datetime.now())
    finally:
        db.close()

"""
SQLAlchemy-backed implementations of the scheduling store contracts.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..models import SessionRecord, SessionTemplate
from ..schemas import ScheduledSession
from ..scheduling.core.errors import StoreUnavailableError
from ..scheduling.core.store import SessionStore, TemplateStore

SESSION_FIELDS = (
    "id", "title", "date", "time", "duration", "category", "status", "recurring_group",
    "notifications", "notes", "created_at", "started_at", "completed_at",
)


def to_record(session: ScheduledSession) -> SessionRecord:
    # Unset optional fields are left to the column defaults
    values = {field: getattr(session, field) for field in SESSION_FIELDS}
    return SessionRecord(**{field: value for field, value in values.items() if value is not None})


class SqlAlchemySessionStore(SessionStore):
    """Sessions persisted in the ``sessions`` table. Every write commits."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[ScheduledSession]:
        try:
            records = self.db.query(SessionRecord).order_by(SessionRecord.date, SessionRecord.time).all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not read sessions: {e}")
        return [ScheduledSession.model_validate(record) for record in records]

    def append(self, session: ScheduledSession) -> None:
        self._write(lambda: self.db.add(to_record(session)))

    def remove(self, session_id: str) -> bool:
        try:
            removed = self.db.query(SessionRecord).filter(SessionRecord.id == session_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Could not remove session {session_id}: {e}")
        return removed > 0

    def update(self, session: ScheduledSession) -> bool:
        try:
            exists = self.db.query(SessionRecord.id).filter(SessionRecord.id == session.id).first() is not None
            if exists:
                self.db.merge(to_record(session))
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Could not update session {session.id}: {e}")
        return exists

    def replace_all(self, sessions: Iterable[ScheduledSession]) -> None:
        sessions = list(sessions)

        def rewrite():
            keep = [session.id for session in sessions]
            self.db.query(SessionRecord).filter(SessionRecord.id.notin_(keep)).delete(synchronize_session=False)
            for session in sessions:
                self.db.merge(to_record(session))

        self._write(rewrite)

    def get(self, session_id: str) -> Optional[ScheduledSession]:
        try:
            record = self.db.query(SessionRecord).filter(SessionRecord.id == session_id).first()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not read session {session_id}: {e}")
        return ScheduledSession.model_validate(record) if record else None

    def _write(self, operation):
        try:
            operation()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Could not write sessions: {e}")


class SqlAlchemyTemplateStore(TemplateStore):
    def __init__(self, db: Session):
        self.db = db

    def save(self, name: str, data: dict) -> None:
        try:
            template = self.db.query(SessionTemplate).filter(SessionTemplate.name == name).first()
            if template:
                template.data = data
                template.created_at = datetime.utcnow()
            else:
                self.db.add(SessionTemplate(name=name, data=data))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Could not save template '{name}': {e}")

    def load(self, name: str) -> Optional[dict]:
        try:
            template = self.db.query(SessionTemplate).filter(SessionTemplate.name == name).first()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not load template '{name}': {e}")
        return _template_payload(template) if template else None

    def all(self) -> Dict[str, dict]:
        try:
            templates = self.db.query(SessionTemplate).order_by(SessionTemplate.name).all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not list templates: {e}")
        return {template.name: _template_payload(template) for template in templates}


def _template_payload(template: SessionTemplate) -> dict:
    created_at = template.created_at.isoformat() if template.created_at else None
    return {**template.data, "created_at": created_at}

"""
Versioned JSON export and import of the whole session collection.
"""

from datetime import datetime
from typing import List
from pydantic import ValidationError as PydanticValidationError

from ...schemas import ScheduledSession, SessionExport
from ..core.errors import ValidationError

EXPORT_VERSION = "1.0"


def export_sessions(sessions: List, now: datetime) -> SessionExport:
    return SessionExport(version=EXPORT_VERSION, exported=now, sessions=list(sessions))


def parse_import(payload) -> List[ScheduledSession]:
    """
    Validate an export payload and return its sessions.

    The payload must be a mapping with a ``sessions`` list; ``version``, when
    present, must match EXPORT_VERSION. Every session is validated and ids
    must be unique. Nothing is written here.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("sessions"), list):
        raise ValidationError("Invalid data format: expected an object with a 'sessions' list", field="sessions")

    version = payload.get("version", EXPORT_VERSION)
    if version != EXPORT_VERSION:
        raise ValidationError(f"Unsupported export version '{version}'", field="version")

    sessions = []
    for index, item in enumerate(payload["sessions"]):
        try:
            sessions.append(ScheduledSession.model_validate(item))
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in ("sessions", index, *error["loc"]))
            raise ValidationError(f"Invalid field '{field}': {error['msg']}", field=field)

    seen = set()
    for session in sessions:
        if session.id in seen:
            raise ValidationError(f"Duplicate session id '{session.id}' in import", field="sessions")
        seen.add(session.id)

    return sessions

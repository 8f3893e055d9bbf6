"""
Store contracts the scheduling engine depends on, plus in-memory implementations.

The engine never talks to a database directly: it receives a ``SessionStore``
(and optionally a ``TemplateStore``) and only uses the operations below.
"""

from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime
from typing import Dict, Iterable, List, Optional


class SessionStore(ABC):
    """Opaque holder of the session collection."""

    @abstractmethod
    def list_all(self) -> List:
        """Return every stored session."""

    @abstractmethod
    def append(self, session) -> None:
        """Add one session."""

    @abstractmethod
    def remove(self, session_id: str) -> bool:
        """Remove a session by id. Returns False when the id is unknown."""

    @abstractmethod
    def update(self, session) -> bool:
        """Overwrite the stored session with the same id. Returns False when the id is unknown."""

    @abstractmethod
    def replace_all(self, sessions: Iterable) -> None:
        """Replace the whole collection."""

    def get(self, session_id: str):
        for session in self.list_all():
            if session.id == session_id:
                return session
        return None


class TemplateStore(ABC):
    """Name-keyed store of saved session requests."""

    @abstractmethod
    def save(self, name: str, data: dict) -> None: ...

    @abstractmethod
    def load(self, name: str) -> Optional[dict]: ...

    @abstractmethod
    def all(self) -> Dict[str, dict]: ...


class InMemorySessionStore(SessionStore):
    def __init__(self, sessions: Optional[Iterable] = None):
        self._sessions: List = list(sessions or [])

    def list_all(self) -> List:
        return list(self._sessions)

    def append(self, session) -> None:
        self._sessions.append(session)

    def remove(self, session_id: str) -> bool:
        remaining = [s for s in self._sessions if s.id != session_id]
        removed = len(remaining) != len(self._sessions)
        self._sessions = remaining
        return removed

    def update(self, session) -> bool:
        for index, existing in enumerate(self._sessions):
            if existing.id == session.id:
                self._sessions[index] = session
                return True
        return False

    def replace_all(self, sessions: Iterable) -> None:
        self._sessions = list(sessions)

    def __len__(self):
        return len(self._sessions)


class InMemoryTemplateStore(TemplateStore):
    def __init__(self):
        self._templates: Dict[str, dict] = {}

    def save(self, name: str, data: dict) -> None:
        self._templates[name] = {**deepcopy(data), "created_at": datetime.now().isoformat()}

    def load(self, name: str) -> Optional[dict]:
        template = self._templates.get(name)
        return deepcopy(template) if template is not None else None

    def all(self) -> Dict[str, dict]:
        return deepcopy(self._templates)

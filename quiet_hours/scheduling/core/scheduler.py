"""
Main scheduling engine that orchestrates every scheduling operation.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ...models import SessionStatus
from ...schemas import (
    SessionRequest, ScheduledSession, RecurrenceRuleIn, SchedulingPreferences,
    BatchResult, BatchFailure, HistoricalPatterns, ProductivityReport, Suggestion, SessionExport,
)
from .constants import MIN_FRAGMENT_MINUTES
from .errors import (
    SchedulingError, SchedulingConflict, ValidationError, SessionNotFound, StoreUnavailableError,
)
from .store import SessionStore, TemplateStore, InMemoryTemplateStore
from .lifecycle import transition_session
from ..constraints.overlap import find_conflicts
from ..algorithms.recurrence import generate_occurrences, create_occurrence
from ..algorithms.resolution import ConflictResolver, Decision, Reject, Adjust, Replace, Split
from ..scoring.pattern_scoring import analyze_historical, suggest_schedule, build_report
from ..utils.slot_utils import find_optimal_time
from ..utils.export_utils import export_sessions, parse_import

logger = logging.getLogger(__name__)

# ================================
# INITIALIZATION & SETUP
# ================================

class SchedulingEngine:
    """
    Facade over overlap detection, conflict resolution, recurrence expansion
    and slot search.

    The engine owns no state of its own: sessions live in the injected store,
    templates in the template store, and "now" comes from ``clock``.
    """
    def __init__(self, store: SessionStore, template_store: Optional[TemplateStore] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 id_factory: Optional[Callable[[], str]] = None,
                 resolver: Optional[ConflictResolver] = None):
        self.store = store
        self.template_store = template_store or InMemoryTemplateStore()
        self.clock = clock or datetime.now
        self.id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self.resolver = resolver or ConflictResolver()

# ================================
# VALIDATION
# ================================

    def _validate_request(self, request) -> SessionRequest:
        """Parse and validate a request before anything touches the store."""
        if isinstance(request, SessionRequest):
            data = request
        else:
            try:
                data = SessionRequest.model_validate(request)
            except PydanticValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(part) for part in error["loc"]) or None
                reason = f"Invalid field '{field}': {error['msg']}" if field else f"Invalid request: {error['msg']}"
                raise ValidationError(reason, field=field)

        if data.recurring is not None:
            # Expands lazily; building the rule is enough to reject unknown types and bad patterns
            generate_occurrences(data.recurring, data.date)

        return data

    def _build_candidate(self, data: SessionRequest) -> ScheduledSession:
        return ScheduledSession(
            id=self.id_factory(),
            status=SessionStatus.UPCOMING,
            created_at=self.clock(),
            **data.model_dump(exclude={"recurring"}),
        )

# ================================
# CORE SCHEDULING LOGIC
# ================================

    def schedule_session(self, request, replace_conflicts: bool = False) -> List[ScheduledSession]:
        """
        Validate, place and commit a session request.

        Returns every committed session: one for a plain request, the accepted
        occurrences for a recurring one, or the fragments when the request had
        to be split. ``replace_conflicts`` evicts whatever occupies the
        requested slot instead of resolving automatically.

        Raises ValidationError / RecurrenceError before any mutation, and
        SchedulingConflict when the request cannot be placed.
        """
        data = self._validate_request(request)
        candidate = self._build_candidate(data)
        return self._place(candidate, data.recurring, replace_conflicts=replace_conflicts, allow_adjust=True)

    def _place(self, candidate: ScheduledSession, rule: Optional[RecurrenceRuleIn],
               replace_conflicts: bool, allow_adjust: bool) -> List[ScheduledSession]:
        sessions = self.store.list_all()
        conflicts = find_conflicts(candidate, sessions)

        if not conflicts:
            if rule is not None:
                return self._commit_recurring(candidate, rule, sessions)
            self._commit([candidate])
            return [candidate]

        if replace_conflicts:
            decision = self.resolver.force_replace(candidate, conflicts)
        elif allow_adjust:
            decision = self.resolver.resolve(candidate, conflicts, sessions)
        else:
            raise SchedulingConflict(
                f"Slot {candidate.date} {candidate.time.strftime('%H:%M')} is no longer free after adjustment",
                conflicts,
            )

        return self._apply_decision(decision, candidate, rule, sessions)

    def _apply_decision(self, decision: Decision, candidate: ScheduledSession,
                        rule: Optional[RecurrenceRuleIn], sessions: List) -> List[ScheduledSession]:
        if isinstance(decision, Reject):
            raise SchedulingConflict(f"Scheduling conflict: {decision.reason}", list(decision.conflicts))

        if isinstance(decision, Adjust):
            # One retry only; the adjusted slot was checked conflict-free
            return self._place(decision.candidate, rule, replace_conflicts=False, allow_adjust=False)

        if isinstance(decision, Replace):
            for session_id in decision.ids_to_remove:
                self.store.remove(session_id)
            return self._place(candidate, rule, replace_conflicts=False, allow_adjust=False)

        if isinstance(decision, Split):
            fragments = self._fit_fragments(decision.fragments, sessions)
            if not fragments:
                raise SchedulingConflict(
                    f"'{candidate.title}' leaves no free fragment of at least {MIN_FRAGMENT_MINUTES} minutes"
                )
            self._commit(fragments)
            return fragments

        raise TypeError(f"Unknown resolution decision: {decision!r}")

    def _fit_fragments(self, fragments, sessions: List) -> List[ScheduledSession]:
        """
        Keep the fragments that are clear of every stored session.

        The splitter only steps around the conflicts of the original slot, so
        a fragment pushed past the last conflict can still land on a neighbour.
        """
        accepted: List[ScheduledSession] = []
        for fragment in fragments:
            if find_conflicts(fragment, sessions + accepted):
                logger.info(f"Dropping fragment {fragment.id}: it overlaps a neighbouring session")
                continue
            accepted.append(fragment)
        return accepted

    def _commit_recurring(self, candidate: ScheduledSession, rule: RecurrenceRuleIn,
                          sessions: List) -> List[ScheduledSession]:
        """
        Commit every occurrence that fits.

        Occurrences already accepted from this batch count as existing
        sessions, so a series can never overlap itself. Occurrences that
        collide are skipped silently.
        """
        group = candidate.recurring_group or candidate.id
        accepted: List[ScheduledSession] = []
        skipped = 0

        for index, occurrence_date in enumerate(generate_occurrences(rule, candidate.date)):
            occurrence = create_occurrence(candidate, occurrence_date, group, index)
            if find_conflicts(occurrence, sessions + accepted):
                skipped += 1
                continue
            accepted.append(occurrence)

        if skipped:
            logger.info(f"Skipped {skipped} conflicting occurrence(s) of '{candidate.title}'")
        self._commit(accepted)
        return accepted

    def _commit(self, sessions: Iterable[ScheduledSession]):
        for session in sessions:
            self.store.append(session)
            logger.debug(f"Committed session {session.id} on {session.date} at {session.time}")

# ================================
# BATCH OPERATIONS
# ================================

    def batch_schedule(self, requests: Iterable) -> BatchResult:
        """
        Schedule each request independently, in order.

        A failing request is recorded with its reason and never stops the ones
        after it. Store failures are not request failures and propagate.
        """
        result = BatchResult()
        for request in requests:
            try:
                result.successful.extend(self.schedule_session(request))
            except StoreUnavailableError:
                raise
            except SchedulingError as e:
                logger.info(f"Batch item failed ({type(e).__name__}): {e.reason}")
                result.failed.append(BatchFailure(
                    request=_request_payload(request),
                    error=e.reason,
                    error_type=type(e).__name__,
                ))
        return result

# ================================
# SLOT FINDING & SUGGESTIONS
# ================================

    def find_optimal_time(self, day: date, duration: int,
                          preferences: Optional[SchedulingPreferences] = None):
        return find_optimal_time(day, duration, preferences or SchedulingPreferences(), self.store.list_all())

    def suggest_schedule(self, preferences: Optional[SchedulingPreferences] = None,
                         duration: int = 60) -> List[Suggestion]:
        return suggest_schedule(preferences or SchedulingPreferences(), self.store.list_all(),
                                self.clock().date(), duration)

    def analyze_historical(self) -> HistoricalPatterns:
        return analyze_historical(self.store.list_all())

    def build_report(self) -> ProductivityReport:
        return build_report(self.store.list_all(), self.clock())

# ================================
# SESSION MANAGEMENT
# ================================

    def list_sessions(self, status: Optional[SessionStatus] = None) -> List[ScheduledSession]:
        sessions = self.store.list_all()
        if status is None:
            return sessions
        status = SessionStatus(status)
        return [s for s in sessions if s.status == status]

    def get_session(self, session_id: str) -> ScheduledSession:
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def delete_session(self, session_id: str):
        if not self.store.remove(session_id):
            raise SessionNotFound(session_id)

    def update_status(self, session_id: str, status: SessionStatus) -> ScheduledSession:
        return transition_session(self.store, session_id, status, self.clock())

# ================================
# EXPORT & IMPORT
# ================================

    def export_data(self) -> SessionExport:
        return export_sessions(self.store.list_all(), self.clock())

    def import_data(self, payload) -> int:
        """Replace every stored session with the ones in an export payload. Validates before writing."""
        sessions = parse_import(payload)
        self.store.replace_all(sessions)
        logger.info(f"Imported {len(sessions)} session(s)")
        return len(sessions)

# ================================
# TEMPLATES
# ================================

    def save_template(self, name: str, request) -> None:
        if not name or not name.strip():
            raise ValidationError("Template name must not be empty", field="name")
        self.template_store.save(name.strip(), _request_payload(request))

    def load_template(self, name: str) -> Optional[dict]:
        return self.template_store.load(name)

    def get_templates(self) -> Dict[str, dict]:
        return self.template_store.all()

    def __repr__(self):
        return f"SchedulingEngine({type(self.store).__name__})"


def _request_payload(request) -> dict:
    if isinstance(request, BaseModel):
        return request.model_dump(mode="json")
    if isinstance(request, dict):
        return dict(request)
    return {"value": repr(request)}

"""
Meditation system: the manager owning sessions, people and completion records.
"""

import threading
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import structlog

from ..config import MAX_SESSIONS, MAX_USERS, VERSION, SystemConfig
from ..core.enums import ResultStatus, SessionType
from ..core.exceptions import ValidationError
from ..core.identity import IdGenerator, uuid_generator
from ..core.interfaces import Session
from ..core.people import Instructor, Person, Practitioner
from ..core.results import CompletionRecord, OperationResult
from ..core.validation import coerce_text_value, require_email

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

# Session fields that update_session may change, all backed by validated setters.
UPDATABLE_SESSION_FIELDS = ('location', 'duration', 'instructor', 'difficulty')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MeditationSystem:
    """Registry of sessions and people with search, filter and statistics queries.

    The system is the only owner of its collections. Callers get references to
    individual entities (which validate their own mutations) or shallow copies
    of the collections, never the backing lists. Every public operation holds
    one re-entrant lock, so cross-entity operations are atomic for callers.
    """

    VERSION = VERSION
    MAX_SESSIONS = MAX_SESSIONS
    MAX_USERS = MAX_USERS

    def __init__(self, config: Optional[SystemConfig] = None,
                 id_generator: Optional[IdGenerator] = None,
                 clock: Optional[Clock] = None):
        self._config = config or SystemConfig()
        self._id_generator = id_generator or uuid_generator
        self._clock = clock or _utcnow
        self._sessions: List[Session] = []
        self._users: List[Person] = []
        self._completions: List[CompletionRecord] = []
        self._lock = threading.RLock()

    @property
    def config(self) -> SystemConfig:
        return self._config

    @property
    def max_sessions(self) -> int:
        return self._config.max_sessions

    @property
    def max_users(self) -> int:
        return self._config.max_users

    @property
    def id_generator(self) -> IdGenerator:
        return self._id_generator

    @staticmethod
    def is_valid_id(value: Any) -> bool:
        """Check that a value can be used as an entity id."""
        return isinstance(value, str) and len(value) > 0

    def generate_id(self) -> str:
        """Produce a new id from the injected generator."""
        return self._id_generator()

    # Sessions

    def add_session(self, session: Session) -> OperationResult:
        """Add a session unless the collection is full."""
        with self._lock:
            if not isinstance(session, Session):
                return OperationResult.fail(ResultStatus.INVALID_ENTITY, "Session must implement the Session interface")
            if len(self._sessions) >= self.max_sessions:
                logger.warning("session_rejected", reason="capacity_reached", limit=self.max_sessions)
                return OperationResult.fail(ResultStatus.CAPACITY_REACHED, "Session capacity reached")
            self._sessions.append(session)
            logger.debug("session_added", session_id=session.id, session_type=session.get_type())
            return OperationResult.ok("Session added", entity=session)

    def remove_session(self, session_id: str) -> OperationResult:
        """Remove a session by id. Instructors keep the dangling id."""
        with self._lock:
            for index, session in enumerate(self._sessions):
                if session.id == session_id:
                    removed = self._sessions.pop(index)
                    logger.debug("session_removed", session_id=session_id)
                    return OperationResult.ok("Session removed", entity=removed)
            return OperationResult.fail(ResultStatus.NOT_FOUND, "Session not found", session_id=session_id)

    def find_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return next((s for s in self._sessions if s.id == session_id), None)

    def get_all_sessions(self) -> List[Session]:
        """Snapshot of the session collection."""
        with self._lock:
            return self._sessions.copy()

    def update_session(self, session_id: str, **changes: Any) -> OperationResult:
        """Apply several field changes to a session, all or nothing.

        Raises ``ValidationError`` for an unknown field or an invalid value;
        in that case the session keeps every previous value.
        """
        unknown = sorted(set(changes) - set(UPDATABLE_SESSION_FIELDS))
        if unknown:
            raise ValidationError(
                f"Cannot update session fields: {', '.join(unknown)}",
                error_code="unknown_field",
                details={'field': unknown[0]}
            )
        with self._lock:
            session = self.find_session(session_id)
            if session is None:
                return OperationResult.fail(ResultStatus.NOT_FOUND, "Session not found", session_id=session_id)
            previous = {field: getattr(session, field) for field in changes}
            try:
                for field, value in changes.items():
                    setattr(session, field, value)
            except ValidationError:
                for field, value in previous.items():
                    setattr(session, field, value)
                raise
            return OperationResult.ok("Session updated", entity=session, fields=sorted(changes))

    def toggle_session(self, session_id: str) -> OperationResult:
        """Flip a session between active and inactive."""
        with self._lock:
            session = self.find_session(session_id)
            if session is None:
                return OperationResult.fail(ResultStatus.NOT_FOUND, "Session not found", session_id=session_id)
            return session.deactivate() if session.is_active else session.activate()

    def clear_inactive(self) -> int:
        """Remove every inactive session and return how many were removed."""
        with self._lock:
            kept = [s for s in self._sessions if s.is_active]
            removed = len(self._sessions) - len(kept)
            self._sessions[:] = kept
            if removed:
                logger.info("inactive_sessions_cleared", removed=removed)
            return removed

    # Search and filters. Each call is an independent scan over the current
    # sessions, or over `sessions` when given, so filters compose by chaining.

    def _source(self, sessions: Optional[Iterable[Session]]) -> List[Session]:
        return self._sessions.copy() if sessions is None else list(sessions)

    def search_by_name(self, query: str, sessions: Optional[Iterable[Session]] = None) -> List[Session]:
        """Case-insensitive substring match on the session name."""
        term = query.lower()
        with self._lock:
            return [s for s in self._source(sessions) if term in s.name.lower()]

    def filter_by_type(self, session_type: Union[str, SessionType],
                       sessions: Optional[Iterable[Session]] = None) -> List[Session]:
        tag = coerce_text_value(session_type)
        with self._lock:
            return [s for s in self._source(sessions) if s.get_type() == tag]

    def filter_by_status(self, active: bool, sessions: Optional[Iterable[Session]] = None) -> List[Session]:
        with self._lock:
            return [s for s in self._source(sessions) if s.is_active == active]

    def filter_by_difficulty(self, difficulty: Any, sessions: Optional[Iterable[Session]] = None) -> List[Session]:
        value = coerce_text_value(difficulty)
        with self._lock:
            return [s for s in self._source(sessions) if s.difficulty == value]

    def filter_by_duration(self, min_minutes: Real, max_minutes: Real,
                           sessions: Optional[Iterable[Session]] = None) -> List[Session]:
        """Sessions with ``min_minutes <= duration <= max_minutes``, in insertion order."""
        with self._lock:
            return [s for s in self._source(sessions) if min_minutes <= s.duration <= max_minutes]

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate counts and totals over the sessions in a single pass."""
        with self._lock:
            active = 0
            by_type: Dict[str, int] = {}
            by_difficulty: Dict[str, int] = {}
            total_minutes: Real = 0
            total_calories: Real = 0
            for session in self._sessions:
                if session.is_active:
                    active += 1
                session_type = session.get_type()
                by_type[session_type] = by_type.get(session_type, 0) + 1
                by_difficulty[session.difficulty] = by_difficulty.get(session.difficulty, 0) + 1
                total_minutes += session.duration
                total_calories += session.estimate_calories()
            total = len(self._sessions)
            return {
                'total': total,
                'active': active,
                'inactive': total - active,
                'by_type': by_type,
                'by_difficulty': by_difficulty,
                'total_minutes': total_minutes,
                'total_calories': total_calories,
                'users': len(self._users),
                'completed_sessions': len(self._completions),
            }

    # People

    def add_user(self, person: Person) -> OperationResult:
        """Register a person; emails are unique across the system."""
        with self._lock:
            if not isinstance(person, Person):
                return OperationResult.fail(ResultStatus.INVALID_ENTITY, "User must be a Person")
            if len(self._users) >= self.max_users:
                logger.warning("user_rejected", reason="capacity_reached", limit=self.max_users)
                return OperationResult.fail(ResultStatus.CAPACITY_REACHED, "User capacity reached")
            if self.find_user_by_email(person.email) is not None:
                logger.info("user_rejected", reason="duplicate_email", person_id=person.id)
                return OperationResult.fail(ResultStatus.DUPLICATE_EMAIL, "Email already registered",
                                            email=person.email)
            self._users.append(person)
            person._email_check = self._ensure_email_available
            logger.debug("user_added", person_id=person.id, role=person.role)
            return OperationResult.ok("User registered", entity=person)

    def remove_user(self, person_id: str) -> OperationResult:
        """Remove a person. Their completion records stay in the audit trail."""
        with self._lock:
            for index, person in enumerate(self._users):
                if person.id == person_id:
                    removed = self._users.pop(index)
                    removed._email_check = None
                    logger.debug("user_removed", person_id=person_id)
                    return OperationResult.ok("User removed", entity=removed)
            return OperationResult.fail(ResultStatus.NOT_FOUND, "User not found", person_id=person_id)

    def _ensure_email_available(self, person: Person, email: str) -> None:
        """Email hook installed on registered people; rejects an address someone else holds."""
        with self._lock:
            owner = self.find_user_by_email(email)
            if owner is not None and owner is not person:
                raise ValidationError(
                    "email is already registered",
                    error_code="duplicate_email",
                    details={'field': 'email', 'value': email}
                )

    def find_user(self, person_id: str) -> Optional[Person]:
        """Registered person by id. Assigning ``email`` on it keeps emails unique."""
        with self._lock:
            return next((p for p in self._users if p.id == person_id), None)

    def find_user_by_email(self, email: str) -> Optional[Person]:
        with self._lock:
            return next((p for p in self._users if p.email == email), None)

    def get_all_users(self) -> List[Person]:
        """Snapshot of the user collection."""
        with self._lock:
            return self._users.copy()

    def update_user_email(self, person_id: str, email: str) -> OperationResult:
        """Change a registered person's email, keeping emails unique."""
        require_email("email", email)
        with self._lock:
            person = self.find_user(person_id)
            if person is None:
                return OperationResult.fail(ResultStatus.NOT_FOUND, "User not found", person_id=person_id)
            owner = self.find_user_by_email(email)
            if owner is not None and owner is not person:
                return OperationResult.fail(ResultStatus.DUPLICATE_EMAIL, "Email already registered", email=email)
            person.email = email
            return OperationResult.ok("Email updated", entity=person)

    # Relationships

    def assign_instructor(self, instructor_id: str, session_id: str) -> OperationResult:
        """Make a registered instructor teach a registered session."""
        with self._lock:
            person = self.find_user(instructor_id)
            session = self.find_session(session_id)
            if person is None or session is None:
                return OperationResult.fail(ResultStatus.NOT_FOUND, "User or session not found",
                                            person_id=instructor_id, session_id=session_id)
            if not isinstance(person, Instructor):
                return OperationResult.fail(ResultStatus.INVALID_ROLE, "Only instructors can be assigned to sessions",
                                            role=person.role)
            person.assign_session(session)
            logger.debug("instructor_assigned", person_id=instructor_id, session_id=session_id)
            return OperationResult.ok("Instructor assigned", entity=session)

    def record_completed_session(self, person_id: str, session_id: str) -> OperationResult:
        """Record that a person completed a session.

        Only practitioners accumulate progress, but a completion record is
        appended for any registered person.
        """
        with self._lock:
            person = self.find_user(person_id)
            session = self.find_session(session_id)
            if person is None or session is None:
                return OperationResult.fail(ResultStatus.NOT_FOUND, "User or session not found",
                                            person_id=person_id, session_id=session_id)
            if isinstance(person, Practitioner):
                person.complete_session(session)
            record = CompletionRecord(person_id=person_id, session_id=session_id, completed_at=self._clock())
            self._completions.append(record)
            logger.debug("session_completed", person_id=person_id, session_id=session_id, role=person.role)
            return OperationResult.ok("Session recorded as completed", entity=record)

    def get_completions(self) -> List[CompletionRecord]:
        with self._lock:
            return self._completions.copy()

    def get_completions_for(self, person_id: str) -> List[CompletionRecord]:
        with self._lock:
            return [c for c in self._completions if c.person_id == person_id]

    # Bulk insertion

    def bulk_load(self, sessions: Iterable[Session] = (), people: Iterable[Person] = (),
                  completions: Iterable[CompletionRecord] = ()) -> OperationResult:
        """Insert previously saved entities under the usual capacity and email rules.

        Entities whose id is already present are skipped and reported.

        Completion records are appended as-is; they are an audit trail and
        are not replayed against practitioner progress. Items that are not
        ``CompletionRecord`` instances are reported by position.
        """
        with self._lock:
            rejected: Dict[str, List[Dict[str, Any]]] = {'sessions': [], 'users': [], 'completions': []}
            loaded_sessions = loaded_users = 0
            for session in sessions:
                if self.find_session(getattr(session, 'id', None)) is not None:
                    rejected['sessions'].append({'id': session.id, 'status': ResultStatus.DUPLICATE_ID.value})
                    continue
                result = self.add_session(session)
                if result.success:
                    loaded_sessions += 1
                else:
                    rejected['sessions'].append({'id': getattr(session, 'id', None), 'status': result.status.value})
            for person in people:
                if self.find_user(getattr(person, 'id', None)) is not None:
                    rejected['users'].append({'id': person.id, 'status': ResultStatus.DUPLICATE_ID.value})
                    continue
                result = self.add_user(person)
                if result.success:
                    loaded_users += 1
                else:
                    rejected['users'].append({'id': getattr(person, 'id', None), 'status': result.status.value})
            records = []
            for index, record in enumerate(completions):
                if isinstance(record, CompletionRecord):
                    records.append(record)
                else:
                    rejected['completions'].append({'index': index, 'status': ResultStatus.INVALID_ENTITY.value})
            self._completions.extend(records)
            logger.info("bulk_load_completed", sessions=loaded_sessions, users=loaded_users,
                        completions=len(records),
                        rejected=sum(len(items) for items in rejected.values()))
            return OperationResult.ok(
                "Bulk load completed",
                sessions=loaded_sessions,
                users=loaded_users,
                completions=len(records),
                rejected=rejected
            )

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(sessions={len(self._sessions)}, "
                f"users={len(self._users)}, completions={len(self._completions)})")

"""
Snapshot manager: JSON-compatible export and restore of a meditation system.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from ..core.enums import PersonRole, SessionType
from ..core.exceptions import SnapshotError, ValidationError
from ..core.people import PersonFactory
from ..core.results import CompletionRecord
from ..core.sessions import SessionFactory
from ..services.meditation_system import MeditationSystem

logger = structlog.get_logger(__name__)

SNAPSHOT_FORMAT = 1


class SessionRecord(BaseModel):
    """Stored session; variant fields are kept as extra keys."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    type: SessionType
    name: str
    location: str
    duration: float = Field(..., gt=0, allow_inf_nan=False)
    difficulty: str
    instructor: Optional[str] = None
    active: bool = True
    date_created: datetime
    updated_at: Optional[datetime] = None
    version: int = Field(default=1, ge=1)


class PersonRecord(BaseModel):
    """Stored person; role fields are kept as extra keys."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    role: PersonRole
    name: str
    email: str
    age: Optional[float] = Field(default=None, allow_inf_nan=False)
    phone: Optional[str] = None
    registration_date: datetime
    updated_at: Optional[datetime] = None
    version: int = Field(default=1, ge=1)


class CompletionRecordModel(BaseModel):
    person_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    completed_at: datetime


class SystemSnapshot(BaseModel):
    format: int = SNAPSHOT_FORMAT
    version: str
    created_at: datetime
    sessions: List[SessionRecord] = Field(default_factory=list)
    users: List[PersonRecord] = Field(default_factory=list)
    completions: List[CompletionRecordModel] = Field(default_factory=list)


def _entity_payload(record: BaseModel, raw: Dict[str, Any]) -> Dict[str, Any]:
    """Merge the validated common fields back over the raw record.

    Variant and role fields come from the raw record and are checked by the
    entity constructors. Numbers keep the type they were saved with (an
    ``int`` duration stays an ``int``); enum tags are unwrapped to their
    string value; timestamps and the active flag are the ones pydantic
    already parsed.
    """
    payload = dict(raw)
    for key in ('type', 'role'):
        if key in payload:
            payload[key] = getattr(record, key).value
    for key in ('date_created', 'registration_date', 'active'):
        if key in record.model_fields_set:
            payload[key] = getattr(record, key)
    return payload


class SnapshotManager:
    """Creates and restores plain-record snapshots of a MeditationSystem.

    Snapshots contain only JSON-compatible values; writing them to disk (or
    anywhere else) is up to the caller.
    """

    def __init__(self, system: MeditationSystem):
        self._system = system
        self._lock = threading.RLock()

    @property
    def system(self) -> MeditationSystem:
        return self._system

    def create_snapshot(self) -> Dict[str, Any]:
        """Export every session, user and completion record."""
        with self._lock:
            sessions = self._system.get_all_sessions()
            users = self._system.get_all_users()
            completions = self._system.get_completions()
            snapshot = {
                'format': SNAPSHOT_FORMAT,
                'version': self._system.config.version,
                'created_at': datetime.now(timezone.utc).isoformat(),
                'sessions': [session.to_dict() for session in sessions],
                'users': [person.to_dict() for person in users],
                'completions': [record.to_dict() for record in completions],
            }
            logger.info("snapshot_created", sessions=len(sessions), users=len(users),
                        completions=len(completions))
            return snapshot

    def restore_snapshot(self, data: Dict[str, Any],
                         system: Optional[MeditationSystem] = None) -> MeditationSystem:
        """Rebuild entities from a snapshot and bulk-load them.

        Entities keep their stored ids and timestamps. The target defaults to
        this manager's system; pass a fresh ``MeditationSystem`` to restore
        into an empty one. Raises ``SnapshotError`` if the snapshot is
        malformed or any record violates an entity rule.
        """
        target = system or self._system
        with self._lock:
            try:
                snapshot = SystemSnapshot.model_validate(data)
            except PydanticValidationError as e:
                raise SnapshotError(
                    "Snapshot does not match the expected structure",
                    error_code="invalid_snapshot",
                    details={'errors': e.errors(include_url=False)}
                )
            if snapshot.format != SNAPSHOT_FORMAT:
                raise SnapshotError(f"Unsupported snapshot format: {snapshot.format}",
                                    error_code="unsupported_format")

            try:
                sessions = [
                    self._restore_entity(SessionFactory, record, raw)
                    for record, raw in zip(snapshot.sessions, data.get('sessions', []))
                ]
                people = [
                    self._restore_entity(PersonFactory, record, raw)
                    for record, raw in zip(snapshot.users, data.get('users', []))
                ]
            except ValidationError as e:
                raise SnapshotError(
                    f"Snapshot contains an invalid record: {e.message}",
                    error_code="invalid_record",
                    details=e.details
                )
            completions = [
                CompletionRecord(c.person_id, c.session_id, c.completed_at)
                for c in snapshot.completions
            ]

            result = target.bulk_load(sessions=sessions, people=people, completions=completions)
            logger.info("snapshot_restored", **{k: v for k, v in result.metadata.items() if k != 'rejected'})
            return target

    @staticmethod
    def _restore_entity(factory, record: BaseModel, raw: Dict[str, Any]):
        entity = factory.from_info(_entity_payload(record, raw), keep_identity=True)
        entity._restore_lifecycle(record.updated_at, record.version)
        return entity

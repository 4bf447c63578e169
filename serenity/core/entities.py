"""
Base entity shared by the session and person hierarchies.
"""

from abc import ABC
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .identity import IdGenerator, uuid_generator


class AbstractEntity(ABC):
    """Base abstract entity with immutable identity, creation time and versioning."""
    
    def __init__(self, entity_id: Optional[str] = None,
                 id_generator: Optional[IdGenerator] = None,
                 created_at: Optional[datetime] = None):
        self._id = entity_id or (id_generator or uuid_generator)()
        self._created_at = created_at or datetime.now(timezone.utc)
        self._updated_at = self._created_at
        self._version = 1
    
    @property
    def id(self) -> str:
        """Get the entity ID."""
        return self._id
    
    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at
    
    @property
    def updated_at(self) -> datetime:
        """Get last update timestamp."""
        return self._updated_at
    
    @property
    def version(self) -> int:
        """Get current version."""
        return self._version
    
    def _touch(self) -> None:
        """Record a successful mutation."""
        self._updated_at = datetime.now(timezone.utc)
        self._version += 1
    
    def _restore_lifecycle(self, updated_at: Optional[datetime], version: Optional[int]) -> None:
        if updated_at is not None:
            self._updated_at = updated_at
        if version is not None:
            self._version = version
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary."""
        info = self.get_info()
        info.update({
            'updated_at': self._updated_at.isoformat(),
            'version': self._version,
        })
        return info
    
    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, version={self._version})"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept a datetime, an ISO-8601 string or None."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)

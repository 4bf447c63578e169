"""
Returned outcome values for manager and entity actions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from .enums import ResultStatus


@dataclass
class OperationResult:
    """Result of an action whose failure is an ordinary, expected outcome.
    
    Contract violations raise ``ValidationError`` instead; an
    ``OperationResult`` with ``success=False`` is something the caller
    branches on (not found, capacity reached, duplicate email, ...).
    """
    success: bool
    message: str
    status: ResultStatus = ResultStatus.OK
    entity: Any = None
    metadata: Dict[str, Any] = None
    
    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}
    
    @classmethod
    def ok(cls, message: str, entity: Any = None, **metadata) -> 'OperationResult':
        return cls(success=True, message=message, status=ResultStatus.OK,
                   entity=entity, metadata=metadata)
    
    @classmethod
    def fail(cls, status: ResultStatus, message: str, **metadata) -> 'OperationResult':
        return cls(success=False, message=message, status=status, metadata=metadata)
    
    def __bool__(self) -> bool:
        return self.success
    
    def to_dict(self) -> Dict[str, Any]:
        """Plain record for presentation layers."""
        return {
            'success': self.success,
            'message': self.message,
            'status': self.status.value,
        }


@dataclass(frozen=True)
class CompletionRecord:
    """Immutable audit entry: a person completed a session at a point in time."""
    person_id: str
    session_id: str
    completed_at: datetime
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'person_id': self.person_id,
            'session_id': self.session_id,
            'completed_at': self.completed_at.isoformat(),
        }

"""
Capability sets required of entities used by the manager and by
cross-entity operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class Describable(ABC):
    """Interface for entities that project a plain, JSON-compatible snapshot."""
    
    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Return a snapshot of the public and variant-specific fields."""
        pass


class Session(Describable):
    """Capability set of a practice session.
    
    Anything passed to ``Practitioner.complete_session``,
    ``Instructor.assign_session`` or ``MeditationSystem.add_session`` must
    implement this interface.
    """
    
    @property
    @abstractmethod
    def id(self) -> str:
        pass
    
    @property
    @abstractmethod
    def name(self) -> str:
        pass
    
    @property
    @abstractmethod
    def duration(self) -> float:
        """Duration in minutes."""
        pass
    
    @property
    @abstractmethod
    def difficulty(self) -> str:
        pass
    
    @property
    @abstractmethod
    def is_active(self) -> bool:
        pass
    
    @abstractmethod
    def estimate_calories(self) -> float:
        """Estimate the calories burned over the whole session."""
        pass
    
    @abstractmethod
    def activate(self) -> 'OperationResult':
        """Move the session to the active state."""
        pass
    
    @abstractmethod
    def deactivate(self) -> 'OperationResult':
        """Move the session to the inactive state."""
        pass
    
    @abstractmethod
    def get_type(self) -> str:
        """Return the variant tag."""
        pass

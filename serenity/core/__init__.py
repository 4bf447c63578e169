"""
Core module containing the session and person object model.
"""

from .entities import *
from .sessions import *
from .people import *
from .interfaces import *
from .results import *
from .identity import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "AbstractEntity",
    "MeditationSession",
    "GuidedMeditation",
    "BreathingExercise",
    "YogaSession",
    "MindfulnessExercise",
    "SessionFactory",
    "Person",
    "Practitioner",
    "Instructor",
    "PersonFactory",
    
    # Interfaces and results
    "Describable",
    "Session",
    "OperationResult",
    "CompletionRecord",
    "IdGenerator",
    "SequentialIdGenerator",
    "uuid_generator",
    
    # Enums
    "SessionType",
    "PersonRole",
    "Difficulty",
    "Theme",
    "Sense",
    "MembershipType",
    "PractitionerLevel",
    "ResultStatus",
    
    # Exceptions
    "SerenityException",
    "ValidationError",
    "ConfigurationError",
    "SnapshotError",
]

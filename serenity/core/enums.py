"""
Enumerations and constants for the Serenity platform.
"""

from enum import Enum


class SessionType(Enum):
    """Variant tags of the session hierarchy."""
    GUIDED_MEDITATION = "GuidedMeditation"
    BREATHING_EXERCISE = "BreathingExercise"
    YOGA_SESSION = "YogaSession"
    MINDFULNESS_EXERCISE = "MindfulnessExercise"


class PersonRole(Enum):
    """Variant tags of the person hierarchy."""
    PRACTITIONER = "Practitioner"
    INSTRUCTOR = "Instructor"


class Difficulty(Enum):
    """Suggested difficulty labels. Sessions also accept free text."""
    BEGINNER = "Principiante"
    INTERMEDIATE = "Intermedio"
    ADVANCED = "Avanzado"


class Theme(Enum):
    """Themes a guided meditation can address."""
    ANXIETY = "Anxiety"
    SLEEP = "Sleep"
    FOCUS = "Focus"
    STRESS = "Stress"
    GRATITUDE = "Gratitude"


class Sense(Enum):
    """Senses a mindfulness exercise can involve."""
    SIGHT = "Sight"
    HEARING = "Hearing"
    TOUCH = "Touch"
    SMELL = "Smell"
    TASTE = "Taste"


class MembershipType(Enum):
    """Practitioner membership tiers."""
    BASIC = "Basic"
    PREMIUM = "Premium"
    ELITE = "Elite"


class PractitionerLevel(Enum):
    """Progress levels derived from accumulated practice minutes."""
    NOVICE = "Novice"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    MASTER = "Master"


class ResultStatus(Enum):
    """Outcome kinds carried by an OperationResult."""
    OK = "ok"
    NOT_FOUND = "not_found"
    CAPACITY_REACHED = "capacity_reached"
    DUPLICATE_EMAIL = "duplicate_email"
    DUPLICATE_ID = "duplicate_id"
    ALREADY_IN_STATE = "already_in_state"
    INVALID_ENTITY = "invalid_entity"
    INVALID_ROLE = "invalid_role"


# Practice-minute thresholds (exclusive upper bounds) for each level.
LEVEL_THRESHOLDS = (
    (100, PractitionerLevel.NOVICE),
    (500, PractitionerLevel.INTERMEDIATE),
    (1000, PractitionerLevel.ADVANCED),
)

DEFAULT_INSTRUCTOR = "unassigned"
DEFAULT_DIFFICULTY = Difficulty.BEGINNER.value

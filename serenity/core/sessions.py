"""
Session hierarchy: the abstract meditation session and its four variants.
"""

from datetime import datetime
from numbers import Real
from typing import Any, Dict, List, Optional, Type, Union

from .entities import AbstractEntity, parse_timestamp
from .enums import DEFAULT_DIFFICULTY, DEFAULT_INSTRUCTOR, Difficulty, ResultStatus, Sense, SessionType, Theme
from .exceptions import ValidationError
from .identity import IdGenerator
from .interfaces import Session
from .results import OperationResult
from .validation import (
    coerce_text_value, optional_text, require_choice, require_non_empty,
    require_non_negative_number, require_positive_int, require_positive_number
)


class MeditationSession(AbstractEntity, Session):
    """Abstract base class for every kind of practice session.

    Identity (``id``, ``name``, creation date) is fixed at construction;
    ``location``, ``duration``, ``difficulty`` and ``instructor`` change only
    through validated setters, and ``active`` only through ``activate`` /
    ``deactivate``.
    """

    SESSION_TYPE: SessionType
    CALORIES_PER_MINUTE = 3

    def __init__(self, name: str, location: str, duration: Real = 10,
                 difficulty: Union[str, Difficulty] = DEFAULT_DIFFICULTY, **kwargs):
        super().__init__(**kwargs)
        self._name = require_non_empty("name", name)
        self._location = require_non_empty("location", location)
        self._duration = require_positive_number("duration", duration)
        self._difficulty = require_non_empty("difficulty", coerce_text_value(difficulty))
        self._active = True
        self._instructor = DEFAULT_INSTRUCTOR

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def date_created(self) -> datetime:
        return self._created_at

    @property
    def location(self) -> str:
        return self._location

    @location.setter
    def location(self, value: str) -> None:
        self._location = require_non_empty("location", value)
        self._touch()

    @property
    def duration(self) -> Real:
        """Duration in minutes."""
        return self._duration

    @duration.setter
    def duration(self, value: Real) -> None:
        self._duration = require_positive_number("duration", value)
        self._touch()

    @property
    def difficulty(self) -> str:
        return self._difficulty

    @difficulty.setter
    def difficulty(self, value: Union[str, Difficulty]) -> None:
        self._difficulty = require_non_empty("difficulty", coerce_text_value(value))
        self._touch()

    @property
    def instructor(self) -> str:
        return self._instructor

    @instructor.setter
    def instructor(self, value: str) -> None:
        self._instructor = require_non_empty("instructor", value)
        self._touch()

    def activate(self) -> OperationResult:
        """Activate the session; reports instead of failing when already active."""
        if self._active:
            return OperationResult.fail(ResultStatus.ALREADY_IN_STATE, "Session is already active")
        self._active = True
        self._touch()
        return OperationResult.ok("Session activated", entity=self)

    def deactivate(self) -> OperationResult:
        """Deactivate the session; reports instead of failing when already inactive."""
        if not self._active:
            return OperationResult.fail(ResultStatus.ALREADY_IN_STATE, "Session is already inactive")
        self._active = False
        self._touch()
        return OperationResult.ok("Session deactivated", entity=self)

    def get_type(self) -> str:
        return self.SESSION_TYPE.value

    def estimate_calories(self) -> Real:
        """Estimated kcal for the whole session at the variant's per-minute rate."""
        return self._duration * self.CALORIES_PER_MINUTE

    def _common_info(self) -> Dict[str, Any]:
        return {
            'id': self._id,
            'name': self._name,
            'type': self.get_type(),
            'location': self._location,
            'duration': self._duration,
            'difficulty': self._difficulty,
            'instructor': self._instructor,
            'active': self._active,
            'calories': self.estimate_calories(),
            'date_created': self._created_at.isoformat(),
        }

    @classmethod
    def _variant_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        """Constructor arguments specific to the variant, read from a projection."""
        return {}

    def _restore_state(self, info: Dict[str, Any]) -> None:
        """Re-apply mutable state that the constructor does not accept."""
        instructor = info.get('instructor')
        if instructor is not None and instructor != DEFAULT_INSTRUCTOR:
            self._instructor = require_non_empty("instructor", instructor)
        if info.get('active') is False:
            self._active = False

    @classmethod
    def from_info(cls, info: Dict[str, Any], *, id_generator: Optional[IdGenerator] = None,
                  keep_identity: bool = False) -> 'MeditationSession':
        """Build a session of this variant from a ``get_info()``-shaped record.

        A fresh id and creation date are assigned unless ``keep_identity`` is
        set, in which case the record's ``id`` and ``date_created`` are reused.
        """
        identity: Dict[str, Any] = {'id_generator': id_generator}
        if keep_identity:
            identity['entity_id'] = info.get('id')
            identity['created_at'] = parse_timestamp(info.get('date_created'))
        session = cls(
            info.get('name'),
            info.get('location'),
            info.get('duration', 10),
            info.get('difficulty', DEFAULT_DIFFICULTY),
            **cls._variant_kwargs(info),
            **identity
        )
        session._restore_state(info)
        return session


class GuidedMeditation(MeditationSession):
    """Voice-guided meditation around a theme."""

    SESSION_TYPE = SessionType.GUIDED_MEDITATION

    def __init__(self, name: str, location: str, duration: Real = 10,
                 difficulty: Union[str, Difficulty] = DEFAULT_DIFFICULTY,
                 theme: Union[str, Theme] = Theme.FOCUS, voice_guide: Optional[str] = None,
                 background_music: Optional[str] = None, **kwargs):
        super().__init__(name, location, duration, difficulty, **kwargs)
        self._theme = require_choice("theme", theme, Theme)
        self._voice_guide = optional_text("voice_guide", voice_guide)
        self._background_music = optional_text("background_music", background_music)

    @property
    def theme(self) -> str:
        return self._theme

    @theme.setter
    def theme(self, value: Union[str, Theme]) -> None:
        self._theme = require_choice("theme", value, Theme)
        self._touch()

    @property
    def voice_guide(self) -> Optional[str]:
        return self._voice_guide

    @property
    def background_music(self) -> Optional[str]:
        return self._background_music

    def get_info(self) -> Dict[str, Any]:
        info = self._common_info()
        info.update({
            'theme': self._theme,
            'voice_guide': self._voice_guide,
            'background_music': self._background_music,
        })
        return info

    @classmethod
    def _variant_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'theme': info.get('theme', Theme.FOCUS),
            'voice_guide': info.get('voice_guide'),
            'background_music': info.get('background_music'),
        }


class BreathingExercise(MeditationSession):
    """Paced breathing in repeated inhale / hold / exhale cycles."""

    SESSION_TYPE = SessionType.BREATHING_EXERCISE

    def __init__(self, name: str, location: str, duration: Real = 10,
                 difficulty: Union[str, Difficulty] = DEFAULT_DIFFICULTY,
                 technique: str = "Box Breathing", cycles: int = 10,
                 inhale_seconds: Real = 4, hold_seconds: Real = 4, exhale_seconds: Real = 4,
                 **kwargs):
        super().__init__(name, location, duration, difficulty, **kwargs)
        self._technique = require_non_empty("technique", technique)
        self._cycles = require_positive_int("cycles", cycles)
        self._inhale_seconds = require_non_negative_number("inhale_seconds", inhale_seconds)
        self._hold_seconds = require_non_negative_number("hold_seconds", hold_seconds)
        self._exhale_seconds = require_non_negative_number("exhale_seconds", exhale_seconds)

    @property
    def technique(self) -> str:
        return self._technique

    @property
    def cycles(self) -> int:
        return self._cycles

    @cycles.setter
    def cycles(self, value: int) -> None:
        self._cycles = require_positive_int("cycles", value)
        self._touch()

    @property
    def inhale_seconds(self) -> Real:
        return self._inhale_seconds

    @property
    def hold_seconds(self) -> Real:
        return self._hold_seconds

    @property
    def exhale_seconds(self) -> Real:
        return self._exhale_seconds

    @property
    def pattern(self) -> str:
        """Breathing pattern as ``inhale-hold-exhale`` seconds, e.g. ``4-7-8``."""
        return f"{self._inhale_seconds}-{self._hold_seconds}-{self._exhale_seconds}"

    def set_pattern(self, inhale_seconds: Real, hold_seconds: Real, exhale_seconds: Real) -> None:
        """Replace all three phases; nothing changes if any phase is invalid."""
        inhale = require_non_negative_number("inhale_seconds", inhale_seconds)
        hold = require_non_negative_number("hold_seconds", hold_seconds)
        exhale = require_non_negative_number("exhale_seconds", exhale_seconds)
        self._inhale_seconds, self._hold_seconds, self._exhale_seconds = inhale, hold, exhale
        self._touch()

    def cycle_duration(self) -> Real:
        """Seconds taken by a single breathing cycle."""
        return self._inhale_seconds + self._hold_seconds + self._exhale_seconds

    def get_info(self) -> Dict[str, Any]:
        info = self._common_info()
        info.update({
            'technique': self._technique,
            'cycles': self._cycles,
            'inhale_seconds': self._inhale_seconds,
            'hold_seconds': self._hold_seconds,
            'exhale_seconds': self._exhale_seconds,
            'pattern': self.pattern,
            'cycle_duration': self.cycle_duration(),
        })
        return info

    @classmethod
    def _variant_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'technique': info.get('technique', "Box Breathing"),
            'cycles': info.get('cycles', 10),
            'inhale_seconds': info.get('inhale_seconds', 4),
            'hold_seconds': info.get('hold_seconds', 4),
            'exhale_seconds': info.get('exhale_seconds', 4),
        }


class YogaSession(MeditationSession):
    """Yoga class built from an ordered sequence of poses."""

    SESSION_TYPE = SessionType.YOGA_SESSION
    CALORIES_PER_MINUTE = 5

    def __init__(self, name: str, location: str, duration: Real = 10,
                 difficulty: Union[str, Difficulty] = DEFAULT_DIFFICULTY,
                 style: str = "Hatha", focus_area: Optional[str] = None,
                 equipment: str = "None", **kwargs):
        super().__init__(name, location, duration, difficulty, **kwargs)
        self._style = require_non_empty("style", style)
        self._focus_area = optional_text("focus_area", focus_area)
        self._equipment = require_non_empty("equipment", equipment)
        self._poses: List[str] = []

    @property
    def style(self) -> str:
        return self._style

    @property
    def focus_area(self) -> Optional[str]:
        return self._focus_area

    @property
    def equipment(self) -> str:
        return self._equipment

    @property
    def poses(self) -> List[str]:
        return self._poses.copy()

    def add_pose(self, pose: str) -> None:
        """Append a pose to the sequence."""
        self._poses.append(require_non_empty("pose", pose))
        self._touch()

    def get_info(self) -> Dict[str, Any]:
        info = self._common_info()
        info.update({
            'style': self._style,
            'poses': self._poses.copy(),
            'poses_count': len(self._poses),
            'focus_area': self._focus_area,
            'equipment': self._equipment,
        })
        return info

    @classmethod
    def _variant_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'style': info.get('style', "Hatha"),
            'focus_area': info.get('focus_area'),
            'equipment': info.get('equipment', "None"),
        }

    def _restore_state(self, info: Dict[str, Any]) -> None:
        super()._restore_state(info)
        for pose in info.get('poses') or []:
            self._poses.append(require_non_empty("pose", pose))


class MindfulnessExercise(MeditationSession):
    """Attention practice anchored on one or more senses."""

    SESSION_TYPE = SessionType.MINDFULNESS_EXERCISE

    def __init__(self, name: str, location: str, duration: Real = 10,
                 difficulty: Union[str, Difficulty] = DEFAULT_DIFFICULTY,
                 practice: str = "Body Scan", environment: Optional[str] = None, **kwargs):
        super().__init__(name, location, duration, difficulty, **kwargs)
        self._practice = require_non_empty("practice", practice)
        self._environment = optional_text("environment", environment)
        self._senses_involved: List[str] = []

    @property
    def practice(self) -> str:
        return self._practice

    @property
    def environment(self) -> Optional[str]:
        return self._environment

    @property
    def senses_involved(self) -> List[str]:
        return self._senses_involved.copy()

    def add_sense(self, sense: Union[str, Sense]) -> None:
        """Add a sense to the exercise. Senses already present are ignored."""
        value = require_choice("sense", sense, Sense)
        if value not in self._senses_involved:
            self._senses_involved.append(value)
            self._touch()

    def get_info(self) -> Dict[str, Any]:
        info = self._common_info()
        info.update({
            'practice': self._practice,
            'senses_involved': self._senses_involved.copy(),
            'environment': self._environment,
        })
        return info

    @classmethod
    def _variant_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'practice': info.get('practice', "Body Scan"),
            'environment': info.get('environment'),
        }

    def _restore_state(self, info: Dict[str, Any]) -> None:
        super()._restore_state(info)
        for sense in info.get('senses_involved') or []:
            value = require_choice("sense", sense, Sense)
            if value not in self._senses_involved:
                self._senses_involved.append(value)


class SessionFactory:
    """Factory rebuilding sessions from their variant tag."""

    _registry: Dict[str, Type[MeditationSession]] = {
        variant.SESSION_TYPE.value: variant
        for variant in (GuidedMeditation, BreathingExercise, YogaSession, MindfulnessExercise)
    }

    @classmethod
    def variant_for(cls, session_type: Union[str, SessionType]) -> Type[MeditationSession]:
        """Look up the concrete class for a variant tag."""
        tag = coerce_text_value(session_type)
        try:
            return cls._registry[tag]
        except KeyError:
            raise ValidationError(
                f"Unsupported session type: {tag}",
                error_code="invalid_choice",
                details={'field': 'type', 'value': tag}
            )

    @classmethod
    def from_info(cls, info: Dict[str, Any], **kwargs) -> MeditationSession:
        return cls.variant_for(info.get('type')).from_info(info, **kwargs)

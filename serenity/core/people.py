"""
Person hierarchy: registered people and their two roles.
"""

from datetime import datetime
from numbers import Real
from typing import Any, Callable, Dict, List, Optional, Type, Union

from .entities import AbstractEntity, parse_timestamp
from .enums import LEVEL_THRESHOLDS, MembershipType, PersonRole, PractitionerLevel
from .exceptions import ValidationError
from .identity import IdGenerator
from .interfaces import Describable, Session
from .validation import (
    coerce_text_value, optional_text, require_choice, require_email, require_instance,
    require_non_empty, require_non_negative_int, require_non_negative_number,
    require_number_in_range
)

MIN_AGE, MAX_AGE = 0, 120
MIN_RATING, MAX_RATING = 1, 5


class Person(AbstractEntity, Describable):
    """Abstract base class for all persons in the system."""

    ROLE: PersonRole

    def __init__(self, name: str, email: str, age: Optional[Real] = None,
                 phone: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self._name = require_non_empty("name", name)
        self._email = require_email("email", email)
        self._age = require_number_in_range("age", age, MIN_AGE, MAX_AGE, allow_none=True)
        self._phone = optional_text("phone", phone)
        self._email_check: Optional[Callable[["Person", str], None]] = None

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = require_non_empty("name", value)
        self._touch()

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: str) -> None:
        email = require_email("email", value)
        if self._email_check is not None:
            self._email_check(self, email)
        self._email = email
        self._touch()

    @property
    def age(self) -> Optional[Real]:
        return self._age

    @age.setter
    def age(self, value: Optional[Real]) -> None:
        self._age = require_number_in_range("age", value, MIN_AGE, MAX_AGE, allow_none=True)
        self._touch()

    @property
    def phone(self) -> Optional[str]:
        return self._phone

    @phone.setter
    def phone(self, value: Optional[str]) -> None:
        self._phone = optional_text("phone", value)
        self._touch()

    @property
    def registration_date(self) -> datetime:
        return self._created_at

    @property
    def role(self) -> str:
        return self.ROLE.value

    def get_info(self) -> Dict[str, Any]:
        """Contact and identity fields shared by every role."""
        return {
            'id': self._id,
            'name': self._name,
            'email': self._email,
            'age': self._age,
            'phone': self._phone,
            'registration_date': self._created_at.isoformat(),
            'role': self.role,
        }

    @classmethod
    def _role_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    def _restore_state(self, info: Dict[str, Any]) -> None:
        pass

    @classmethod
    def from_info(cls, info: Dict[str, Any], *, id_generator: Optional[IdGenerator] = None,
                  keep_identity: bool = False) -> 'Person':
        """Build a person of this role from a ``get_info()``-shaped record."""
        identity: Dict[str, Any] = {'id_generator': id_generator}
        if keep_identity:
            identity['entity_id'] = info.get('id')
            identity['created_at'] = parse_timestamp(info.get('registration_date'))
        person = cls(
            info.get('name'),
            info.get('email'),
            info.get('age'),
            info.get('phone'),
            **cls._role_kwargs(info),
            **identity
        )
        person._restore_state(info)
        return person


class Practitioner(Person):
    """Person who practices sessions and accumulates progress."""

    ROLE = PersonRole.PRACTITIONER

    def __init__(self, name: str, email: str, age: Optional[Real] = None,
                 phone: Optional[str] = None,
                 membership_type: Union[str, MembershipType] = MembershipType.BASIC, **kwargs):
        super().__init__(name, email, age, phone, **kwargs)
        self._membership_type = require_choice("membership_type", membership_type, MembershipType)
        self._sessions_completed = 0
        self._total_minutes: Real = 0
        self._favorite_type: Optional[str] = None
        self._goals: List[str] = []

    @property
    def membership_type(self) -> str:
        return self._membership_type

    @membership_type.setter
    def membership_type(self, value: Union[str, MembershipType]) -> None:
        self._membership_type = require_choice("membership_type", value, MembershipType)
        self._touch()

    @property
    def sessions_completed(self) -> int:
        return self._sessions_completed

    @property
    def total_minutes(self) -> Real:
        return self._total_minutes

    @property
    def favorite_type(self) -> Optional[str]:
        """Variant tag of the most recently completed session."""
        return self._favorite_type

    @property
    def goals(self) -> List[str]:
        return self._goals.copy()

    def complete_session(self, session: Session) -> None:
        """Count a completed session towards this practitioner's progress."""
        require_instance("session", session, Session)
        self._sessions_completed += 1
        self._total_minutes += session.duration
        self._favorite_type = session.get_type()
        self._touch()

    def add_goal(self, goal: str) -> None:
        """Add a personal goal."""
        self._goals.append(require_non_empty("goal", goal))
        self._touch()

    def get_level(self) -> str:
        """Classify progress by accumulated minutes."""
        for upper_bound, level in LEVEL_THRESHOLDS:
            if self._total_minutes < upper_bound:
                return level.value
        return PractitionerLevel.MASTER.value

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info.update({
            'membership_type': self._membership_type,
            'sessions_completed': self._sessions_completed,
            'total_minutes': self._total_minutes,
            'level': self.get_level(),
            'favorite_type': self._favorite_type,
            'goals': self._goals.copy(),
        })
        return info

    @classmethod
    def _role_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {'membership_type': info.get('membership_type', MembershipType.BASIC)}

    def _restore_state(self, info: Dict[str, Any]) -> None:
        for goal in info.get('goals') or []:
            self._goals.append(require_non_empty("goal", goal))
        self._sessions_completed = require_non_negative_int(
            "sessions_completed", info.get('sessions_completed', 0))
        self._total_minutes = require_non_negative_number("total_minutes", info.get('total_minutes', 0))
        self._favorite_type = info.get('favorite_type')


class Instructor(Person):
    """Person who teaches sessions."""

    ROLE = PersonRole.INSTRUCTOR

    def __init__(self, name: str, email: str, age: Optional[Real] = None,
                 phone: Optional[str] = None, specialty: str = "General",
                 experience: Real = 0, **kwargs):
        super().__init__(name, email, age, phone, **kwargs)
        self._specialty = require_non_empty("specialty", specialty)
        self._experience = require_non_negative_number("experience", experience)
        self._certifications: List[str] = []
        self._sessions_teaching: List[str] = []
        self._rating: Optional[Real] = None

    @property
    def specialty(self) -> str:
        return self._specialty

    @property
    def experience(self) -> Real:
        """Years of teaching experience."""
        return self._experience

    @experience.setter
    def experience(self, value: Real) -> None:
        self._experience = require_non_negative_number("experience", value)
        self._touch()

    @property
    def certifications(self) -> List[str]:
        return self._certifications.copy()

    @property
    def sessions_teaching(self) -> List[str]:
        """Ids of assigned sessions. Ids of removed sessions are kept as-is."""
        return self._sessions_teaching.copy()

    @property
    def rating(self) -> Optional[Real]:
        return self._rating

    def add_certification(self, certification: str) -> None:
        """Add a certification."""
        self._certifications.append(require_non_empty("certification", certification))
        self._touch()

    def assign_session(self, session: Session) -> None:
        """Take over a session: record its id and set its instructor to this person."""
        require_instance("session", session, Session)
        session.instructor = self._name
        self._sessions_teaching.append(session.id)
        self._touch()

    def update_rating(self, rating: Real) -> None:
        """Replace the current rating. Previous ratings are not kept."""
        self._rating = require_number_in_range("rating", rating, MIN_RATING, MAX_RATING)
        self._touch()

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info.update({
            'specialty': self._specialty,
            'certifications': self._certifications.copy(),
            'sessions_teaching': self._sessions_teaching.copy(),
            'sessions_count': len(self._sessions_teaching),
            'rating': self._rating,
            'experience': self._experience,
        })
        return info

    @classmethod
    def _role_kwargs(cls, info: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'specialty': info.get('specialty', "General"),
            'experience': info.get('experience', 0),
        }

    def _restore_state(self, info: Dict[str, Any]) -> None:
        for certification in info.get('certifications') or []:
            self._certifications.append(require_non_empty("certification", certification))
        for session_id in info.get('sessions_teaching') or []:
            self._sessions_teaching.append(require_non_empty("session_id", session_id))
        rating = info.get('rating')
        if rating is not None:
            self._rating = require_number_in_range("rating", rating, MIN_RATING, MAX_RATING)


class PersonFactory:
    """Factory rebuilding people from their role tag."""

    _registry: Dict[str, Type[Person]] = {
        role.ROLE.value: role for role in (Practitioner, Instructor)
    }

    @classmethod
    def role_for(cls, role: Union[str, PersonRole]) -> Type[Person]:
        tag = coerce_text_value(role)
        try:
            return cls._registry[tag]
        except KeyError:
            raise ValidationError(
                f"Unsupported person role: {tag}",
                error_code="invalid_choice",
                details={'field': 'role', 'value': tag}
            )

    @classmethod
    def from_info(cls, info: Dict[str, Any], **kwargs) -> Person:
        return cls.role_for(info.get('role')).from_info(info, **kwargs)

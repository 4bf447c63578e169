"""Shared fixtures: deterministic ids and clock, a fresh system, sample entities."""

from datetime import datetime, timezone

import pytest

from serenity.config import SystemConfig
from serenity.core.identity import SequentialIdGenerator
from serenity.core.people import Instructor, Practitioner
from serenity.core.sessions import BreathingExercise, GuidedMeditation, MindfulnessExercise, YogaSession
from serenity.services import MeditationSystem

FIXED_NOW = datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def ids() -> SequentialIdGenerator:
    return SequentialIdGenerator("test")


@pytest.fixture
def system(ids: SequentialIdGenerator) -> MeditationSystem:
    return MeditationSystem(SystemConfig(), id_generator=ids, clock=lambda: FIXED_NOW)


@pytest.fixture
def guided(ids: SequentialIdGenerator) -> GuidedMeditation:
    return GuidedMeditation("Morning Calm", "Main Room", 20, "Principiante", "Focus",
                            "Female", "Nature", id_generator=ids)


@pytest.fixture
def breathing(ids: SequentialIdGenerator) -> BreathingExercise:
    return BreathingExercise("Relaxing Breath", "Quiet Room", 15, "Avanzado", "4-7-8", 8, 4, 7, 8,
                             id_generator=ids)


@pytest.fixture
def yoga(ids: SequentialIdGenerator) -> YogaSession:
    return YogaSession("Hatha Basics", "Zen Studio", 45, "Principiante", "Hatha", "Full body", "Mat",
                       id_generator=ids)


@pytest.fixture
def mindfulness(ids: SequentialIdGenerator) -> MindfulnessExercise:
    return MindfulnessExercise("Body Scan", "Relaxation Room", 25, "Intermedio", "Body Scan", "Quiet",
                               id_generator=ids)


@pytest.fixture
def practitioner(ids: SequentialIdGenerator) -> Practitioner:
    return Practitioner("Ana Garcia", "ana@example.com", 28, "555-0101", "Premium", id_generator=ids)


@pytest.fixture
def instructor(ids: SequentialIdGenerator) -> Instructor:
    return Instructor("Maria Lopez", "maria@example.com", 42, "555-0201", "Mindfulness", 15,
                      id_generator=ids)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW

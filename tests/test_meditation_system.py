"""
Tests for the manager in `serenity/services/meditation_system.py`.

Covers:
- Session CRUD with capacity limits and defensive snapshots
- Search and filters, including chained composition
- Single-pass statistics
- User registration with unique emails
- Cross-entity operations (instructor assignment, completions)
- Bulk loading
"""

import threading

import pytest

from serenity.config import SystemConfig
from serenity.core.enums import ResultStatus, SessionType
from serenity.core.exceptions import ValidationError
from serenity.core.people import Instructor, Practitioner
from serenity.core.results import CompletionRecord
from serenity.core.sessions import BreathingExercise, GuidedMeditation, MindfulnessExercise, YogaSession
from serenity.services import MeditationSystem


EMPTY_STATS = {
    'total': 0,
    'active': 0,
    'inactive': 0,
    'by_type': {},
    'by_difficulty': {},
    'total_minutes': 0,
    'total_calories': 0,
    'users': 0,
    'completed_sessions': 0,
}


@pytest.fixture
def populated(system, guided, breathing, yoga, mindfulness):
    for session in (guided, breathing, yoga, mindfulness):
        system.add_session(session)
    return system


class TestSessions:

    def test_add_returns_stored_entity(self, system, guided) -> None:
        result = system.add_session(guided)
        assert result.success
        assert result.status == ResultStatus.OK
        assert result.entity is guided
        assert system.find_session(guided.id) is guided

    def test_add_rejects_non_sessions(self, system) -> None:
        result = system.add_session({'name': "fake"})
        assert not result.success
        assert result.status == ResultStatus.INVALID_ENTITY

    def test_capacity(self) -> None:
        system = MeditationSystem(SystemConfig(max_sessions=2))
        assert system.add_session(YogaSession("A", "Room")).success
        assert system.add_session(YogaSession("B", "Room")).success
        result = system.add_session(YogaSession("C", "Room"))
        assert result.status == ResultStatus.CAPACITY_REACHED
        assert len(system.get_all_sessions()) == 2

    def test_default_limits(self, system) -> None:
        assert MeditationSystem.MAX_SESSIONS == 1000
        assert MeditationSystem.MAX_USERS == 500
        assert system.max_sessions == 1000
        assert system.max_users == 500

    def test_remove(self, populated, yoga) -> None:
        result = populated.remove_session(yoga.id)
        assert result.success
        assert result.entity is yoga
        assert populated.find_session(yoga.id) is None
        missing = populated.remove_session(yoga.id)
        assert missing.status == ResultStatus.NOT_FOUND

    def test_find_missing_returns_none(self, system) -> None:
        assert system.find_session("nope") is None

    def test_snapshot_is_structurally_independent(self, populated, guided) -> None:
        snapshot = populated.get_all_sessions()
        snapshot.clear()
        assert len(populated.get_all_sessions()) == 4
        populated.get_all_sessions()[0].location = "Garden"
        assert guided.location == "Garden"

    def test_update_session_all_or_nothing(self, populated, guided) -> None:
        with pytest.raises(ValidationError):
            populated.update_session(guided.id, location="Garden", duration=-1)
        assert guided.location == "Main Room"
        assert guided.duration == 20
        result = populated.update_session(guided.id, location="Garden", duration=25)
        assert result.success
        assert (guided.location, guided.duration) == ("Garden", 25)

    def test_update_session_unknown_field(self, populated, guided) -> None:
        with pytest.raises(ValidationError, match="name"):
            populated.update_session(guided.id, name="Renamed")

    def test_update_missing_session(self, system) -> None:
        assert system.update_session("nope", location="Room").status == ResultStatus.NOT_FOUND

    def test_toggle_and_clear_inactive(self, populated, yoga, breathing) -> None:
        assert populated.toggle_session(yoga.id).success
        assert yoga.is_active is False
        populated.toggle_session(breathing.id)
        assert populated.clear_inactive() == 2
        assert [s.id for s in populated.get_all_sessions()] == ["test-1", "test-4"]
        assert populated.toggle_session(yoga.id).status == ResultStatus.NOT_FOUND


class TestQueries:

    def test_search_is_case_insensitive(self, populated, yoga) -> None:
        assert populated.search_by_name("HATHA") == [yoga]
        assert populated.search_by_name("zzz") == []

    def test_filter_by_type(self, populated, breathing) -> None:
        assert populated.filter_by_type("BreathingExercise") == [breathing]
        assert populated.filter_by_type(SessionType.BREATHING_EXERCISE) == [breathing]

    def test_filter_by_status(self, populated, yoga) -> None:
        yoga.deactivate()
        assert populated.filter_by_status(False) == [yoga]
        assert yoga not in populated.filter_by_status(True)

    def test_filter_by_difficulty(self, populated, guided, yoga) -> None:
        assert populated.filter_by_difficulty("Principiante") == [guided, yoga]

    def test_filter_by_duration_inclusive_and_ordered(self, populated, guided, breathing, mindfulness) -> None:
        assert populated.filter_by_duration(10, 30) == [guided, breathing, mindfulness]
        assert populated.filter_by_duration(15, 20) == [guided, breathing]
        assert populated.filter_by_duration(46, 100) == []

    def test_filters_compose_by_chaining(self, populated, guided) -> None:
        beginners = populated.filter_by_difficulty("Principiante")
        assert populated.filter_by_duration(10, 30, beginners) == [guided]


class TestStats:

    def test_empty(self, system) -> None:
        assert system.get_stats() == EMPTY_STATS

    def test_single_guided_meditation(self, system, guided) -> None:
        system.add_session(guided)
        stats = system.get_stats()
        assert stats['total_minutes'] == 20
        assert stats['total_calories'] == 60

    def test_breakdowns(self, populated, yoga, practitioner) -> None:
        yoga.deactivate()
        populated.add_user(practitioner)
        stats = populated.get_stats()
        assert stats['total'] == 4
        assert stats['active'] == 3
        assert stats['inactive'] == 1
        assert stats['by_type'] == {
            'GuidedMeditation': 1, 'BreathingExercise': 1, 'YogaSession': 1, 'MindfulnessExercise': 1,
        }
        assert stats['by_difficulty'] == {'Principiante': 2, 'Avanzado': 1, 'Intermedio': 1}
        assert stats['total_minutes'] == 105
        assert stats['total_calories'] == 20 * 3 + 15 * 3 + 45 * 5 + 25 * 3
        assert stats['users'] == 1


class TestUsers:

    def test_duplicate_email_rejected(self, system, practitioner) -> None:
        assert system.add_user(practitioner).success
        duplicate = Instructor("Other", "ana@example.com")
        result = system.add_user(duplicate)
        assert not result.success
        assert result.status == ResultStatus.DUPLICATE_EMAIL
        assert len(system.get_all_users()) == 1

    def test_user_capacity(self) -> None:
        system = MeditationSystem(SystemConfig(max_users=1))
        assert system.add_user(Practitioner("A", "a@example.com")).success
        result = system.add_user(Practitioner("B", "b@example.com"))
        assert result.status == ResultStatus.CAPACITY_REACHED

    def test_add_rejects_non_person(self, system) -> None:
        assert system.add_user("someone").status == ResultStatus.INVALID_ENTITY

    def test_find_and_remove(self, system, practitioner) -> None:
        system.add_user(practitioner)
        assert system.find_user_by_email("ana@example.com") is practitioner
        assert system.find_user(practitioner.id) is practitioner
        assert system.remove_user(practitioner.id).entity is practitioner
        assert system.find_user_by_email("ana@example.com") is None
        assert system.remove_user(practitioner.id).status == ResultStatus.NOT_FOUND

    def test_update_email_keeps_uniqueness(self, system, practitioner, instructor) -> None:
        system.add_user(practitioner)
        system.add_user(instructor)
        clash = system.update_user_email(practitioner.id, "maria@example.com")
        assert clash.status == ResultStatus.DUPLICATE_EMAIL
        assert practitioner.email == "ana@example.com"
        assert system.update_user_email(practitioner.id, "ana@example.com").success
        assert system.update_user_email(practitioner.id, "ana@new.example.com").success
        assert system.find_user_by_email("ana@new.example.com") is practitioner
        with pytest.raises(ValidationError):
            system.update_user_email(practitioner.id, "not-an-email")

    def test_email_setter_on_registered_person_keeps_uniqueness(self, system, practitioner, instructor) -> None:
        system.add_user(practitioner)
        system.add_user(instructor)
        found = system.find_user(practitioner.id)
        with pytest.raises(ValidationError) as exc_info:
            found.email = "maria@example.com"
        assert exc_info.value.error_code == "duplicate_email"
        assert practitioner.email == "ana@example.com"
        assert system.find_user_by_email("maria@example.com") is instructor
        found.email = "ana@new.example.com"
        assert system.find_user_by_email("ana@new.example.com") is practitioner

    def test_removed_person_email_is_unchecked(self, system, practitioner, instructor) -> None:
        system.add_user(practitioner)
        system.add_user(instructor)
        system.remove_user(practitioner.id)
        practitioner.email = "maria@example.com"
        assert practitioner.email == "maria@example.com"


class TestRelationships:

    def test_record_completed_session(self, system, practitioner, guided, now) -> None:
        system.add_user(practitioner)
        system.add_session(guided)
        result = system.record_completed_session(practitioner.id, guided.id)
        assert result.success
        info = practitioner.get_info()
        assert info['sessions_completed'] == 1
        assert info['total_minutes'] == 20
        assert practitioner.get_level() == "Novice"
        assert system.get_completions() == [CompletionRecord(practitioner.id, guided.id, now)]
        assert system.get_stats()['completed_sessions'] == 1

    def test_instructor_completion_is_audited_without_progress(self, system, instructor, yoga) -> None:
        system.add_user(instructor)
        system.add_session(yoga)
        assert system.record_completed_session(instructor.id, yoga.id).success
        assert len(system.get_completions_for(instructor.id)) == 1
        assert 'sessions_completed' not in instructor.get_info()

    def test_duplicate_completions_allowed(self, system, practitioner, yoga) -> None:
        system.add_user(practitioner)
        system.add_session(yoga)
        system.record_completed_session(practitioner.id, yoga.id)
        system.record_completed_session(practitioner.id, yoga.id)
        assert practitioner.sessions_completed == 2
        assert len(system.get_completions()) == 2

    def test_completion_with_missing_ids(self, system, practitioner, guided) -> None:
        system.add_user(practitioner)
        result = system.record_completed_session(practitioner.id, guided.id)
        assert result.status == ResultStatus.NOT_FOUND
        assert system.record_completed_session("ghost", "ghost").status == ResultStatus.NOT_FOUND
        assert system.get_completions() == []

    def test_assign_instructor(self, system, instructor, practitioner, guided) -> None:
        system.add_user(instructor)
        system.add_user(practitioner)
        system.add_session(guided)
        assert system.assign_instructor(instructor.id, guided.id).success
        assert guided.instructor == "Maria Lopez"
        wrong_role = system.assign_instructor(practitioner.id, guided.id)
        assert wrong_role.status == ResultStatus.INVALID_ROLE
        assert system.assign_instructor(instructor.id, "ghost").status == ResultStatus.NOT_FOUND

    def test_removed_session_leaves_dangling_reference(self, system, instructor, guided) -> None:
        system.add_user(instructor)
        system.add_session(guided)
        system.assign_instructor(instructor.id, guided.id)
        system.remove_session(guided.id)
        assert instructor.sessions_teaching == [guided.id]
        assert system.find_session(instructor.sessions_teaching[0]) is None


class TestBulkLoad:

    def test_bulk_load_applies_rules(self, system, guided, yoga, practitioner, now) -> None:
        system.add_session(guided)
        clash = Practitioner("Copy", "ana@example.com")
        record = CompletionRecord(practitioner.id, yoga.id, now)
        result = system.bulk_load(sessions=[guided, yoga], people=[practitioner, clash], completions=[record])
        assert result.success
        assert result.metadata['sessions'] == 1
        assert result.metadata['users'] == 1
        assert result.metadata['completions'] == 1
        assert result.metadata['rejected']['sessions'] == [{'id': guided.id, 'status': "duplicate_id"}]
        assert result.metadata['rejected']['users'] == [{'id': clash.id, 'status': "duplicate_email"}]
        assert result.metadata['rejected']['completions'] == []
        assert practitioner.sessions_completed == 0

    def test_bulk_load_rejects_non_record_completions(self, system, guided, practitioner, now) -> None:
        record = CompletionRecord(practitioner.id, guided.id, now)
        stray = {'person_id': practitioner.id, 'session_id': guided.id}
        result = system.bulk_load(completions=[stray, record])
        assert result.metadata['completions'] == 1
        assert result.metadata['rejected']['completions'] == [{'index': 0, 'status': "invalid_entity"}]
        assert system.get_completions() == [record]


class TestMisc:

    def test_id_helpers(self, system) -> None:
        assert MeditationSystem.is_valid_id("abc")
        assert not MeditationSystem.is_valid_id("")
        assert not MeditationSystem.is_valid_id(42)
        assert system.generate_id() == "test-1"

    def test_concurrent_adds_respect_capacity(self) -> None:
        system = MeditationSystem(SystemConfig(max_sessions=50))
        sessions = [MindfulnessExercise(f"S{i}", "Room") for i in range(200)]

        def worker(chunk):
            for session in chunk:
                system.add_session(session)

        threads = [threading.Thread(target=worker, args=(sessions[i::4],)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(system.get_all_sessions()) == 50

    def test_stats_for_single_breathing_exercise(self, system, breathing: BreathingExercise) -> None:
        system.add_session(breathing)
        assert system.get_stats()['by_type'] == {'BreathingExercise': 1}

    def test_filter_by_type_misses_other_variants(self, system) -> None:
        system.add_session(GuidedMeditation("G", "Room", 5))
        assert system.filter_by_type("YogaSession") == []

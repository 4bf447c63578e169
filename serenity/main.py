"""
Main entry point for the Serenity platform.
"""

import json
from typing import Any, Dict, Optional

import structlog

from .config import SystemConfig, load_config
from .core.enums import Difficulty, MembershipType, Sense, SessionType, Theme
from .core.exceptions import SerenityException
from .core.people import Instructor, Practitioner
from .core.sessions import BreathingExercise, GuidedMeditation, MindfulnessExercise, YogaSession
from .logging_config import configure_logging
from .persistence import SnapshotManager
from .services import MeditationSystem

logger = structlog.get_logger(__name__)


class SerenityApp:
    """Composition root: builds the system once and hands it to collaborators."""

    def __init__(self, config: Optional[SystemConfig] = None):
        self._config = config or SystemConfig()
        configure_logging(self._config.log_level, self._config.json_logs)
        self._system = MeditationSystem(self._config)
        self._snapshots = SnapshotManager(self._system)
        logger.info("system_started", name=self._config.system_name, version=self._config.version)

    @property
    def system(self) -> MeditationSystem:
        return self._system

    @property
    def snapshots(self) -> SnapshotManager:
        return self._snapshots

    def save(self, path: str) -> None:
        """Write a JSON snapshot of the system to ``path``."""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self._snapshots.create_snapshot(), f, ensure_ascii=False, indent=2)
        print(f"✓ Snapshot saved to {path}")

    def load(self, path: str) -> None:
        """Restore a JSON snapshot from ``path`` into the system."""
        with open(path, 'r', encoding='utf-8') as f:
            self._snapshots.restore_snapshot(json.load(f))
        print(f"✓ Snapshot loaded from {path}")

    def create_sample_data(self) -> None:
        """Create the sample catalogue, people and assignments."""
        print("Creating sample data...")
        system = self._system

        morning = GuidedMeditation("Energizing Morning Meditation", "Main Room", 20, Difficulty.BEGINNER,
                                   Theme.FOCUS, "Female", "Nature sounds")
        sleep = GuidedMeditation("Deep Sleep Meditation", "Online", 30, Difficulty.INTERMEDIATE,
                                 Theme.SLEEP, "Male", "Ocean waves")
        box = BreathingExercise("Box Breathing for Anxiety", "Anywhere", 10, Difficulty.BEGINNER,
                                "Box Breathing", 10, 4, 4, 4)
        relaxing = BreathingExercise("Advanced 4-7-8 Technique", "Quiet Room", 15, Difficulty.ADVANCED,
                                     "4-7-8", 8, 4, 7, 8)
        hatha = YogaSession("Basic Hatha Yoga", "Zen Studio", 45, Difficulty.BEGINNER,
                            "Hatha", "Full body", "Mat")
        for pose in ("Child's Pose", "Downward Dog", "Warrior I"):
            hatha.add_pose(pose)
        vinyasa = YogaSession("Dynamic Vinyasa Flow", "Zen Studio", 60, Difficulty.INTERMEDIATE,
                              "Vinyasa", "Core and balance", "Mat and blocks")
        body_scan = MindfulnessExercise("Full Body Scan", "Relaxation Room", 25, Difficulty.BEGINNER,
                                        "Body Scan", "Quiet and comfortable")
        for sense in (Sense.TOUCH, Sense.HEARING):
            body_scan.add_sense(sense)
        eating = MindfulnessExercise("Mindful Eating", "Dining Room", 15, Difficulty.BEGINNER,
                                     "Eating", "Calm table")
        for sense in (Sense.SIGHT, Sense.SMELL, Sense.TASTE, Sense.TOUCH):
            eating.add_sense(sense)

        for session in (morning, sleep, box, relaxing, hatha, vinyasa, body_scan, eating):
            system.add_session(session)

        ana = Practitioner("Ana Garcia", "ana@example.com", 28, "555-0101", MembershipType.PREMIUM)
        ana.add_goal("Reduce anxiety")
        ana.add_goal("Sleep better")
        carlos = Practitioner("Carlos Perez", "carlos@example.com", 35, "555-0102", MembershipType.BASIC)
        carlos.add_goal("Flexibility")
        maria = Instructor("Maria Lopez", "maria@example.com", 42, "555-0201",
                           "Meditation and Mindfulness", 15)
        maria.add_certification("MBSR Mindfulness Certificate")
        maria.add_certification("Yoga Alliance RYT-500")
        maria.update_rating(4.8)
        juan = Instructor("Juan Martinez", "juan@example.com", 38, "555-0202", "Therapeutic Yoga", 10)
        juan.add_certification("Certified Iyengar Yoga")
        juan.update_rating(4.9)

        for person in (ana, carlos, maria, juan):
            system.add_user(person)

        for instructor, session in ((maria, morning), (maria, sleep), (juan, hatha), (juan, vinyasa)):
            system.assign_instructor(instructor.id, session.id)

        print("✓ Sample data created")

    def run_demo(self) -> Dict[str, Any]:
        """Run a demonstration of the platform."""
        print("Running Serenity demonstration...")

        self.create_sample_data()
        system = self._system

        practitioner = system.find_user_by_email("ana@example.com")
        for session in system.filter_by_type(SessionType.GUIDED_MEDITATION):
            result = system.record_completed_session(practitioner.id, session.id)
            print(f"Completion recorded: {result.message}")
        print(f"Practitioner: {practitioner.get_info()}")

        short_beginner = system.filter_by_duration(
            10, 30, system.filter_by_difficulty(Difficulty.BEGINNER)
        )
        print("\n=== Beginner sessions between 10 and 30 minutes ===")
        for session in short_beginner:
            print(f"  - {session.name} ({session.duration} min, ~{session.estimate_calories()} kcal)")

        stats = system.get_stats()
        print("\n=== Statistics ===")
        print(json.dumps(stats, ensure_ascii=False, indent=2))

        print("\n✓ Demo completed")
        return stats


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Serenity meditation and mindfulness tracker")
    parser.add_argument("--demo", action="store_true", help="Load sample data and print statistics")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--load", type=str, help="Snapshot file to restore before running")
    parser.add_argument("--save", type=str, help="Snapshot file to write before exiting")
    parser.add_argument("--log-level", type=str, help="Override the configured log level")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, log_level=args.log_level)
        app = SerenityApp(config)
        if args.load:
            app.load(args.load)
        if args.demo:
            app.run_demo()
        else:
            print(json.dumps(app.system.get_stats(), ensure_ascii=False, indent=2))
        if args.save:
            app.save(args.save)
    except (SerenityException, OSError, json.JSONDecodeError) as e:
        print(f"✗ {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

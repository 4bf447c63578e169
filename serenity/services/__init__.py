"""
Services module containing the meditation system manager.
"""

from .meditation_system import MeditationSystem

__all__ = [
    "MeditationSystem",
]

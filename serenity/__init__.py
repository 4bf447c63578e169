"""
Serenity: a meditation and mindfulness record engine.

An in-memory object model for meditation sessions, practitioners and
instructors, with a manager that owns the collections and answers search,
filter and statistics queries over them.
"""

__version__ = "1.0.0"
__author__ = "Serenity Development Team"
__description__ = "Meditation and mindfulness session tracker core"

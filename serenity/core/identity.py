"""
Identifier generation for entities.

Entities and the manager depend on an ``IdGenerator`` callable instead of a
process-wide generator, so callers (and tests) can supply deterministic ids.
"""

import itertools
import threading
import uuid
from typing import Callable


IdGenerator = Callable[[], str]


def uuid_generator() -> str:
    """Default generator: a random UUID4 string."""
    return str(uuid.uuid4())


class SequentialIdGenerator:
    """Deterministic generator producing ``<prefix>-1``, ``<prefix>-2``, ..."""
    
    def __init__(self, prefix: str = "id", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
    
    def __call__(self) -> str:
        with self._lock:
            return f"{self._prefix}-{next(self._counter)}"

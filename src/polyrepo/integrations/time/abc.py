"""Clock abstraction for testing.

Release notes are dated with the current day; tests pin the date through
FakeTime instead of depending on the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local date and time."""
        ...

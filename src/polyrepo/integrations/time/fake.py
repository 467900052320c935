"""Fake Time implementation for testing."""

from datetime import datetime

from polyrepo.integrations.time.abc import Time


class FakeTime(Time):
    """In-memory fake that always reports the same moment.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(self, *, current: datetime | None = None) -> None:
        """Create FakeTime.

        Args:
            current: Moment returned by now(); defaults to 2024-01-15 12:00
        """
        self._current = current or datetime(2024, 1, 15, 12, 0, 0)

    def now(self) -> datetime:
        return self._current

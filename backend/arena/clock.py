"""Injectable time sources."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from arena.utils.time_utils import ensure_utc


class Clock(ABC):
    """Supplies the current UTC time."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a given instant; tests move it explicitly."""

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, **kwargs) -> None:
        self._instant += timedelta(**kwargs)



# student_insights/core/clock.py
from datetime import datetime, timezone
from typing import Callable

# Services read "now" through a Clock so a computation can be replayed
# against a fixed instant.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def fixed_clock(instant: datetime) -> Clock:
    def _now() -> datetime:
        return instant

    return _now

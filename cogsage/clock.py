"""Clock sources for the temporal pathway"""

from datetime import datetime


class SystemClock:
    """Local wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Always returns the same instant; useful for reproducible output"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

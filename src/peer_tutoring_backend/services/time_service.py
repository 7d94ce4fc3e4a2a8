'''

'''
from datetime import date, datetime

from ..common.config import settings
from ..common.logger import log


class TimeService:
    """
    Provides the "current" time to the rest of the application.

    Returns the real wall-clock time, or the fixed SIMULATION_DATETIME
    setting when one is configured (for fast-forwarding during manual testing).
    """
    def __init__(self, simulation_datetime: datetime | None = None):
        self.simulation_datetime = simulation_datetime or settings.SIMULATION_DATETIME
        if self.simulation_datetime is not None:
            log.debug(f"TimeService running on simulated time {self.simulation_datetime.isoformat()}.")

    def now(self) -> datetime:
        """Naive local time, the same frame as the timeslot table."""
        if self.simulation_datetime is None:
            return datetime.now()
        if self.simulation_datetime.tzinfo is not None:
            return self.simulation_datetime.astimezone().replace(tzinfo=None)
        return self.simulation_datetime

    def today(self) -> date:
        return self.now().date()


def get_time_service() -> TimeService:
    """FastAPI dependency. Tests override it with a fixed clock."""
    return TimeService()
